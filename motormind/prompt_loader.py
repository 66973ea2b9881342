from __future__ import annotations

from pathlib import Path


def load_prompt(prompt_path: Path) -> str:
    """Read an oracle instruction file, dropping a leading BOM and undecodable bytes.

    A missing file raises FileNotFoundError; every resolution step needs its prompt.
    """
    raw = prompt_path.read_bytes()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        text = raw.decode("utf-8", errors="ignore")
    return text.lstrip("\ufeff")


def render_prompt(prompts_dir: Path, name: str, **values: str) -> str:
    # Placeholders are written as <<KEY>> in the prompt files.
    text = load_prompt(prompts_dir / f"{name}.txt")
    for key, value in values.items():
        text = text.replace(f"<<{key.upper()}>>", value)
    return text
