from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List

BASE_DIR = Path(__file__).resolve().parent


@dataclass(frozen=True)
class Settings:
    """Configuration container for the oracle, inventory storage, and HTTP surface."""
    gemini_api_key: str
    gemini_model: str
    oracle_temperature: float
    inventory_path: Path
    seed_path: Path
    seed_on_startup: bool
    prompts_dir: Path
    cors_origins: List[str]
    log_level: str


def load_settings() -> Settings:
    """Purpose: Build Settings from MotorMind environment variables.
    Inputs/Outputs: No inputs; returns a frozen Settings.
    Side Effects / State: Reads os.environ only; no files are touched.
    Dependencies: BASE_DIR anchors the default inventory, seed and prompt paths.
    Failure Modes: A non-numeric ORACLE_TEMPERATURE raises ValueError.
    If Removed: create_app has no oracle model, store path or CORS origins.
    Testing Notes: monkeypatch env vars; CORS_ORIGINS drops blank entries.
    """
    # Paths default relative to the package; SEED_PATH points at the repo resources.
    inventory_path = os.getenv("INVENTORY_PATH")
    inventory_file = Path(inventory_path) if inventory_path else (BASE_DIR / "data" / "inventory.json")

    seed_path = os.getenv("SEED_PATH")
    if seed_path:
        seed_file = Path(seed_path)
    else:
        seed_file = (BASE_DIR / ".." / "resources" / "sample_inventory.json").resolve()

    origins = os.getenv("CORS_ORIGINS", "http://localhost:5173")

    return Settings(
        gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
        gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
        oracle_temperature=float(os.getenv("ORACLE_TEMPERATURE", "0.2")),
        inventory_path=inventory_file,
        seed_path=seed_file,
        seed_on_startup=os.getenv("SEED_ON_STARTUP", "1") != "0",
        prompts_dir=(BASE_DIR / "prompts").resolve(),
        cors_origins=[origin.strip() for origin in origins.split(",") if origin.strip()],
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
