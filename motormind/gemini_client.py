from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

import google.generativeai as genai

from .config import Settings

logger = logging.getLogger("motormind.oracle")

MAX_OUTPUT_TOKENS = 2048
# Category names are passed as strings; every category is unblocked.
HARM_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)
DEFAULT_SAFETY_SETTINGS = [{"category": category, "threshold": "BLOCK_NONE"} for category in HARM_CATEGORIES]


class GeminiClient:
    """Oracle backed by the Gemini SDK: system instruction + user message in, text out."""

    def __init__(self, settings: Settings) -> None:
        """Purpose: Configure the Gemini SDK for the resolution oracle.
        Inputs/Outputs: Input is Settings; no return value.
        Side Effects / State: Configures the SDK global API key; prepares a model cache.
        Dependencies: Uses google.generativeai and Settings from config.
        Failure Modes: Raises ValueError if API key or model name is missing.
        If Removed: The resolution pipeline has no oracle and the app fails at startup.
        Testing Notes: Validate missing key raises ValueError.
        """
        # Configure API key and remember the default model.
        if not settings.gemini_api_key:
            raise ValueError("GEMINI_API_KEY is required")
        genai.configure(api_key=settings.gemini_api_key)
        self._temperature = settings.oracle_temperature
        self._default_model = _normalize_model_name(settings.gemini_model)
        if not self._default_model:
            raise ValueError("Gemini model name is required")
        # Keyed by (model name, system instruction); there are four instructions per model.
        self._models: Dict[Tuple[str, str], genai.GenerativeModel] = {}

    def complete(self, system_instruction: str, message: str, model: Optional[str] = None) -> str:
        """Purpose: Answer one user message under a system instruction.
        Inputs/Outputs: Inputs are the instruction, the user message, optional model;
            returns the stripped response text ("" when the model gave none).
        Side Effects / State: May add a model to the internal cache.
        Dependencies: Uses _model_for and _response_text.
        Failure Modes: SDK/network errors propagate; blocked replies come back as "".
        If Removed: Extraction, allocation, and reply steps cannot call the LLM.
        Testing Notes: Stub genai.GenerativeModel and check the instruction reaches it.
        """
        model_name = _normalize_model_name(model) if model else self._default_model
        if not model_name:
            raise ValueError("Gemini model name is required")
        generation_config = {
            "temperature": self._temperature,
            "max_output_tokens": MAX_OUTPUT_TOKENS,
        }
        contents = [{"role": "user", "parts": [{"text": message}]}]

        try:
            client = self._model_for(model_name, system_instruction)
            response = client.generate_content(
                contents,
                generation_config=generation_config,
                safety_settings=DEFAULT_SAFETY_SETTINGS,
            )
        except TypeError:
            # Older SDKs reject system_instruction; send it inline instead.
            combined = f"{system_instruction}\n\n" + _flatten_contents(contents)
            response = genai.GenerativeModel(model_name).generate_content(
                combined,
                generation_config=generation_config,
                safety_settings=DEFAULT_SAFETY_SETTINGS,
            )
        return _response_text(response)

    def _model_for(self, model_name: str, system_instruction: str) -> genai.GenerativeModel:
        key = (model_name, system_instruction)
        if key not in self._models:
            self._models[key] = genai.GenerativeModel(model_name, system_instruction=system_instruction)
        return self._models[key]


def _response_text(response: object) -> str:
    # response.text raises ValueError when the candidate was blocked or has no parts.
    try:
        text: Optional[str] = getattr(response, "text", None)
    except ValueError:
        logger.warning("gemini response carried no text part")
        return ""
    return (text or "").strip()


def _normalize_model_name(name: Optional[str]) -> str:
    # Strip "models/" prefix and whitespace.
    if not name:
        return ""
    cleaned = name.strip()
    if cleaned.startswith("models/"):
        return cleaned.split("/", 1)[1]
    return cleaned


def _flatten_contents(contents: list) -> str:
    """Join role-tagged text parts into one prompt for SDKs without system_instruction."""
    parts: List[str] = []
    for entry in contents:
        if not isinstance(entry, dict):
            continue
        role = entry.get("role", "")
        texts = [
            str(segment["text"])
            for segment in entry.get("parts", []) or []
            if isinstance(segment, dict) and segment.get("text")
        ]
        if texts:
            prefix = f"{role.upper()}: " if role else ""
            parts.append(prefix + "\n".join(texts))
    return "\n\n".join(parts)
