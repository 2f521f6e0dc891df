"""Model-name and endpoint helpers for local Ollama servers."""
import os
from typing import Optional

OLLAMA_PREFIXES = ("ollama://", "ollama:", "ollama/", "ollama-")
DEFAULT_OLLAMA_URL = "http://localhost:11434"


def is_ollama_model_name(model_name: Optional[str]) -> bool:
    """Return True when the configured model is served by Ollama."""
    if not model_name:
        return False
    return model_name.lower().startswith("ollama")


def normalize_ollama_model_name(model_name: str) -> str:
    """Drop the ``ollama:`` style prefix, e.g. ``ollama:llama3`` -> ``llama3``."""
    for prefix in OLLAMA_PREFIXES:
        if model_name.lower().startswith(prefix):
            return model_name[len(prefix):].lstrip("/: ")
    return model_name


def ollama_base_url() -> str:
    return os.getenv("OLLAMA_BASE_URL", DEFAULT_OLLAMA_URL).rstrip("/")
