from typing import Any, List, Optional, Tuple
import os
import anthropic
import openai
import requests
from .ollama_utils import is_ollama_model_name, normalize_ollama_model_name, ollama_base_url

AZURE_PREFIX = "azure-"
# Settings AzureOpenAI refuses to start without, besides the key.
AZURE_SETTINGS = ("AZURE_API_VERSION", "AZURE_API_ENDPOINT")


def required_credential(model_name: str) -> Optional[str]:
    """Return the environment variable holding the API key for ``model_name``.

    Local Ollama models need no key, in which case None is returned.
    """
    if is_ollama_model_name(model_name):
        return None
    if model_name.startswith("claude"):
        return "ANTHROPIC_API_KEY"
    if model_name.startswith(AZURE_PREFIX):
        return "AZURE_OPENAI_API_KEY"
    if model_name.startswith("deepseek"):
        return "DEEPSEEK_API_KEY"
    if model_name.startswith("gemini"):
        return "GEMINI_API_KEY"
    return "OPENAI_API_KEY"


def required_settings(model_name: str) -> List[str]:
    """Return every environment variable that must be set to query ``model_name``."""
    credential = required_credential(model_name)
    settings = [credential] if credential else []
    if model_name.startswith(AZURE_PREFIX):
        settings.extend(AZURE_SETTINGS)
    return settings


def get_client_llm(model_name: str) -> Tuple[Any, str]:
    """Get the client and model for the given model name.

    SDK-level retries are switched off: every declaration gets exactly one
    request.

    Args:
        model_name (str): The model identifier from the configuration.

    Returns:
        The client and the model name to send to it.
    """
    if is_ollama_model_name(model_name):
        model_name = normalize_ollama_model_name(model_name)
        client = requests.Session()
        # Attach base URL on the session for downstream query handling.
        client.base_url = ollama_base_url()
    elif model_name.startswith("claude"):
        client = anthropic.Anthropic(max_retries=0)
    elif model_name.startswith(AZURE_PREFIX):
        model_name = model_name[len(AZURE_PREFIX):]
        client = openai.AzureOpenAI(
            api_key=os.getenv("AZURE_OPENAI_API_KEY"),
            api_version=os.getenv("AZURE_API_VERSION"),
            azure_endpoint=os.getenv("AZURE_API_ENDPOINT"),
            max_retries=0,
        )
    elif model_name.startswith("deepseek"):
        client = openai.OpenAI(
            api_key=os.environ["DEEPSEEK_API_KEY"],
            base_url="https://api.deepseek.com",
            max_retries=0,
        )
    elif model_name.startswith("gemini"):
        client = openai.OpenAI(
            api_key=os.environ["GEMINI_API_KEY"],
            base_url="https://generativelanguage.googleapis.com/v1beta/openai/",
            max_retries=0,
        )
    else:
        client = openai.OpenAI(max_retries=0)

    return client, model_name
