import logging
from typing import Dict, List
import requests
from ...config import ModelConfig
from ...errors import RequestFailure
from ..ollama_utils import ollama_base_url
from ..result import QueryResult

logger = logging.getLogger(__name__)


def _prepare_options(model_config: ModelConfig) -> Dict:
    options = {}
    if model_config.temperature is not None:
        options["temperature"] = model_config.temperature
    if model_config.top_p is not None:
        options["top_p"] = model_config.top_p
    if model_config.max_tokens is not None:
        options["num_predict"] = model_config.max_tokens
    if model_config.stop:
        stop = model_config.stop
        options["stop"] = [stop] if isinstance(stop, str) else list(stop)
    return options


def query_ollama(
    client: requests.Session,
    model: str,
    messages: List[Dict],
    model_config: ModelConfig,
) -> QueryResult:
    """Query an Ollama server via the /api/chat endpoint.

    The client should be a requests.Session with a base_url attribute pointing to the
    Ollama server (default: http://localhost:11434). Ollama always returns a single
    choice, so ``n`` is ignored.
    """
    base_url = getattr(client, "base_url", None) or ollama_base_url()
    payload = {
        "model": model,
        "messages": messages,
        "stream": False,
        "options": _prepare_options(model_config),
    }

    try:
        response = client.post(
            f"{base_url}/api/chat",
            json=payload,
            timeout=model_config.timeout,
        )
        response.raise_for_status()
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        raise RequestFailure(str(e)) from e

    message = data.get("message") or {}
    return QueryResult(
        content=message.get("content"),
        model_name=model,
        input_tokens=data.get("prompt_eval_count", 0) or 0,
        output_tokens=data.get("eval_count", 0) or 0,
    )
