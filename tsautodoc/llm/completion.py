import json
import logging
from typing import Any, Dict, List, Optional, Tuple

import anthropic
import openai
import requests

from ..config import ModelConfig
from ..errors import MalformedResponse, RequestFailure
from .client import get_client_llm
from .models import query_anthropic, query_ollama, query_openai
from .result import QueryResult

logger = logging.getLogger(__name__)

# Clients are created lazily, one per configured model name.
_clients: Dict[str, Tuple[Any, str]] = {}


def _get_client(model_name: str) -> Tuple[Any, str]:
    if model_name not in _clients:
        try:
            _clients[model_name] = get_client_llm(model_name)
        except (openai.OpenAIError, anthropic.AnthropicError, KeyError, ValueError) as e:
            raise RequestFailure(f"Cannot create a client for {model_name}: {e}") from e
    return _clients[model_name]


def build_messages(system_content: str, user_message: str) -> List[Dict]:
    return [
        {"role": "system", "content": system_content},
        {"role": "user", "content": user_message},
    ]


def query(messages: List[Dict], model_config: ModelConfig) -> QueryResult:
    """Send ``messages`` once to the provider serving ``model_config.model``."""
    client, model = _get_client(model_config.model)
    if isinstance(client, requests.Session):
        return query_ollama(client, model, messages, model_config)
    if isinstance(client, anthropic.Anthropic):
        return query_anthropic(client, model, messages, model_config)
    return query_openai(client, model, messages, model_config)


def complete(
    system_content: str, user_message: str, model_config: ModelConfig
) -> Optional[str]:
    """Ask the completion endpoint for a single answer.

    Returns the first choice's message content with surrounding whitespace
    removed, or None if the request failed or the answer had no content.
    Failures are logged and never propagated.
    """
    messages = build_messages(system_content, user_message)
    try:
        logger.info(f"Sending prompt to the API: {json.dumps(messages)}")
        result = query(messages, model_config)
        logger.info(f"Response from the API: {result.content}")
        if not result.content:
            raise MalformedResponse(f"Unexpected message format: {result!r}")
        return result.content.strip()
    except (RequestFailure, MalformedResponse) as e:
        logger.error(f"Error with the completion request: {e}")
        return None
