from typing import Dict, List
import openai
from ...config import ModelConfig
from ...errors import MalformedResponse, RequestFailure
from ..result import QueryResult


def query_openai(
    client: openai.OpenAI,
    model: str,
    messages: List[Dict],
    model_config: ModelConfig,
) -> QueryResult:
    """Send a chat completion request to an OpenAI compatible endpoint.

    Covers OpenAI, Azure OpenAI, DeepSeek and Gemini, which all speak the same
    protocol. Only the first of the ``n`` returned choices is used.
    """
    kwargs = dict(
        model=model,
        messages=messages,
        n=model_config.n,
    )
    if model_config.max_tokens is not None:
        kwargs["max_tokens"] = model_config.max_tokens
    if model_config.stop:
        kwargs["stop"] = model_config.stop
    if model_config.temperature is not None:
        kwargs["temperature"] = model_config.temperature
    if model_config.top_p is not None:
        kwargs["top_p"] = model_config.top_p
    if model_config.timeout is not None:
        kwargs["timeout"] = model_config.timeout

    try:
        response = client.chat.completions.create(**kwargs)
    except openai.OpenAIError as e:
        raise RequestFailure(str(e)) from e

    if not response.choices:
        raise MalformedResponse(f"Unexpected response without choices: {response}")
    message = response.choices[0].message
    usage = response.usage
    return QueryResult(
        content=message.content if message is not None else None,
        model_name=model,
        input_tokens=usage.prompt_tokens if usage else 0,
        output_tokens=usage.completion_tokens if usage else 0,
    )
