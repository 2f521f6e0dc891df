from typing import Dict, List
import anthropic
from ...config import ModelConfig
from ...errors import RequestFailure
from ..result import QueryResult


# The Messages API requires max_tokens.
DEFAULT_MAX_TOKENS = 1024


def query_anthropic(
    client: anthropic.Anthropic,
    model: str,
    messages: List[Dict],
    model_config: ModelConfig,
) -> QueryResult:
    """Query a Claude model through the Anthropic Messages API.

    The system message is passed separately, as the API expects. The API returns
    a single completion, so ``n`` is ignored.
    """
    system_msg = "\n".join(m["content"] for m in messages if m["role"] == "system")
    kwargs = dict(
        model=model,
        messages=[m for m in messages if m["role"] != "system"],
        max_tokens=model_config.max_tokens or DEFAULT_MAX_TOKENS,
    )
    if system_msg:
        kwargs["system"] = system_msg
    if model_config.stop:
        stop = model_config.stop
        kwargs["stop_sequences"] = [stop] if isinstance(stop, str) else list(stop)
    if model_config.temperature is not None:
        kwargs["temperature"] = model_config.temperature
    if model_config.top_p is not None:
        kwargs["top_p"] = model_config.top_p
    if model_config.timeout is not None:
        kwargs["timeout"] = model_config.timeout

    try:
        response = client.messages.create(**kwargs)
    except anthropic.AnthropicError as e:
        raise RequestFailure(str(e)) from e

    text_blocks = [block.text for block in response.content if block.type == "text"]
    return QueryResult(
        content=text_blocks[0] if text_blocks else None,
        model_name=model,
        input_tokens=response.usage.input_tokens,
        output_tokens=response.usage.output_tokens,
    )
