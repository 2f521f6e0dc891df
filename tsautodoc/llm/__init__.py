from .client import get_client_llm, required_credential, required_settings
from .completion import build_messages, complete, query
from .result import QueryResult

__all__ = [
    "get_client_llm",
    "required_credential",
    "required_settings",
    "build_messages",
    "complete",
    "query",
    "QueryResult",
]
