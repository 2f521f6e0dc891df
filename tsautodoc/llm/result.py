from dataclasses import dataclass
from typing import Optional


@dataclass
class QueryResult:
    """The first choice returned by a provider, before trimming."""

    content: Optional[str]
    model_name: str
    input_tokens: int = 0
    output_tokens: int = 0
