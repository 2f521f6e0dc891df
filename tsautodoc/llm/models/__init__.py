from .claude import query_anthropic
from .ollama import query_ollama
from .openai_chat import query_openai

__all__ = ["query_anthropic", "query_ollama", "query_openai"]
