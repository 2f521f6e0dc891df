"""Generate JSDoc comments and unit tests for TypeScript code with an LLM."""

__version__ = "0.1.0"
