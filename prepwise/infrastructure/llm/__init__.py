"""LLM client infrastructure."""

from .client import (
    VertexRestClient, LLMClient, LLMRequestError,
    SchemaValidationError, parse_structured_output
)

__all__ = [
    "VertexRestClient", "LLMClient", "LLMRequestError",
    "SchemaValidationError", "parse_structured_output"
]
