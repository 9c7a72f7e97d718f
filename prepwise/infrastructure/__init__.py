"""Infrastructure components for the PrepWise session core.

This module contains low-level technical components that provide
foundational capabilities for the interview system.
"""

# Persistence infrastructure
from .data import JsonDocumentStore

# LLM infrastructure
from .llm import VertexRestClient, LLMRequestError, SchemaValidationError

# Voice infrastructure
from .voice import VoiceTransport, ReplayTransport, VapiRestClient

__all__ = [
    # Persistence
    "JsonDocumentStore",

    # LLM client
    "VertexRestClient", "LLMRequestError", "SchemaValidationError",

    # Voice transport
    "VoiceTransport", "ReplayTransport", "VapiRestClient"
]
