"""
PrepWise: AI-powered mock interview session core.

Runs a voice interview session, captures the transcript in real time and
turns it into structured feedback scored by an LLM.
"""

__version__ = "1.0.0"

# Main entry points
from .interview.orchestrator import SessionOrchestrator
from .interview.models import SessionMode, CallStatus, TranscriptLine
from .errors import (
    InterviewError, ConfigurationError, TransportError, ParseError,
    FeedbackGenerationError, PersistenceError
)

__all__ = [
    "SessionOrchestrator", "SessionMode", "CallStatus", "TranscriptLine",
    "InterviewError", "ConfigurationError", "TransportError", "ParseError",
    "FeedbackGenerationError", "PersistenceError",
]
