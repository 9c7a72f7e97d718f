"""
Error taxonomy for the PrepWise interview session core.
"""


class InterviewError(Exception):
    """Base class for interview session failures."""


class ConfigurationError(InterviewError):
    """A required identifier (workflow id, question list, credentials) is missing."""


class TransportError(InterviewError):
    """The voice transport failed or rejected the call."""


class ParseError(InterviewError):
    """A question-generation response was not a well-formed list of strings."""


class FeedbackGenerationError(InterviewError):
    """The scoring call failed or its output did not match the feedback schema."""


class PersistenceError(InterviewError):
    """A document write failed."""
