"""Interview session components.

This module contains the business logic for running AI-powered voice interviews:
the call state machine, transcript capture, feedback generation and navigation.
"""

# Core orchestrator class
from .orchestrator import SessionOrchestrator, feedback_route

# Data models
from .models import (
    Speaker, SessionMode, CallStatus, TranscriptLine, SessionRequest,
    Session, FeedbackRequest, NavigationResult
)

# Structured schemas
from .schemas import (
    CategoryScore, FeedbackScores, FeedbackRecord, InterviewRecord, User,
    parse_question_list, strip_code_fences
)

# Session core
from .state_machine import SessionStateMachine
from .transport import TransportEventAdapter
from .prompts import (
    InterviewPrompts, PromptFormatter, FeedbackPrompt,
    build_question_prompt, build_feedback_prompt
)

# Persistence and services
from .feedback_gateway import FeedbackRepository, UpsertResult
from .catalog import InterviewRepository
from .auth import UserProvider, StaticUserProvider, StoredUserProvider
from .notifications import Notifier, ConsoleNotifier
from .services import QuestionGenerationService, FeedbackService

# Event system
from .events import (
    InterviewEventBus, EventLogger, InterviewMetrics,
    EventType, InterviewEvent, ConnectedEvent, DisconnectedEvent,
    TranscriptFragmentEvent, SpeechStartedEvent, SpeechStoppedEvent,
    TransportErrorEvent, StatusChangedEvent, FeedbackSavedEvent, FeedbackFailedEvent
)

__all__ = [
    # Orchestrator
    "SessionOrchestrator", "feedback_route",

    # Data models
    "Speaker", "SessionMode", "CallStatus", "TranscriptLine", "SessionRequest",
    "Session", "FeedbackRequest", "NavigationResult",

    # Schemas
    "CategoryScore", "FeedbackScores", "FeedbackRecord", "InterviewRecord", "User",
    "parse_question_list", "strip_code_fences",

    # Session core
    "SessionStateMachine", "TransportEventAdapter",
    "InterviewPrompts", "PromptFormatter", "FeedbackPrompt",
    "build_question_prompt", "build_feedback_prompt",

    # Persistence and services
    "FeedbackRepository", "UpsertResult", "InterviewRepository",
    "UserProvider", "StaticUserProvider", "StoredUserProvider",
    "Notifier", "ConsoleNotifier",
    "QuestionGenerationService", "FeedbackService",

    # Events
    "InterviewEventBus", "EventLogger", "InterviewMetrics",
    "EventType", "InterviewEvent", "ConnectedEvent", "DisconnectedEvent",
    "TranscriptFragmentEvent", "SpeechStartedEvent", "SpeechStoppedEvent",
    "TransportErrorEvent", "StatusChangedEvent", "FeedbackSavedEvent", "FeedbackFailedEvent",
]
