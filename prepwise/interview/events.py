"""
Event-driven architecture for the interview session core.
"""
import logging
from abc import ABC
from typing import Dict, Any, List, Callable, Optional
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger("events")


class EventType(str, Enum):
    """Types of session events."""
    # Republished transport notifications
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    TRANSCRIPT_FRAGMENT = "transcript_fragment"
    SPEECH_STARTED = "speech_started"
    SPEECH_STOPPED = "speech_stopped"
    TRANSPORT_ERROR = "transport_error"
    # Session lifecycle
    STATUS_CHANGED = "status_changed"
    FEEDBACK_SAVED = "feedback_saved"
    FEEDBACK_FAILED = "feedback_failed"


TRANSPORT_EVENT_TYPES = (
    EventType.CONNECTED,
    EventType.DISCONNECTED,
    EventType.TRANSCRIPT_FRAGMENT,
    EventType.SPEECH_STARTED,
    EventType.SPEECH_STOPPED,
    EventType.TRANSPORT_ERROR,
)


@dataclass
class InterviewEvent(ABC):
    """Base class for all session events."""
    event_type: EventType
    session_id: str
    timestamp: float
    data: Dict[str, Any]


@dataclass
class ConnectedEvent(InterviewEvent):
    """Event fired when the transport reports the call is live."""
    def __init__(self, session_id: str, timestamp: float):
        super().__init__(
            event_type=EventType.CONNECTED,
            session_id=session_id,
            timestamp=timestamp,
            data={}
        )


@dataclass
class DisconnectedEvent(InterviewEvent):
    """Event fired when the transport reports the call has ended."""
    def __init__(self, session_id: str, timestamp: float):
        super().__init__(
            event_type=EventType.DISCONNECTED,
            session_id=session_id,
            timestamp=timestamp,
            data={}
        )


@dataclass
class TranscriptFragmentEvent(InterviewEvent):
    """Event fired for every partial or final transcript fragment."""
    def __init__(self, session_id: str, timestamp: float, speaker: str,
                 text: str, is_final: bool):
        super().__init__(
            event_type=EventType.TRANSCRIPT_FRAGMENT,
            session_id=session_id,
            timestamp=timestamp,
            data={
                "speaker": speaker,
                "text": text,
                "is_final": is_final
            }
        )


@dataclass
class SpeechStartedEvent(InterviewEvent):
    """Event fired when the AI starts speaking."""
    def __init__(self, session_id: str, timestamp: float):
        super().__init__(
            event_type=EventType.SPEECH_STARTED,
            session_id=session_id,
            timestamp=timestamp,
            data={}
        )


@dataclass
class SpeechStoppedEvent(InterviewEvent):
    """Event fired when the AI stops speaking."""
    def __init__(self, session_id: str, timestamp: float):
        super().__init__(
            event_type=EventType.SPEECH_STOPPED,
            session_id=session_id,
            timestamp=timestamp,
            data={}
        )


@dataclass
class TransportErrorEvent(InterviewEvent):
    """Event fired when the voice engine reports a failure."""
    def __init__(self, session_id: str, timestamp: float, message: str):
        super().__init__(
            event_type=EventType.TRANSPORT_ERROR,
            session_id=session_id,
            timestamp=timestamp,
            data={"message": message}
        )


@dataclass
class StatusChangedEvent(InterviewEvent):
    """Event fired on every call status transition."""
    def __init__(self, session_id: str, timestamp: float, previous: str, current: str):
        super().__init__(
            event_type=EventType.STATUS_CHANGED,
            session_id=session_id,
            timestamp=timestamp,
            data={
                "previous": previous,
                "current": current
            }
        )


@dataclass
class FeedbackSavedEvent(InterviewEvent):
    """Event fired when a feedback record has been written."""
    def __init__(self, session_id: str, timestamp: float, interview_id: str,
                 feedback_id: str, total_score: int):
        super().__init__(
            event_type=EventType.FEEDBACK_SAVED,
            session_id=session_id,
            timestamp=timestamp,
            data={
                "interview_id": interview_id,
                "feedback_id": feedback_id,
                "total_score": total_score
            }
        )


@dataclass
class FeedbackFailedEvent(InterviewEvent):
    """Event fired when feedback generation or persistence failed."""
    def __init__(self, session_id: str, timestamp: float, interview_id: str,
                 error_type: str, error_message: str):
        super().__init__(
            event_type=EventType.FEEDBACK_FAILED,
            session_id=session_id,
            timestamp=timestamp,
            data={
                "interview_id": interview_id,
                "error_type": error_type,
                "error_message": error_message
            }
        )


EventHandler = Callable[[InterviewEvent], None]


class InterviewEventBus:
    """Event bus for communication inside one session."""

    def __init__(self):
        self._handlers: Dict[EventType, List[EventHandler]] = {}
        self._global_handlers: List[EventHandler] = []

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """
        Subscribe to specific event type.

        Args:
            event_type: Type of event to listen for
            handler: Function to call when event occurs
        """
        if event_type not in self._handlers:
            self._handlers[event_type] = []
        self._handlers[event_type].append(handler)
        logger.debug(f"Subscribed handler to {event_type}")

    def subscribe_all(self, handler: EventHandler) -> None:
        """
        Subscribe to all events.

        Args:
            handler: Function to call for any event
        """
        self._global_handlers.append(handler)
        logger.debug("Subscribed global handler")

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """
        Unsubscribe from specific event type.

        Args:
            event_type: Type of event to stop listening for
            handler: Handler function to remove
        """
        if event_type in self._handlers:
            try:
                self._handlers[event_type].remove(handler)
                logger.debug(f"Unsubscribed handler from {event_type}")
            except ValueError:
                logger.warning(f"Handler not found for {event_type}")

    def emit(self, event: InterviewEvent) -> None:
        """
        Emit an event to all subscribers.

        Args:
            event: Event to emit
        """
        logger.debug(f"Emitting event: {event.event_type} for session {event.session_id}")

        # Call specific handlers
        for handler in list(self._handlers.get(event.event_type, [])):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event.event_type}: {e}")

        # Call global handlers
        for handler in list(self._global_handlers):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in global event handler: {e}")

    def handler_count(self, event_type: Optional[EventType] = None) -> int:
        """Number of handlers for one event type, or for all types."""
        if event_type is not None:
            return len(self._handlers.get(event_type, []))
        return sum(len(h) for h in self._handlers.values()) + len(self._global_handlers)

    def clear_handlers(self) -> None:
        """Clear all event handlers."""
        self._handlers.clear()
        self._global_handlers.clear()
        logger.debug("Cleared all event handlers")


class EventLogger:
    """Logs all events for debugging and analysis."""

    def __init__(self, log_level: int = logging.INFO):
        self.logger = logging.getLogger("event_logger")
        self.logger.setLevel(log_level)

    def handle_event(self, event: InterviewEvent) -> None:
        """Log event details."""
        self.logger.info(f"Event: {event.event_type} | Session: {event.session_id} | Data: {event.data}")


class InterviewMetrics:
    """Collects metrics from session events."""

    def __init__(self):
        self.sessions_connected = 0
        self.sessions_finished = 0
        self.sessions_aborted = 0
        self.final_fragments = 0
        self.interim_fragments = 0
        self.feedback_saved = 0
        self.feedback_failed = 0

    def handle_event(self, event: InterviewEvent) -> None:
        """Update metrics based on event."""
        if event.event_type == EventType.CONNECTED:
            self.sessions_connected += 1
        elif event.event_type == EventType.STATUS_CHANGED:
            if event.data["current"] == "FINISHED":
                self.sessions_finished += 1
            elif event.data["current"] == "INACTIVE" and event.data["previous"] != "INACTIVE":
                self.sessions_aborted += 1
        elif event.event_type == EventType.TRANSCRIPT_FRAGMENT:
            if event.data["is_final"]:
                self.final_fragments += 1
            else:
                self.interim_fragments += 1
        elif event.event_type == EventType.FEEDBACK_SAVED:
            self.feedback_saved += 1
        elif event.event_type == EventType.FEEDBACK_FAILED:
            self.feedback_failed += 1

    def get_metrics(self) -> Dict[str, int]:
        """Get current metrics snapshot."""
        return {
            "sessions_connected": self.sessions_connected,
            "sessions_finished": self.sessions_finished,
            "sessions_aborted": self.sessions_aborted,
            "final_fragments": self.final_fragments,
            "interim_fragments": self.interim_fragments,
            "feedback_saved": self.feedback_saved,
            "feedback_failed": self.feedback_failed
        }

    def reset(self) -> None:
        """Reset all metrics to zero."""
        self.sessions_connected = 0
        self.sessions_finished = 0
        self.sessions_aborted = 0
        self.final_fragments = 0
        self.interim_fragments = 0
        self.feedback_saved = 0
        self.feedback_failed = 0
