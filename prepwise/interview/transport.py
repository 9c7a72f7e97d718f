"""
Per-session adapter from voice transport callbacks to typed session events.
"""
import time
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from .events import (
    InterviewEventBus, ConnectedEvent, DisconnectedEvent, TranscriptFragmentEvent,
    SpeechStartedEvent, SpeechStoppedEvent, TransportErrorEvent
)
from ..infrastructure.voice.base import (
    VoiceTransport, CALL_START, CALL_END, MESSAGE, SPEECH_START, SPEECH_END, ERROR
)

logger = logging.getLogger("transport_adapter")

PENDING_SESSION_ID = "pending"


class TransportEventAdapter:
    """
    Owns the listener registrations of one session on a voice transport.

    ``attach`` registers one listener per raw notification; ``dispose``
    removes all of them exactly once. Listeners that still fire after
    disposal are ignored.
    """

    def __init__(self,
                 transport: VoiceTransport,
                 event_bus: InterviewEventBus,
                 clock: Callable[[], float] = time.time):
        self.transport = transport
        self.event_bus = event_bus
        self.clock = clock
        self.session_id: Optional[str] = None
        self._registrations: List[Tuple[str, Callable[..., None]]] = []
        self._attached = False
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def attach(self) -> None:
        """Subscribe to every transport notification."""
        if self._attached or self._disposed:
            raise RuntimeError("Transport adapter can only be attached once")
        self._attached = True

        for raw_event, listener in (
            (CALL_START, self._on_call_start),
            (CALL_END, self._on_call_end),
            (MESSAGE, self._on_message),
            (SPEECH_START, self._on_speech_start),
            (SPEECH_END, self._on_speech_end),
            (ERROR, self._on_error),
        ):
            self.transport.on(raw_event, listener)
            self._registrations.append((raw_event, listener))
        logger.debug(f"Attached {len(self._registrations)} transport listeners")

    def dispose(self) -> bool:
        """
        Remove every listener registered by ``attach``.

        Returns:
            True on the first call, False on any later call
        """
        if self._disposed:
            return False
        self._disposed = True

        for raw_event, listener in self._registrations:
            try:
                self.transport.remove_listener(raw_event, listener)
            except Exception as e:
                logger.warning(f"Failed to remove {raw_event} listener: {e}")
        logger.debug(f"Disposed {len(self._registrations)} transport listeners")
        self._registrations.clear()
        return True

    def _current_id(self) -> str:
        return self.session_id or PENDING_SESSION_ID

    def _emit(self, event) -> None:
        if self._disposed:
            logger.debug(f"Dropping {event.event_type} received after teardown")
            return
        self.event_bus.emit(event)

    def _on_call_start(self, call: Optional[Dict[str, Any]] = None) -> None:
        if isinstance(call, dict) and call.get("id"):
            self.session_id = str(call["id"])
        self._emit(ConnectedEvent(self._current_id(), self.clock()))

    def _on_call_end(self, *_: Any) -> None:
        self._emit(DisconnectedEvent(self._current_id(), self.clock()))

    def _on_message(self, message: Dict[str, Any]) -> None:
        if not isinstance(message, dict) or message.get("type") != "transcript":
            logger.debug(f"Ignoring non-transcript message: {message!r}")
            return
        self._emit(TranscriptFragmentEvent(
            self._current_id(), self.clock(),
            speaker=str(message.get("role", "")),
            text=str(message.get("transcript", "")),
            is_final=message.get("transcriptType") == "final"
        ))

    def _on_speech_start(self, *_: Any) -> None:
        self._emit(SpeechStartedEvent(self._current_id(), self.clock()))

    def _on_speech_end(self, *_: Any) -> None:
        self._emit(SpeechStoppedEvent(self._current_id(), self.clock()))

    def _on_error(self, error: Any = None) -> None:
        if isinstance(error, dict):
            message = str(error.get("message") or error)
        else:
            message = str(error) if error is not None else "Unknown transport error"
        self._emit(TransportErrorEvent(self._current_id(), self.clock(), message))
