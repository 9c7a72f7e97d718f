"""
Call state machine for one interview session.

    INACTIVE -> CONNECTING -> ACTIVE -> FINISHED

FINISHED is terminal. A transport error sends any live session back to
INACTIVE and abandons it. Every instance serves a single call.
"""
import time
import logging
import threading
from typing import Callable, List, Optional, Tuple

from .events import InterviewEvent, InterviewEventBus, EventType, StatusChangedEvent
from .models import CallStatus, Session, SessionMode, SessionRequest, Speaker, TranscriptLine
from ..errors import ConfigurationError

logger = logging.getLogger("state_machine")

TerminalObserver = Callable[['SessionStateMachine'], None]
AbortObserver = Callable[['SessionStateMachine', str], None]


def validate_request(request: SessionRequest) -> None:
    """
    Check that a start request carries what its mode needs.

    Raises:
        ConfigurationError: If a required identifier is missing
    """
    if not request.user_id or not request.user_name:
        raise ConfigurationError("User id and name are required to start a call")

    if request.mode is SessionMode.INTERVIEW:
        if not request.interview_id:
            raise ConfigurationError("Interview id is required for an interview call")
        if not [q for q in request.questions if q and q.strip()]:
            raise ConfigurationError("Interview call requires at least one question")
    elif request.mode is SessionMode.GENERATE:
        if not request.workflow_id:
            raise ConfigurationError("Voice workflow id not configured")
    else:
        raise ConfigurationError(f"Unsupported session mode: {request.mode!r}")


class SessionStateMachine:
    """Authoritative state of one voice call."""

    def __init__(self, mode: SessionMode, event_bus: Optional[InterviewEventBus] = None,
                 clock: Callable[[], float] = time.time):
        self.session = Session(mode=mode)
        self.event_bus = event_bus or InterviewEventBus()
        self.clock = clock
        self.request: Optional[SessionRequest] = None
        self.abort_reason: Optional[str] = None
        self._lock = threading.RLock()
        self._started = False
        self._finalized = False
        self._terminal_observers: List[TerminalObserver] = []
        self._abort_observers: List[AbortObserver] = []

    # ------------------------------------------------------------------
    # Read-only view for the UI layer
    # ------------------------------------------------------------------

    @property
    def status(self) -> CallStatus:
        return self.session.status

    @property
    def speaking(self) -> bool:
        return self.session.speaking

    @property
    def preview(self) -> str:
        return self.session.preview

    @property
    def last_message(self) -> str:
        return self.session.last_message

    @property
    def transcript(self) -> Tuple[TranscriptLine, ...]:
        with self._lock:
            return tuple(self.session.transcript)

    @property
    def session_id(self) -> Optional[str]:
        return self.session.session_id

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def on_terminal(self, observer: TerminalObserver) -> None:
        """Register a callback run once when the session reaches FINISHED."""
        self._terminal_observers.append(observer)

    def on_abort(self, observer: AbortObserver) -> None:
        """Register a callback run once when the session is abandoned."""
        self._abort_observers.append(observer)

    # ------------------------------------------------------------------
    # User-initiated transitions
    # ------------------------------------------------------------------

    def start(self, request: SessionRequest) -> None:
        """
        INACTIVE -> CONNECTING.

        Raises:
            ConfigurationError: If the request is incomplete; status stays INACTIVE
            RuntimeError: If this instance already served a call
        """
        with self._lock:
            if self._started or self.session.status is not CallStatus.INACTIVE:
                raise RuntimeError("A session instance can only be started once")
            if request.mode is not self.session.mode:
                raise ConfigurationError(
                    f"Request mode {request.mode.value} does not match session mode {self.session.mode.value}"
                )
            validate_request(request)
            self._started = True
            self.request = request
            self._set_status(CallStatus.CONNECTING)

    def end(self) -> bool:
        """
        ACTIVE -> FINISHED on user request.

        Returns:
            True if this call finished the session
        """
        with self._lock:
            if self.session.status is not CallStatus.ACTIVE:
                logger.debug(f"end() ignored in status {self.session.status.value}")
                return False
            fire = self._finish()
        if fire:
            self._notify_terminal()
        return True

    def abort(self, reason: str) -> bool:
        """
        CONNECTING/ACTIVE -> INACTIVE, abandoning the session.

        Returns:
            True if the session was abandoned by this call
        """
        with self._lock:
            if self.session.status not in (CallStatus.CONNECTING, CallStatus.ACTIVE):
                logger.debug(f"abort() ignored in status {self.session.status.value}")
                return False
            self.abort_reason = reason
            self.session.speaking = False
            self.session.preview = ""
            self._set_status(CallStatus.INACTIVE)
        logger.warning(f"Session abandoned: {reason}")
        for observer in list(self._abort_observers):
            observer(self, reason)
        return True

    # ------------------------------------------------------------------
    # Transport-driven transitions
    # ------------------------------------------------------------------

    def handle_event(self, event: InterviewEvent) -> None:
        """Advance the machine with one transport event."""
        event_type = event.event_type
        if event_type is EventType.CONNECTED:
            self._on_connected(event)
        elif event_type is EventType.DISCONNECTED:
            self._on_disconnected()
        elif event_type is EventType.TRANSCRIPT_FRAGMENT:
            self._on_fragment(event)
        elif event_type is EventType.SPEECH_STARTED:
            self._set_speaking(True)
        elif event_type is EventType.SPEECH_STOPPED:
            self._set_speaking(False)
        elif event_type is EventType.TRANSPORT_ERROR:
            self.abort(event.data.get("message") or "Transport error")
        else:
            logger.debug(f"State machine ignores {event_type}")

    def _on_connected(self, event: InterviewEvent) -> None:
        with self._lock:
            if self.session.status is not CallStatus.CONNECTING:
                logger.warning(f"Connected event ignored in status {self.session.status.value}")
                return
            if event.session_id and event.session_id != "pending":
                self.session.session_id = event.session_id
            self._set_status(CallStatus.ACTIVE)

    def _on_disconnected(self) -> None:
        with self._lock:
            if self.session.status not in (CallStatus.CONNECTING, CallStatus.ACTIVE):
                logger.debug(f"Disconnected event ignored in status {self.session.status.value}")
                return
            fire = self._finish()
        if fire:
            self._notify_terminal()

    def _on_fragment(self, event: InterviewEvent) -> None:
        text = (event.data.get("text") or "").strip()
        with self._lock:
            if self.session.status is not CallStatus.ACTIVE:
                logger.debug(f"Transcript fragment dropped in status {self.session.status.value}")
                return
            if not event.data.get("is_final"):
                self.session.preview = text
                return
            if not text:
                logger.debug("Empty final fragment dropped")
                return
            try:
                speaker = Speaker(event.data.get("speaker"))
            except ValueError:
                logger.warning(f"Unknown speaker {event.data.get('speaker')!r}, fragment dropped")
                return
            self.session.transcript.append(TranscriptLine(speaker=speaker, text=text))
            self.session.preview = ""

    def _set_speaking(self, speaking: bool) -> None:
        with self._lock:
            if self.session.status is CallStatus.FINISHED:
                return
            self.session.speaking = speaking

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _finish(self) -> bool:
        """Move to FINISHED; returns True the first time only. Caller holds the lock."""
        self.session.speaking = False
        self.session.preview = ""
        self._set_status(CallStatus.FINISHED)
        if self._finalized:
            return False
        self._finalized = True
        return True

    def _notify_terminal(self) -> None:
        logger.info(f"Session {self.session_id or 'pending'} finished with "
                    f"{len(self.session.transcript)} transcript lines")
        for observer in list(self._terminal_observers):
            observer(self)

    def _set_status(self, status: CallStatus) -> None:
        previous = self.session.status
        if previous is status:
            return
        self.session.status = status
        logger.info(f"Call status {previous.value} -> {status.value}")
        self.event_bus.emit(StatusChangedEvent(
            self.session_id or "pending", self.clock(), previous.value, status.value
        ))
