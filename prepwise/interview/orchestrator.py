"""
Session orchestrator: wires the voice transport, the call state machine,
feedback generation and navigation for one client.
"""
import time
import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Callable, Dict, List, Optional, Sequence

from .events import (
    InterviewEventBus, EventLogger, InterviewMetrics, EventType, InterviewEvent,
    TRANSPORT_EVENT_TYPES, FeedbackSavedEvent, FeedbackFailedEvent
)
from .feedback_gateway import FeedbackRepository
from .models import (
    CallStatus, FeedbackRequest, NavigationResult, SessionMode, SessionRequest, TranscriptLine
)
from .notifications import Notifier, INFO, SUCCESS, ERROR
from .auth import UserProvider
from .prompts import PromptFormatter
from .services import FeedbackService
from .state_machine import SessionStateMachine
from .transport import TransportEventAdapter
from ..config import HOME_REDIRECT_DELAY, HOME_ROUTE, InterviewerPersona
from ..errors import ConfigurationError, InterviewError
from ..infrastructure.voice import VoiceTransport

logger = logging.getLogger("orchestrator")


def feedback_route(interview_id: str) -> str:
    return f"/interview/{interview_id}/feedback"


class SessionOrchestrator:
    """
    Client-side driver for voice interview sessions.

    Every ``start`` builds a fresh event bus, state machine and transport
    adapter. When a session finishes, feedback generation (or the delayed
    home redirect) runs on an executor and ends with exactly one
    ``navigate`` call.
    """

    def __init__(self,
                 transport: VoiceTransport,
                 feedback_service: FeedbackService,
                 feedback_repository: FeedbackRepository,
                 user_provider: UserProvider,
                 navigate: Callable[[str], None],
                 notifier: Notifier,
                 persona: Optional[InterviewerPersona] = None,
                 workflow_id: Optional[str] = None,
                 home_redirect_delay: float = HOME_REDIRECT_DELAY,
                 executor: Optional[Executor] = None,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.time):
        self.transport = transport
        self.feedback_service = feedback_service
        self.feedback_repository = feedback_repository
        self.user_provider = user_provider
        self.navigate = navigate
        self.notifier = notifier
        self.persona = persona or InterviewerPersona()
        self.workflow_id = workflow_id
        self.home_redirect_delay = home_redirect_delay
        self.sleep = sleep
        self.clock = clock

        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="feedback")

        # Shared across sessions
        self.event_logger = EventLogger()
        self.metrics = InterviewMetrics()

        self.machine: Optional[SessionStateMachine] = None
        self.adapter: Optional[TransportEventAdapter] = None
        self.last_navigation: Optional[NavigationResult] = None
        self._pending: Optional[Future] = None
        self._closed = False
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # UI surface
    # ------------------------------------------------------------------

    @property
    def status(self) -> CallStatus:
        return self.machine.status if self.machine else CallStatus.INACTIVE

    @property
    def speaking(self) -> bool:
        return self.machine.speaking if self.machine else False

    @property
    def last_message(self) -> str:
        return self.machine.last_message if self.machine else ""

    @property
    def transcript(self) -> Sequence[TranscriptLine]:
        return self.machine.transcript if self.machine else ()

    def get_metrics(self) -> Dict[str, int]:
        return self.metrics.get_metrics()

    # ------------------------------------------------------------------
    # Session control
    # ------------------------------------------------------------------

    def start(self,
              mode: SessionMode,
              interview_id: Optional[str] = None,
              questions: Optional[List[str]] = None,
              feedback_id: Optional[str] = None) -> bool:
        """
        Start a voice session.

        Returns:
            True if the transport accepted the call, False if the start was
            refused (signed out, incomplete configuration, transport rejection)
        """
        with self._lock:
            if self.machine and self.machine.status in (CallStatus.CONNECTING, CallStatus.ACTIVE):
                self.notifier.notify(ERROR, "A call is already in progress")
                return False

            user = self.user_provider.get_current_user()
            if user is None:
                logger.warning("Start refused: no signed-in user")
                self.notifier.notify(ERROR, "Please sign in to start a call")
                return False

            request = SessionRequest(
                mode=mode,
                user_name=user.name,
                user_id=user.id,
                interview_id=interview_id,
                questions=list(questions or []),
                workflow_id=self.workflow_id,
                feedback_id=feedback_id,
            )

            event_bus = InterviewEventBus()
            event_bus.subscribe_all(self.event_logger.handle_event)
            event_bus.subscribe_all(self.metrics.handle_event)

            machine = SessionStateMachine(mode, event_bus, clock=self.clock)
            self.machine = machine
            self.adapter = None
            try:
                machine.start(request)
            except ConfigurationError as e:
                logger.error(f"Start refused: {e}")
                self.notifier.notify(ERROR, str(e))
                return False

            adapter = TransportEventAdapter(self.transport, event_bus, clock=self.clock)
            self.adapter = adapter
            for event_type in TRANSPORT_EVENT_TYPES:
                event_bus.subscribe(event_type, machine.handle_event)
            event_bus.subscribe(EventType.STATUS_CHANGED, self._on_status_changed)
            machine.on_terminal(lambda m: self._on_terminal(m, adapter))
            machine.on_abort(lambda m, reason: self._on_abort(adapter, reason))
            adapter.attach()

        self.notifier.notify(INFO, "Connecting...")
        try:
            self._dispatch(request)
        except Exception as e:
            logger.error(f"Transport rejected the call: {e}")
            adapter.dispose()
            machine.abort(f"Transport rejected the call: {e}")
            self.notifier.notify(ERROR, "Failed to start the call")
            return False
        return True

    def _dispatch(self, request: SessionRequest) -> None:
        if request.mode is SessionMode.INTERVIEW:
            logger.info(f"Starting interview {request.interview_id} with {len(request.questions)} questions "
                        f"({PromptFormatter.describe_persona(self.persona)})")
            self.transport.start(
                assistant=PromptFormatter.build_interviewer_assistant(self.persona),
                variable_values={"questions": PromptFormatter.format_questions(request.questions)},
            )
        else:
            logger.info(f"Starting intake workflow {request.workflow_id} for user {request.user_id}")
            self.transport.start(
                workflow_id=request.workflow_id,
                variable_values={"username": request.user_name, "userid": request.user_id},
            )

    def end(self) -> bool:
        """
        Hang up the active call.

        Returns:
            True if this call finished the session
        """
        machine = self.machine
        if machine is None or not machine.end():
            return False
        try:
            self.transport.stop()
        except Exception as e:
            logger.warning(f"Transport stop failed: {e}")
        return True

    def wait(self, timeout: Optional[float] = None) -> Optional[NavigationResult]:
        """Block until the post-session continuation has navigated."""
        pending = self._pending
        if pending is None:
            return None
        return pending.result(timeout)

    def close(self) -> None:
        """Abandon any live call and release the transport subscriptions."""
        machine, adapter = self.machine, self.adapter
        if adapter is not None:
            adapter.dispose()
        if machine is not None and machine.abort("Session closed"):
            try:
                self.transport.stop()
            except Exception as e:
                logger.warning(f"Transport stop failed: {e}")
        self._closed = True
        if self._owns_executor:
            self.executor.shutdown(wait=True)

    # ------------------------------------------------------------------
    # State machine callbacks
    # ------------------------------------------------------------------

    def _on_status_changed(self, event: InterviewEvent) -> None:
        current = event.data["current"]
        if current == CallStatus.ACTIVE.value:
            self.notifier.notify(SUCCESS, "Call connected!")
        elif current == CallStatus.FINISHED.value:
            self.notifier.notify(INFO, "Call ended")

    def _on_abort(self, adapter: TransportEventAdapter, reason: str) -> None:
        # Start failures and close() dispose first and report on their own
        if adapter.dispose():
            self.notifier.notify(ERROR, "Call error occurred")

    def _on_terminal(self, machine: SessionStateMachine, adapter: TransportEventAdapter) -> None:
        adapter.dispose()
        if self._closed:
            logger.warning("Session finished after close, no post-session continuation")
            return
        try:
            self._pending = self.executor.submit(self._complete_session, machine)
        except RuntimeError as e:
            logger.error(f"Could not schedule post-session continuation: {e}")

    # ------------------------------------------------------------------
    # Post-session continuation
    # ------------------------------------------------------------------

    def _complete_session(self, machine: SessionStateMachine) -> NavigationResult:
        request = machine.request
        transcript = machine.transcript

        if request.mode is SessionMode.INTERVIEW and transcript:
            try:
                result = self._generate_feedback(machine, request, transcript)
            except Exception as e:
                logger.error(f"Feedback step crashed for interview {request.interview_id}: {e}", exc_info=True)
                result = self._feedback_unavailable(machine, request, e)
        else:
            if request.mode is SessionMode.INTERVIEW:
                logger.info("Interview ended without transcript, skipping feedback")
            self.sleep(self.home_redirect_delay)
            result = NavigationResult(target=HOME_ROUTE, reason="session finished")

        self.last_navigation = result
        logger.info(f"Navigating to {result.target} ({result.reason})")
        self.navigate(result.target)
        return result

    def _generate_feedback(self, machine: SessionStateMachine, request: SessionRequest,
                           transcript: Sequence[TranscriptLine]) -> NavigationResult:
        session_id = machine.session_id or "pending"
        feedback_id = request.feedback_id
        if not feedback_id:
            existing = self.feedback_repository.get_feedback_by_interview_id(
                request.interview_id, request.user_id
            )
            if existing is not None:
                logger.info(f"Reusing feedback {existing.id} for interview {request.interview_id}")
                feedback_id = existing.id

        try:
            result = self.feedback_service.create_feedback(FeedbackRequest(
                interview_id=request.interview_id,
                user_id=request.user_id,
                transcript=transcript,
                feedback_id=feedback_id,
            ))
        except InterviewError as e:
            logger.error(f"Feedback unavailable for interview {request.interview_id}: {e}")
            return self._feedback_unavailable(machine, request, e)

        machine.event_bus.emit(FeedbackSavedEvent(
            session_id, self.clock(), request.interview_id, result.feedback_id, result.record.total_score
        ))
        return NavigationResult(
            target=feedback_route(request.interview_id),
            reason="feedback saved",
            feedback_id=result.feedback_id,
        )

    def _feedback_unavailable(self, machine: SessionStateMachine, request: SessionRequest,
                              error: Exception) -> NavigationResult:
        machine.event_bus.emit(FeedbackFailedEvent(
            machine.session_id or "pending", self.clock(), request.interview_id,
            type(error).__name__, str(error)
        ))
        self.notifier.notify(ERROR, "Feedback unavailable, please try again later")
        return NavigationResult(target=HOME_ROUTE, reason="feedback unavailable")
