"""
Testing infrastructure with mock services for the interview session core.
"""
import copy
import tempfile
from concurrent.futures import Executor, Future
from typing import Dict, Any, List, Optional, Tuple, Type

from pydantic import BaseModel

from .auth import StaticUserProvider
from .catalog import InterviewRepository
from .feedback_gateway import FeedbackRepository
from .schemas import FeedbackRecord, User
from .services import FeedbackService, QuestionGenerationService
from ..config import FEEDBACK_CATEGORIES
from ..infrastructure.data import JsonDocumentStore
from ..infrastructure.llm.client import parse_structured_output
from ..infrastructure.voice.base import (
    CallbackTransport, CALL_START, CALL_END, MESSAGE, SPEECH_START, SPEECH_END, ERROR
)


class FakeVoiceTransport(CallbackTransport):
    """
    Voice transport driven by the test.

    ``start`` only records its arguments; the test then plays the call with
    ``connect``, ``say``, ``partial``, ``disconnect`` and ``fail``.
    """

    def __init__(self, reject_with: Optional[Exception] = None, call_id: str = "call_123"):
        super().__init__()
        self.reject_with = reject_with
        self.call_id = call_id
        self.start_calls: List[Dict[str, Any]] = []
        self.stop_calls = 0

    def start(self,
              assistant: Optional[Dict[str, Any]] = None,
              workflow_id: Optional[str] = None,
              variable_values: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        self.start_calls.append({
            "assistant": assistant,
            "workflow_id": workflow_id,
            "variable_values": variable_values,
        })
        if self.reject_with is not None:
            raise self.reject_with
        return {"id": self.call_id}

    def stop(self) -> None:
        self.stop_calls += 1

    def connect(self) -> None:
        self._fire(CALL_START, {"id": self.call_id})

    def disconnect(self) -> None:
        self._fire(CALL_END)

    def say(self, role: str, text: str) -> None:
        """Deliver one final transcript fragment."""
        self._fire(MESSAGE, {"type": "transcript", "transcriptType": "final", "role": role, "transcript": text})

    def partial(self, role: str, text: str) -> None:
        """Deliver one interim transcript fragment."""
        self._fire(MESSAGE, {"type": "transcript", "transcriptType": "partial", "role": role, "transcript": text})

    def speech_start(self) -> None:
        self._fire(SPEECH_START)

    def speech_end(self) -> None:
        self._fire(SPEECH_END)

    def fail(self, message: str = "Meeting has ended") -> None:
        self._fire(ERROR, {"message": message})


class MockLLMClient:
    """Mock LLM client for testing."""

    def __init__(self,
                 text_responses: Optional[List[Any]] = None,
                 object_responses: Optional[List[Any]] = None):
        # Entries are raw strings/dicts to return, or exceptions to raise
        self.text_responses = list(text_responses or [])
        self.object_responses = list(object_responses or [])
        self.request_history: List[Dict[str, Any]] = []

    def generate_text(self, prompt: str) -> str:
        self.request_history.append({"kind": "text", "prompt": prompt})
        if not self.text_responses:
            raise AssertionError("MockLLMClient has no text response queued")
        response = self.text_responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def generate_object(self, schema: Type[BaseModel], prompt: str, system: Optional[str] = None):
        self.request_history.append({"kind": "object", "schema": schema, "prompt": prompt, "system": system})
        if not self.object_responses:
            raise AssertionError("MockLLMClient has no object response queued")
        response = self.object_responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, dict):
            return schema.model_validate(response)
        return parse_structured_output(schema, response)


class RecordingNotifier:
    """Collects user notices instead of showing them."""

    def __init__(self):
        self.notices: List[Tuple[str, str]] = []

    def notify(self, level: str, message: str) -> None:
        self.notices.append((level, message))

    def messages(self, level: Optional[str] = None) -> List[str]:
        return [m for lvl, m in self.notices if level is None or lvl == level]


class RecordingNavigator:
    """Collects navigation targets."""

    def __init__(self):
        self.targets: List[str] = []

    def __call__(self, target: str) -> None:
        self.targets.append(target)


class ImmediateExecutor(Executor):
    """Runs submitted work on the calling thread."""

    def submit(self, fn, *args, **kwargs):
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except BaseException as e:
            future.set_exception(e)
        return future


SAMPLE_USER = User(id="user_1", name="Ada", email="ada@example.com")

SAMPLE_QUESTIONS = [
    "Tell me about a project you are proud of.",
    "How do you approach debugging a production issue?",
    "What does a good code review look like to you?",
]

SAMPLE_TRANSCRIPT = [
    {"role": "assistant", "content": "Hello! Tell me about a project you are proud of."},
    {"role": "user", "content": "I rebuilt our billing pipeline and cut failures by half."},
    {"role": "assistant", "content": "How do you approach debugging a production issue?"},
    {"role": "user", "content": "I start from the logs, reproduce it locally, then bisect."},
]


def sample_feedback_scores(total: int = 72) -> Dict[str, Any]:
    """A scoring response in the shape the model is asked to produce."""
    return {
        "totalScore": total,
        "categoryScores": [
            {"name": name, "score": max(0, min(100, total + offset)), "comment": f"{name} comment"}
            for name, offset in zip(FEEDBACK_CATEGORIES, (5, -3, 0, 8, -10))
        ],
        "strengths": ["Clear structure", "Concrete examples"],
        "areasForImprovement": ["Go deeper on trade-offs"],
        "finalAssessment": "Solid candidate with room to grow on system design.",
    }


def create_mock_session_setup(data_dir: Optional[str] = None,
                              object_responses: Optional[List[Any]] = None,
                              text_responses: Optional[List[Any]] = None,
                              user: Optional[User] = SAMPLE_USER) -> Dict[str, Any]:
    """Create a complete mock session setup for testing."""
    store = JsonDocumentStore(data_dir or tempfile.mkdtemp())
    llm_client = MockLLMClient(
        text_responses=text_responses,
        object_responses=object_responses if object_responses is not None else [sample_feedback_scores()],
    )
    interviews = InterviewRepository(store)
    feedback = FeedbackRepository(store)

    return {
        "store": store,
        "llm_client": llm_client,
        "interviews": interviews,
        "feedback": feedback,
        "feedback_service": FeedbackService(llm_client, feedback),
        "question_service": QuestionGenerationService(llm_client, interviews),
        "user_provider": StaticUserProvider(copy.deepcopy(user)),
        "transport": FakeVoiceTransport(),
        "notifier": RecordingNotifier(),
        "navigator": RecordingNavigator(),
    }


class FeedbackRecordCheck:
    """Helper for validating stored feedback."""

    @staticmethod
    def validate_record(record: FeedbackRecord) -> List[str]:
        """
        Validate a feedback record and return list of issues found.

        Returns:
            List of validation error messages (empty if valid)
        """
        issues = []

        names = [c.name for c in record.category_scores]
        if names != list(FEEDBACK_CATEGORIES):
            issues.append(f"Unexpected categories: {names}")

        if not (0 <= record.total_score <= 100):
            issues.append(f"Total score out of range: {record.total_score}")

        for category in record.category_scores:
            if not (0 <= category.score <= 100):
                issues.append(f"{category.name} score out of range: {category.score}")

        if not record.final_assessment:
            issues.append("Missing final assessment")

        return issues

    @staticmethod
    def assert_valid_record(record: FeedbackRecord) -> None:
        """Assert that a feedback record is valid, raising AssertionError if not."""
        issues = FeedbackRecordCheck.validate_record(record)
        if issues:
            raise AssertionError(f"Invalid feedback record: {'; '.join(issues)}")
