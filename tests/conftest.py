import pytest

from prepwise.infrastructure.data import JsonDocumentStore
from prepwise.interview.catalog import InterviewRepository
from prepwise.interview.events import InterviewEventBus
from prepwise.interview.feedback_gateway import FeedbackRepository
from prepwise.interview.testing import (
    FakeVoiceTransport, MockLLMClient, RecordingNotifier, RecordingNavigator,
    sample_feedback_scores
)


@pytest.fixture
def store(tmp_path):
    return JsonDocumentStore(str(tmp_path / "data"))


@pytest.fixture
def feedback_repo(store):
    return FeedbackRepository(store)


@pytest.fixture
def interview_repo(store):
    return InterviewRepository(store)


@pytest.fixture
def transport():
    return FakeVoiceTransport()


@pytest.fixture
def event_bus():
    return InterviewEventBus()


@pytest.fixture
def llm_client():
    return MockLLMClient(object_responses=[sample_feedback_scores()])


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def navigator():
    return RecordingNavigator()
