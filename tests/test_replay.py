import json

import pytest

from prepwise.interview.auth import StaticUserProvider
from prepwise.interview.events import EventType
from prepwise.interview.feedback_gateway import FeedbackRepository
from prepwise.interview.models import CallStatus, SessionMode
from prepwise.interview.orchestrator import SessionOrchestrator
from prepwise.interview.services import FeedbackService
from prepwise.interview.testing import (
    ImmediateExecutor, MockLLMClient, SAMPLE_QUESTIONS, SAMPLE_TRANSCRIPT, SAMPLE_USER,
    sample_feedback_scores
)
from prepwise.interview.transport import TransportEventAdapter
from prepwise.infrastructure.voice import ReplayTransport, load_transcript_file


def test_load_transcript_file(tmp_path):
    path = tmp_path / "call.json"
    path.write_text(json.dumps(SAMPLE_TRANSCRIPT), encoding="utf-8")

    assert load_transcript_file(str(path)) == SAMPLE_TRANSCRIPT


@pytest.mark.parametrize("content", ['{"role": "user"}', '[{"role": "user"}]'])
def test_load_transcript_file_rejects_bad_shapes(tmp_path, content):
    path = tmp_path / "call.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ValueError):
        load_transcript_file(str(path))


def test_replay_emits_interim_and_final_fragments(event_bus):
    events = []
    event_bus.subscribe_all(events.append)
    transport = ReplayTransport(SAMPLE_TRANSCRIPT[:2], call_id="replay_1")
    TransportEventAdapter(transport, event_bus).attach()

    transport.start()

    fragments = [e for e in events if e.event_type is EventType.TRANSCRIPT_FRAGMENT]
    assert [f.data["is_final"] for f in fragments] == [False, True, False, True]
    assert events[0].event_type is EventType.CONNECTED
    assert events[1].event_type is EventType.SPEECH_STARTED
    assert events[-1].event_type is EventType.DISCONNECTED
    assert all(e.session_id == "replay_1" for e in events)


def test_replayed_interview_produces_feedback(feedback_repo, notifier, navigator):
    transport = ReplayTransport(SAMPLE_TRANSCRIPT)
    llm = MockLLMClient(object_responses=[sample_feedback_scores(68)])
    orchestrator = SessionOrchestrator(
        transport=transport,
        feedback_service=FeedbackService(llm, feedback_repo),
        feedback_repository=feedback_repo,
        user_provider=StaticUserProvider(SAMPLE_USER),
        navigate=navigator,
        notifier=notifier,
        executor=ImmediateExecutor(),
        sleep=lambda seconds: None,
    )

    assert orchestrator.start(SessionMode.INTERVIEW, interview_id="iv_7", questions=SAMPLE_QUESTIONS) is True

    assert orchestrator.status is CallStatus.FINISHED
    assert len(orchestrator.transcript) == len(SAMPLE_TRANSCRIPT)
    assert navigator.targets == ["/interview/iv_7/feedback"]
    assert FeedbackRepository(feedback_repo.store).get_feedback_by_interview_id("iv_7", SAMPLE_USER.id).total_score == 68
    assert transport.listener_count() == 0
    assert transport.start_args["variable_values"]["questions"].startswith("- Tell me about a project")
