import threading

import pytest

from prepwise.errors import ConfigurationError
from prepwise.interview.events import EventType, TRANSPORT_EVENT_TYPES
from prepwise.interview.models import CallStatus, SessionMode, SessionRequest, Speaker
from prepwise.interview.state_machine import SessionStateMachine
from prepwise.interview.transport import TransportEventAdapter

QUESTIONS = ["Why this role?", "Describe a hard bug."]


def _interview_request(**overrides):
    values = dict(mode=SessionMode.INTERVIEW, user_name="Ada", user_id="user_1",
                  interview_id="iv_1", questions=list(QUESTIONS))
    values.update(overrides)
    return SessionRequest(**values)


def _wire(transport, event_bus, mode=SessionMode.INTERVIEW):
    machine = SessionStateMachine(mode, event_bus)
    for event_type in TRANSPORT_EVENT_TYPES:
        event_bus.subscribe(event_type, machine.handle_event)
    TransportEventAdapter(transport, event_bus).attach()
    return machine


@pytest.fixture
def machine(transport, event_bus):
    machine = _wire(transport, event_bus)
    machine.start(_interview_request())
    return machine


def test_start_moves_to_connecting(transport, event_bus):
    machine = _wire(transport, event_bus)
    assert machine.status is CallStatus.INACTIVE

    machine.start(_interview_request())

    assert machine.status is CallStatus.CONNECTING


@pytest.mark.parametrize("overrides", [
    {"questions": []},
    {"questions": ["   "]},
    {"interview_id": None},
    {"user_id": ""},
])
def test_incomplete_interview_request_stays_inactive(transport, event_bus, overrides):
    machine = _wire(transport, event_bus)

    with pytest.raises(ConfigurationError):
        machine.start(_interview_request(**overrides))

    assert machine.status is CallStatus.INACTIVE


def test_generate_requires_workflow_id(transport, event_bus):
    machine = _wire(transport, event_bus, SessionMode.GENERATE)
    request = SessionRequest(mode=SessionMode.GENERATE, user_name="Ada", user_id="user_1")

    with pytest.raises(ConfigurationError, match="workflow"):
        machine.start(request)
    assert machine.status is CallStatus.INACTIVE


def test_instance_serves_a_single_call(machine):
    with pytest.raises(RuntimeError):
        machine.start(_interview_request())


def test_connect_activates_and_records_session_id(machine, transport):
    transport.connect()

    assert machine.status is CallStatus.ACTIVE
    assert machine.session_id == "call_123"


def test_interim_fragments_never_reach_the_transcript(machine, transport):
    transport.connect()
    transport.partial("user", "I thin")
    transport.partial("user", "I think that")

    assert machine.transcript == ()
    assert machine.preview == "I think that"


def test_final_fragments_append_in_order(machine, transport):
    transport.connect()
    lines = [("assistant", "Why this role?"), ("user", "I like the team."),
             ("assistant", "Describe a hard bug."), ("user", "A race in our cache.")]
    for role, text in lines:
        transport.partial(role, text[:3])
        transport.say(role, text)

    assert [(line.speaker.value, line.text) for line in machine.transcript] == lines
    assert machine.last_message == "A race in our cache."
    assert machine.preview == ""


def test_fragments_outside_active_are_dropped(machine, transport):
    transport.say("user", "too early")
    assert machine.transcript == ()

    transport.connect()
    transport.say("user", "on time")
    transport.disconnect()
    transport.say("user", "too late")

    assert [line.text for line in machine.transcript] == ["on time"]


def test_unknown_speaker_and_blank_text_are_dropped(machine, transport):
    transport.connect()
    transport.say("moderator", "hello")
    transport.say("user", "   ")

    assert machine.transcript == ()


def test_speaking_indicator(machine, transport):
    transport.connect()
    transport.speech_start()
    assert machine.speaking is True

    transport.speech_end()
    assert machine.speaking is False


def test_disconnect_finishes_active_session(machine, transport):
    transport.connect()
    transport.disconnect()

    assert machine.status is CallStatus.FINISHED


def test_disconnect_while_connecting_finishes_session(machine, transport):
    transport.disconnect()

    assert machine.status is CallStatus.FINISHED
    assert machine.transcript == ()


def test_transport_error_abandons_session(machine, transport):
    terminal, aborted = [], []
    machine.on_terminal(terminal.append)
    machine.on_abort(lambda m, reason: aborted.append(reason))

    transport.connect()
    transport.say("user", "hello")
    transport.fail("Meeting ejected")

    assert machine.status is CallStatus.INACTIVE
    assert aborted == ["Meeting ejected"]
    assert terminal == []


def test_transport_error_after_finish_is_ignored(machine, transport):
    transport.connect()
    transport.disconnect()
    transport.fail("late error")

    assert machine.status is CallStatus.FINISHED


def test_end_only_from_active(machine, transport):
    assert machine.end() is False
    assert machine.status is CallStatus.CONNECTING

    transport.connect()
    assert machine.end() is True
    assert machine.status is CallStatus.FINISHED
    assert machine.end() is False


def test_end_and_disconnect_fire_terminal_observer_once(machine, transport):
    terminal = []
    machine.on_terminal(terminal.append)
    transport.connect()

    machine.end()
    transport.disconnect()

    assert terminal == [machine]


def test_racing_end_and_disconnect_fire_terminal_observer_once(machine, transport):
    terminal = []
    machine.on_terminal(terminal.append)
    transport.connect()
    barrier = threading.Barrier(2)

    def hang_up():
        barrier.wait()
        machine.end()

    def drop():
        barrier.wait()
        transport.disconnect()

    threads = [threading.Thread(target=hang_up), threading.Thread(target=drop)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert machine.status is CallStatus.FINISHED
    assert len(terminal) == 1


def test_transcript_is_frozen_after_finish(machine, transport):
    transport.connect()
    transport.say("user", "only line")
    machine.end()

    snapshot = machine.transcript
    transport.say("user", "ignored")
    transport.partial("user", "ignored")
    transport.connect()

    assert machine.transcript == snapshot
    assert machine.status is CallStatus.FINISHED
    assert snapshot[0].speaker is Speaker.USER


def test_status_changes_are_published(machine, transport, event_bus):
    changes = []
    event_bus.subscribe(EventType.STATUS_CHANGED, lambda e: changes.append((e.data["previous"], e.data["current"])))

    transport.connect()
    transport.disconnect()

    assert changes == [("CONNECTING", "ACTIVE"), ("ACTIVE", "FINISHED")]
