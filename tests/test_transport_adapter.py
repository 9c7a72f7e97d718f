import pytest

from prepwise.infrastructure.voice.base import RAW_EVENTS
from prepwise.interview.events import EventType
from prepwise.interview.transport import TransportEventAdapter


def _collect(event_bus):
    events = []
    event_bus.subscribe_all(events.append)
    return events


def test_attach_registers_one_listener_per_notification(transport, event_bus):
    adapter = TransportEventAdapter(transport, event_bus)
    adapter.attach()

    for raw_event in RAW_EVENTS:
        assert transport.listener_count(raw_event) == 1


def test_notifications_are_republished_as_typed_events(transport, event_bus):
    events = _collect(event_bus)
    adapter = TransportEventAdapter(transport, event_bus, clock=lambda: 42.0)
    adapter.attach()

    transport.connect()
    transport.speech_start()
    transport.partial("assistant", "Hel")
    transport.say("assistant", "Hello there")
    transport.speech_end()
    transport.fail("boom")
    transport.disconnect()

    assert [e.event_type for e in events] == [
        EventType.CONNECTED,
        EventType.SPEECH_STARTED,
        EventType.TRANSCRIPT_FRAGMENT,
        EventType.TRANSCRIPT_FRAGMENT,
        EventType.SPEECH_STOPPED,
        EventType.TRANSPORT_ERROR,
        EventType.DISCONNECTED,
    ]
    assert events[2].data == {"speaker": "assistant", "text": "Hel", "is_final": False}
    assert events[3].data == {"speaker": "assistant", "text": "Hello there", "is_final": True}
    assert events[5].data == {"message": "boom"}
    assert all(e.session_id == "call_123" for e in events)
    assert all(e.timestamp == 42.0 for e in events)


def test_non_transcript_messages_are_ignored(transport, event_bus):
    events = _collect(event_bus)
    adapter = TransportEventAdapter(transport, event_bus)
    adapter.attach()

    transport._fire("message", {"type": "function-call", "name": "noop"})

    assert events == []


def test_events_before_connect_use_pending_session_id(transport, event_bus):
    events = _collect(event_bus)
    TransportEventAdapter(transport, event_bus).attach()

    transport.speech_start()

    assert events[0].session_id == "pending"


def test_dispose_removes_every_listener_exactly_once(transport, event_bus):
    adapter = TransportEventAdapter(transport, event_bus)
    adapter.attach()

    assert adapter.dispose() is True
    assert transport.listener_count() == 0
    assert adapter.dispose() is False
    assert transport.listener_count() == 0


def test_no_events_after_dispose(transport, event_bus):
    events = _collect(event_bus)
    adapter = TransportEventAdapter(transport, event_bus)
    adapter.attach()
    adapter.dispose()

    transport.connect()
    transport.say("user", "late")

    assert events == []


def test_attach_twice_is_rejected(transport, event_bus):
    adapter = TransportEventAdapter(transport, event_bus)
    adapter.attach()

    with pytest.raises(RuntimeError):
        adapter.attach()
