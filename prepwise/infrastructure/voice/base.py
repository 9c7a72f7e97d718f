"""
Callback-based voice transport contract.
"""
import logging
from typing import Any, Callable, Dict, List, Optional, Protocol

logger = logging.getLogger("voice_transport")

# Raw notification names emitted by voice transports
CALL_START = "call-start"
CALL_END = "call-end"
MESSAGE = "message"
SPEECH_START = "speech-start"
SPEECH_END = "speech-end"
ERROR = "error"

RAW_EVENTS = (CALL_START, CALL_END, MESSAGE, SPEECH_START, SPEECH_END, ERROR)

Listener = Callable[..., None]


class VoiceTransport(Protocol):
    """What the session core needs from a voice engine."""

    def on(self, event: str, listener: Listener) -> None: ...

    def remove_listener(self, event: str, listener: Listener) -> None: ...

    def start(self,
              assistant: Optional[Dict[str, Any]] = None,
              workflow_id: Optional[str] = None,
              variable_values: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]: ...

    def stop(self) -> None: ...


class CallbackTransport:
    """Listener registry shared by the in-process transports."""

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = {}

    def on(self, event: str, listener: Listener) -> None:
        if event not in RAW_EVENTS:
            raise ValueError(f"Unknown transport event: {event}")
        self._listeners.setdefault(event, []).append(listener)

    def remove_listener(self, event: str, listener: Listener) -> None:
        try:
            self._listeners.get(event, []).remove(listener)
        except ValueError:
            logger.warning(f"Listener not registered for {event}")

    def listener_count(self, event: Optional[str] = None) -> int:
        if event is not None:
            return len(self._listeners.get(event, []))
        return sum(len(listeners) for listeners in self._listeners.values())

    def _fire(self, event: str, *args: Any) -> None:
        for listener in list(self._listeners.get(event, [])):
            listener(*args)
