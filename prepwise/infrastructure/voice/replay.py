"""
Replays a recorded conversation as voice transport notifications.
"""
import json
import uuid
import logging
from typing import Any, Dict, List, Optional

from .base import (
    CallbackTransport, CALL_START, CALL_END, MESSAGE, SPEECH_START, SPEECH_END
)

logger = logging.getLogger("replay_transport")


def load_transcript_file(path: str) -> List[Dict[str, str]]:
    """Load a recorded transcript: a JSON list of ``{"role", "content"}`` objects."""
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"Transcript file must contain a JSON list: {path}")
    for entry in data:
        if not isinstance(entry, dict) or "role" not in entry or "content" not in entry:
            raise ValueError(f"Transcript entries need 'role' and 'content': {entry!r}")
    return data


class ReplayTransport(CallbackTransport):
    """
    Transport that plays back a recorded transcript synchronously on ``start``.

    For every recorded line it emits an interim fragment (when enabled)
    followed by the final fragment; assistant lines are wrapped in
    speech-start / speech-end. The call ends after the last line unless
    ``end_call`` is False.
    """

    def __init__(self,
                 messages: List[Dict[str, str]],
                 emit_interim: bool = True,
                 end_call: bool = True,
                 call_id: Optional[str] = None):
        super().__init__()
        self.messages = messages
        self.emit_interim = emit_interim
        self.end_call = end_call
        self.call_id = call_id or f"replay_{uuid.uuid4().hex[:8]}"
        self.start_args: Optional[Dict[str, Any]] = None
        self._live = False

    def start(self,
              assistant: Optional[Dict[str, Any]] = None,
              workflow_id: Optional[str] = None,
              variable_values: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        self.start_args = {
            "assistant": assistant,
            "workflow_id": workflow_id,
            "variable_values": variable_values,
        }
        logger.info(f"Replaying {len(self.messages)} transcript lines as call {self.call_id}")

        self._live = True
        self._fire(CALL_START, {"id": self.call_id})
        for entry in self.messages:
            if not self._live:
                break
            self._replay_line(entry["role"], entry["content"])

        if self.end_call:
            self.stop()
        return {"id": self.call_id}

    def _replay_line(self, role: str, content: str) -> None:
        speaking = role == "assistant"
        if speaking:
            self._fire(SPEECH_START)
        if self.emit_interim and len(content) > 1:
            self._fire(MESSAGE, {
                "type": "transcript",
                "transcriptType": "partial",
                "role": role,
                "transcript": content[: len(content) // 2],
            })
        self._fire(MESSAGE, {
            "type": "transcript",
            "transcriptType": "final",
            "role": role,
            "transcript": content,
        })
        if speaking:
            self._fire(SPEECH_END)

    def stop(self) -> None:
        if not self._live:
            return
        self._live = False
        self._fire(CALL_END)
