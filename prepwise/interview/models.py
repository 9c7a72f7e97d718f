"""
Data models for the interview session core.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, List, Sequence


class Speaker(str, Enum):
    """Who produced a transcript line."""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class SessionMode(str, Enum):
    """Variant a call is started in."""
    INTERVIEW = "interview"
    GENERATE = "generate"


class CallStatus(str, Enum):
    """Connection phase of a voice session."""
    INACTIVE = "INACTIVE"
    CONNECTING = "CONNECTING"
    ACTIVE = "ACTIVE"
    FINISHED = "FINISHED"


@dataclass(frozen=True)
class TranscriptLine:
    """One finalized utterance."""
    speaker: Speaker
    text: str

    def __post_init__(self):
        if not self.text or not self.text.strip():
            raise ValueError("Transcript line text must be non-empty")

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.speaker.value, "content": self.text}

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> 'TranscriptLine':
        return cls(speaker=Speaker(data["role"]), text=data["content"])


@dataclass
class SessionRequest:
    """Everything needed to start one call."""
    mode: SessionMode
    user_name: str
    user_id: str
    interview_id: Optional[str] = None
    questions: List[str] = field(default_factory=list)
    workflow_id: Optional[str] = None
    feedback_id: Optional[str] = None


@dataclass
class Session:
    """State of one voice call instance."""
    mode: SessionMode
    status: CallStatus = CallStatus.INACTIVE
    session_id: Optional[str] = None
    transcript: List[TranscriptLine] = field(default_factory=list)
    speaking: bool = False
    # Interim fragment text, never persisted
    preview: str = ""

    @property
    def last_message(self) -> str:
        """Latest finalized line, for live captioning."""
        return self.transcript[-1].text if self.transcript else ""


@dataclass
class FeedbackRequest:
    """Input to the scoring step."""
    interview_id: str
    user_id: str
    transcript: Sequence[TranscriptLine]
    feedback_id: Optional[str] = None

    def __post_init__(self):
        if not self.interview_id or not self.user_id:
            raise ValueError("interview_id and user_id are required for feedback")


@dataclass
class NavigationResult:
    """Where the UI should go once a session has ended."""
    target: str
    reason: str
    feedback_id: Optional[str] = None
