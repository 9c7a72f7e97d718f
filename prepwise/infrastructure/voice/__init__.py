"""
Voice transport infrastructure: the callback contract, a replay transport
for recorded conversations and the REST client for workflow calls.
"""

from .base import VoiceTransport, CallbackTransport, RAW_EVENTS
from .replay import ReplayTransport, load_transcript_file
from .vapi import VapiRestClient

__all__ = [
    "VoiceTransport", "CallbackTransport", "RAW_EVENTS",
    "ReplayTransport", "load_transcript_file",
    "VapiRestClient"
]
