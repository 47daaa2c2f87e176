"""Voice capture, playback and the conversation state machine."""

from .conversation import (
    TURN_SERVICE_ERROR_TEXT,
    CaptureEnded,
    CaptureFailed,
    ConversationSnapshot,
    ConversationStateMachine,
    PlaybackFailed,
    PlaybackFinished,
    ReplyReceived,
    StartCapture,
    StopCapture,
    TranscriptReceived,
)
from .interfaces import CaptureError, PlaybackController, TranscriptCapture, TranscriptUpdate

__all__ = [
    "TURN_SERVICE_ERROR_TEXT",
    "CaptureEnded",
    "CaptureError",
    "CaptureFailed",
    "ConversationSnapshot",
    "ConversationStateMachine",
    "PlaybackController",
    "PlaybackFailed",
    "PlaybackFinished",
    "ReplyReceived",
    "StartCapture",
    "StopCapture",
    "TranscriptCapture",
    "TranscriptReceived",
    "TranscriptUpdate",
]
