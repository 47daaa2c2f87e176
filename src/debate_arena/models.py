from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Speaker(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class TurnPhase(str, Enum):
    """Which part of the turn-taking cycle the conversation is in."""

    IDLE = "idle"
    LISTENING = "listening"
    AWAITING_REPLY = "awaiting_reply"
    SPEAKING = "speaking"


@dataclass(frozen=True, slots=True)
class ConversationEntry:
    speaker: Speaker
    text: str


class TurnRequest(BaseModel):
    text: str = Field(min_length=1)


class TurnResponse(BaseModel):
    """Reply for one turn; a null ``audio_url`` means synthesis failed."""

    model_config = ConfigDict(populate_by_name=True)

    ai_text: str = Field(alias="aiText")
    audio_url: str | None = Field(default=None, alias="audioUrl")
