"""Contracts for transcript capture and audio playback."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, Protocol

CAPTURE_ERROR_REASONS = frozenset({"not-allowed", "no-speech", "audio-capture", "network", "aborted"})


class CaptureError(RuntimeError):
    """Raised by a capture session that ended abnormally."""

    def __init__(self, reason: str, detail: str | None = None) -> None:
        super().__init__(f"{reason}: {detail}" if detail else reason)
        self.reason = reason


@dataclass(frozen=True, slots=True)
class TranscriptUpdate:
    """Best-effort transcript for the current utterance."""

    text: str
    final: bool = False


class TranscriptCapture(Protocol):
    """Platform speech recognition for a single utterance at a time."""

    def start(self) -> None:
        """Begin accumulating speech."""

    def stop(self) -> None:
        """End capture; ``updates`` finishes without a final result."""

    def updates(self) -> Iterator[TranscriptUpdate]:
        """Yield interim updates and at most one final update, or raise ``CaptureError``."""


class PlaybackController(Protocol):
    """Plays one audio resource at a time."""

    def play(self, url: str, on_complete: Callable[[], None], on_error: Callable[[str], None]) -> None:
        """Stop anything playing, then play ``url`` and report how it ended."""

    def stop(self) -> None:
        """Stop immediately; the stopped playback reports nothing."""
