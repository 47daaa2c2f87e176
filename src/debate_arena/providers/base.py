"""Contracts for the chat-completion and speech-synthesis providers."""

from typing import Protocol


class ProviderError(RuntimeError):
    """Raised when an external provider call fails or returns an unusable payload."""


class ChatProviderError(ProviderError):
    """Chat-completion request failed."""


class SpeechProviderError(ProviderError):
    """Speech-synthesis request failed."""


class ChatCompletionProvider(Protocol):
    """Generates a reply for one user utterance."""

    async def complete(self, user_text: str) -> str:
        """Return the assistant reply text or raise ``ChatProviderError``."""


class SpeechSynthesisProvider(Protocol):
    """Converts plain text into a hosted audio resource."""

    async def synthesize(self, text: str) -> str:
        """Return a playable audio URL or raise ``SpeechProviderError``."""
