"""External chat-completion and speech-synthesis providers."""

from .base import (
    ChatCompletionProvider,
    ChatProviderError,
    ProviderError,
    SpeechProviderError,
    SpeechSynthesisProvider,
)
from .chat import GroqChatProvider
from .speech import FalSpeechProvider

__all__ = [
    "ChatCompletionProvider",
    "ChatProviderError",
    "FalSpeechProvider",
    "GroqChatProvider",
    "ProviderError",
    "SpeechProviderError",
    "SpeechSynthesisProvider",
]
