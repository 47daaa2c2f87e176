from __future__ import annotations

import asyncio

from debate_arena.providers import ChatProviderError, SpeechProviderError
from debate_arena.turns import FALLBACK_REPLY, TurnProcessor


class StubChat:
    def __init__(self, reply: str | None = None, error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[str] = []

    async def complete(self, user_text: str) -> str:
        self.calls.append(user_text)
        if self.error:
            raise self.error
        return self.reply


class StubSpeech:
    def __init__(self, url: str | None = "https://cdn/audio.wav", error: Exception | None = None) -> None:
        self.url = url
        self.error = error
        self.inputs: list[str] = []

    async def synthesize(self, text: str) -> str:
        self.inputs.append(text)
        if self.error:
            raise self.error
        return self.url


def test_successful_turn_returns_original_text_and_speaks_plain_text() -> None:
    chat = StubChat(reply="**Cats** win because of `purring`.")
    speech = StubSpeech()

    response = asyncio.run(TurnProcessor(chat, speech).process("cats or dogs?"))

    assert chat.calls == ["cats or dogs?"]
    assert speech.inputs == ["Cats win because of purring."]
    assert response.ai_text == "**Cats** win because of `purring`."
    assert response.audio_url == "https://cdn/audio.wav"


def test_chat_failure_uses_fallback_for_display_and_speech() -> None:
    speech = StubSpeech()

    response = asyncio.run(TurnProcessor(StubChat(error=ChatProviderError("503")), speech).process("hello"))

    assert response.ai_text == FALLBACK_REPLY
    assert response.audio_url == "https://cdn/audio.wav"
    assert speech.inputs == [FALLBACK_REPLY]


def test_provider_error_text_is_spoken_verbatim() -> None:
    speech = StubSpeech()
    reply = "Error: Groq API key not configured."

    response = asyncio.run(TurnProcessor(StubChat(reply=reply), speech).process("hello"))

    assert response.ai_text == reply
    assert speech.inputs == [reply]


def test_speech_failure_keeps_reply_text_with_null_audio() -> None:
    speech = StubSpeech(error=SpeechProviderError("no audio url"))

    response = asyncio.run(TurnProcessor(StubChat(reply="_Fine._"), speech).process("hello"))

    assert response.ai_text == "_Fine._"
    assert response.audio_url is None
    assert speech.inputs == ["Fine."]


def test_both_providers_failing_still_returns_a_response() -> None:
    processor = TurnProcessor(
        StubChat(error=ChatProviderError("down")),
        StubSpeech(error=SpeechProviderError("down")),
    )

    response = asyncio.run(processor.process("hello"))

    assert response.ai_text == FALLBACK_REPLY
    assert response.audio_url is None
