from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from debate_arena.providers import ChatProviderError, FalSpeechProvider, GroqChatProvider, SpeechProviderError


def _chat(handler) -> GroqChatProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GroqChatProvider(
        api_key="groq-key",
        client=client,
        model="llama-3.1-8b-instant",
        system_prompt="Be brief.",
        base_url="https://groq.test/openai/v1",
    )


def _speech(handler) -> FalSpeechProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return FalSpeechProvider(api_key="fal-key", client=client, base_url="https://fal.test")


def test_chat_sends_system_and_user_messages_with_bearer_auth() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": "  Dogs, obviously.  "}}]})

    reply = asyncio.run(_chat(handler).complete("cats or dogs?"))

    assert reply == "Dogs, obviously."
    assert seen["url"] == "https://groq.test/openai/v1/chat/completions"
    assert seen["auth"] == "Bearer groq-key"
    assert seen["body"] == {
        "model": "llama-3.1-8b-instant",
        "messages": [
            {"role": "system", "content": "Be brief."},
            {"role": "user", "content": "cats or dogs?"},
        ],
    }


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="upstream exploded"),
        httpx.Response(200, json={"choices": []}),
        httpx.Response(200, json={"choices": [{"message": {}}]}),
        httpx.Response(200, text="not json"),
    ],
)
def test_chat_failures_raise_chat_provider_error(response: httpx.Response) -> None:
    with pytest.raises(ChatProviderError):
        asyncio.run(_chat(lambda request: response).complete("hello"))


def test_chat_transport_error_raises_chat_provider_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ChatProviderError, match="Error sending request"):
        asyncio.run(_chat(handler).complete("hello"))


def test_speech_posts_text_to_voice_model_and_returns_audio_url() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"audio": {"url": "https://cdn.fal/audio.wav"}})

    url = asyncio.run(_speech(handler).synthesize("Dogs, obviously."))

    assert url == "https://cdn.fal/audio.wav"
    assert seen["url"] == "https://fal.test/fal-ai/kokoro/american-english"
    assert seen["auth"] == "Key fal-key"
    assert seen["body"] == {"text": "Dogs, obviously."}


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(401, json={"detail": "bad key"}),
        httpx.Response(200, json={"audio": {}}),
        httpx.Response(200, json={"audio": {"url": 42}}),
        httpx.Response(200, json=["unexpected"]),
    ],
)
def test_speech_failures_raise_speech_provider_error(response: httpx.Response) -> None:
    with pytest.raises(SpeechProviderError):
        asyncio.run(_speech(lambda request: response).synthesize("hello"))
