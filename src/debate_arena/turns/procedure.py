"""Backend turn processing: chat completion, then speech synthesis."""

from __future__ import annotations

import logging

import httpx

from debate_arena.config import Settings
from debate_arena.models import TurnResponse
from debate_arena.providers import (
    ChatCompletionProvider,
    FalSpeechProvider,
    GroqChatProvider,
    ProviderError,
    SpeechSynthesisProvider,
)

from .sanitize import strip_markdown

FALLBACK_REPLY = "Sorry, I encountered an error."
PROVIDER_ERROR_PREFIX = "Error:"


class TurnProcessor:
    """Turns one user utterance into reply text plus a synthesized audio URL.

    Provider failures never escape ``process``; they are folded into the
    response as fallback text and/or a null ``audio_url``.
    """

    def __init__(
        self,
        chat: ChatCompletionProvider,
        speech: SpeechSynthesisProvider,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._chat = chat
        self._speech = speech
        self._logger = logger or logging.getLogger("debate_arena.turns.procedure")

    async def process(self, text: str) -> TurnResponse:
        self._logger.info("turn_received", extra={"preview": text[:50]})

        reply = await self._chat_reply(text)
        if reply is None or reply.startswith(PROVIDER_ERROR_PREFIX):
            spoken = reply or FALLBACK_REPLY
            audio_url = await self._synthesize(spoken)
            return TurnResponse(ai_text=spoken, audio_url=audio_url)

        audio_url = await self._synthesize(strip_markdown(reply))
        return TurnResponse(ai_text=reply, audio_url=audio_url)

    async def _chat_reply(self, text: str) -> str | None:
        try:
            return await self._chat.complete(text)
        except ProviderError as exc:
            self._logger.error("chat_failed", extra={"error": str(exc)})
            return None

    async def _synthesize(self, text: str) -> str | None:
        try:
            return await self._speech.synthesize(text)
        except ProviderError as exc:
            self._logger.error("tts_failed", extra={"error": str(exc)})
            return None


def build_turn_processor(settings: Settings, client: httpx.AsyncClient) -> TurnProcessor:
    """Wire the configured providers around a shared HTTP client."""
    settings.require_provider_keys()
    chat = GroqChatProvider(
        api_key=settings.groq_api_key.get_secret_value(),
        client=client,
        model=settings.chat_model,
        system_prompt=settings.system_prompt,
        base_url=settings.groq_base_url,
        timeout_seconds=settings.chat_timeout_seconds,
    )
    speech = FalSpeechProvider(
        api_key=settings.fal_api_key.get_secret_value(),
        client=client,
        voice_model=settings.voice_model,
        base_url=settings.fal_base_url,
        timeout_seconds=settings.speech_timeout_seconds,
    )
    return TurnProcessor(chat, speech)
