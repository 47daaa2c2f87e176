"""Text-to-speech backend powered by fal.ai hosted voice models."""

from __future__ import annotations

import logging

import httpx

from .base import SpeechProviderError

logger = logging.getLogger(__name__)


class FalSpeechProvider:
    """Synchronous fal.ai run endpoint returning ``{"audio": {"url": ...}}``."""

    def __init__(
        self,
        *,
        api_key: str,
        client: httpx.AsyncClient,
        voice_model: str = "fal-ai/kokoro/american-english",
        base_url: str = "https://fal.run",
        timeout_seconds: float = 60.0,
    ) -> None:
        self._api_key = api_key
        self._client = client
        self._voice_model = voice_model
        self._url = f"{base_url.rstrip('/')}/{voice_model.strip('/')}"
        self._timeout_seconds = timeout_seconds

    async def synthesize(self, text: str) -> str:
        logger.info("tts_requested", extra={"voice_model": self._voice_model, "preview": text[:50]})
        try:
            response = await self._client.post(
                self._url,
                headers={"Authorization": f"Key {self._api_key}"},
                json={"text": text},
                timeout=self._timeout_seconds,
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise SpeechProviderError(f"Speech synthesis request failed: {exc}") from exc

        audio = data.get("audio") if isinstance(data, dict) else None
        url = audio.get("url") if isinstance(audio, dict) else None
        if not isinstance(url, str):
            logger.error("tts_missing_audio_url", extra={"payload": str(data)[:300]})
            raise SpeechProviderError("Speech synthesis response did not contain an audio URL.")

        logger.info("tts_succeeded")
        return url
