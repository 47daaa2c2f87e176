"""Chat-completion backend for Groq's OpenAI-compatible API."""

from __future__ import annotations

import logging

import httpx

from .base import ChatProviderError

logger = logging.getLogger(__name__)


class GroqChatProvider:
    """Single-turn chat completions: a fixed system prompt plus the user's utterance."""

    def __init__(
        self,
        *,
        api_key: str,
        client: httpx.AsyncClient,
        model: str,
        system_prompt: str,
        base_url: str = "https://api.groq.com/openai/v1",
        timeout_seconds: float = 30.0,
    ) -> None:
        self._api_key = api_key
        self._client = client
        self._model = model
        self._system_prompt = system_prompt
        self._url = f"{base_url.rstrip('/')}/chat/completions"
        self._timeout_seconds = timeout_seconds

    def build_payload(self, user_text: str) -> dict:
        return {
            "model": self._model,
            "messages": [
                {"role": "system", "content": self._system_prompt},
                {"role": "user", "content": user_text},
            ],
        }

    async def complete(self, user_text: str) -> str:
        logger.info("chat_requested", extra={"model": self._model, "preview": user_text[:50]})
        try:
            response = await self._client.post(
                self._url,
                headers={"Authorization": f"Bearer {self._api_key}"},
                json=self.build_payload(user_text),
                timeout=self._timeout_seconds,
            )
        except httpx.HTTPError as exc:
            raise ChatProviderError(f"Error sending request to chat provider: {exc}") from exc

        if response.is_error:
            logger.error(
                "chat_http_error",
                extra={"status_code": response.status_code, "body": response.text[:300]},
            )
            raise ChatProviderError(
                f"Error communicating with chat provider: {response.status_code} {response.reason_phrase}"
            )

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ChatProviderError("No response text found from chat provider.") from exc
        if not isinstance(content, str) or not content.strip():
            raise ChatProviderError("No response text found from chat provider.")

        reply = content.strip()
        logger.info("chat_succeeded", extra={"preview": reply[:50]})
        return reply
