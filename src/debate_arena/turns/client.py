"""Clients that deliver a finalized utterance to the turn procedure."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Protocol

import httpx
from pydantic import ValidationError

from debate_arena.models import TurnRequest, TurnResponse

from .procedure import TurnProcessor

SEND_TURN_PATH = "/api/debate/send-turn"

logger = logging.getLogger(__name__)


class TurnServiceError(RuntimeError):
    """Raised when a turn request could not be delivered or answered."""


class TurnServiceClient(Protocol):
    """Request/response contract the conversation core depends on."""

    def send_turn(self, text: str) -> TurnResponse:
        """Return the reply for ``text`` or raise ``TurnServiceError``."""


class HttpTurnServiceClient:
    """Calls a remote turn server over HTTP."""

    def __init__(self, base_url: str, *, timeout_seconds: float = 90.0, client: httpx.Client | None = None) -> None:
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout_seconds)

    def send_turn(self, text: str) -> TurnResponse:
        payload = TurnRequest(text=text).model_dump()
        try:
            response = self._client.post(SEND_TURN_PATH, json=payload)
            response.raise_for_status()
            return TurnResponse.model_validate(response.json())
        except (httpx.HTTPError, ValueError, ValidationError) as exc:
            logger.error("turn_request_failed", extra={"error": str(exc)})
            raise TurnServiceError(f"Turn request failed: {exc}") from exc

    def close(self) -> None:
        self._client.close()


class LocalTurnServiceClient:
    """Runs the turn procedure in-process, one event loop per turn."""

    def __init__(self, processor_factory: Callable[[httpx.AsyncClient], TurnProcessor]) -> None:
        self._processor_factory = processor_factory

    def send_turn(self, text: str) -> TurnResponse:
        try:
            request = TurnRequest(text=text)
        except ValidationError as exc:
            raise TurnServiceError(f"Turn request failed: {exc}") from exc
        return asyncio.run(self._send(request.text))

    async def _send(self, text: str) -> TurnResponse:
        async with httpx.AsyncClient() as client:
            return await self._processor_factory(client).process(text)
