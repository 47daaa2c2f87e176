"""HTTP routes for the turn procedure and health checks."""

from __future__ import annotations

from fastapi import APIRouter, Request

from debate_arena.models import TurnRequest, TurnResponse
from debate_arena.turns import SEND_TURN_PATH, TurnProcessor

router = APIRouter()


def _processor(request: Request) -> TurnProcessor:
    return request.app.state.turn_processor


@router.get("/health")
def health(request: Request) -> dict:
    app_settings = request.app.state.settings
    return {
        "ok": True,
        "chat_model": app_settings.chat_model,
        "voice_model": app_settings.voice_model,
    }


@router.post(SEND_TURN_PATH, response_model=TurnResponse, response_model_by_alias=True)
async def send_turn(turn: TurnRequest, request: Request) -> TurnResponse:
    return await _processor(request).process(turn.text)
