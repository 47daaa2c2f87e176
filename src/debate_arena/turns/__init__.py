"""Turn procedure and the clients that call it."""

from .client import (
    SEND_TURN_PATH,
    HttpTurnServiceClient,
    LocalTurnServiceClient,
    TurnServiceClient,
    TurnServiceError,
)
from .procedure import FALLBACK_REPLY, TurnProcessor, build_turn_processor
from .sanitize import strip_markdown

__all__ = [
    "FALLBACK_REPLY",
    "HttpTurnServiceClient",
    "LocalTurnServiceClient",
    "SEND_TURN_PATH",
    "TurnProcessor",
    "TurnServiceClient",
    "TurnServiceError",
    "build_turn_processor",
    "strip_markdown",
]
