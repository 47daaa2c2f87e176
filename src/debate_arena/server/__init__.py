"""HTTP server exposing the turn procedure."""

from .app import create_app

__all__ = ["create_app"]
