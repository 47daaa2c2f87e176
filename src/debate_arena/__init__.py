"""Voice-driven debate chat with barge-in."""

__version__ = "0.1.0"
