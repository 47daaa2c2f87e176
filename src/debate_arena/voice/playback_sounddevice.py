"""Audio playback of synthesized speech via ``sounddevice``."""

from __future__ import annotations

import io
import logging
import threading
from typing import Callable

import httpx

from .interfaces import PlaybackController

logger = logging.getLogger(__name__)


class SoundDevicePlaybackController(PlaybackController):
    """Download an audio URL, decode it with soundfile and play it on the default output."""

    def __init__(self, *, http_client: httpx.Client | None = None, timeout_seconds: float = 30.0) -> None:
        try:
            import sounddevice as sd
            import soundfile as sf
        except (ImportError, OSError) as exc:  # pragma: no cover - import guard
            raise RuntimeError(
                "Audio output backend unavailable. Install extras with: pip install 'debate-arena[voice]'"
            ) from exc

        self._sd = sd
        self._sf = sf
        self._http = http_client or httpx.Client(timeout=timeout_seconds, follow_redirects=True)
        self._lock = threading.Lock()
        self._generation = 0

    def play(self, url: str, on_complete: Callable[[], None], on_error: Callable[[str], None]) -> None:
        self.stop()
        with self._lock:
            self._generation += 1
            generation = self._generation
        threading.Thread(
            target=self._run,
            args=(generation, url, on_complete, on_error),
            name="playback",
            daemon=True,
        ).start()

    def stop(self) -> None:
        with self._lock:
            self._generation += 1
            self._sd.stop()

    def _is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._generation

    def _run(
        self,
        generation: int,
        url: str,
        on_complete: Callable[[], None],
        on_error: Callable[[str], None],
    ) -> None:
        try:
            response = self._http.get(url)
            response.raise_for_status()
            signal, sample_rate = self._sf.read(io.BytesIO(response.content))
            logger.info("playback_started", extra={"url": url})
            # stop() takes the same lock, so nothing starts playing after a stop().
            with self._lock:
                if generation != self._generation:
                    return
                self._sd.play(signal, sample_rate)
            self._sd.wait()
        except Exception as exc:  # noqa: BLE001 - download, decode and device errors all end playback.
            if self._is_current(generation):
                on_error(f"{type(exc).__name__}: {exc}")
            return

        if self._is_current(generation):
            on_complete()
