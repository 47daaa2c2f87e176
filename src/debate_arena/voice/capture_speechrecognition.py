"""Transcript capture backed by ``speech_recognition``."""

from __future__ import annotations

import threading
from typing import Iterator

from .interfaces import CaptureError, TranscriptCapture, TranscriptUpdate


class SpeechRecognitionCapture(TranscriptCapture):
    """Listen for one utterance on the default microphone and transcribe it.

    Google's web recognizer returns whole phrases, so each session yields a
    single final update and no interim ones.

    ``listen()`` cannot be interrupted, so ``stop()`` retires the session
    instead: a retired session releases the microphone when ``listen()``
    returns and never yields. ``start()`` waits up to ``release_timeout``
    seconds for that release and fails with reason ``aborted`` otherwise.
    """

    def __init__(
        self,
        *,
        language: str = "en-US",
        listen_timeout: float | None = 5.0,
        phrase_time_limit: float = 15.0,
        sample_rate: int = 16_000,
        adjust_noise_seconds: float = 0.2,
        release_timeout: float = 2.0,
    ) -> None:
        try:
            import speech_recognition as sr
        except ImportError as exc:  # pragma: no cover - import guard
            raise RuntimeError(
                "Voice capture backend unavailable. Install extras with: pip install 'debate-arena[voice]'"
            ) from exc
        try:
            sr.Microphone.get_pyaudio()
        except AttributeError as exc:  # pragma: no cover - import guard
            raise RuntimeError(
                "Microphone backend unavailable. Install extras with: pip install 'debate-arena[voice]'"
            ) from exc

        self._sr = sr
        self._recognizer = sr.Recognizer()
        self._language = language
        self._listen_timeout = listen_timeout
        self._phrase_time_limit = phrase_time_limit
        self._sample_rate = sample_rate
        self._adjust_noise_seconds = max(0.0, adjust_noise_seconds)
        self._release_timeout = max(0.0, release_timeout)
        self._lock = threading.Lock()
        self._session = 0
        self._active = False
        self._microphone_free = threading.Event()
        self._microphone_free.set()

    def start(self) -> None:
        with self._lock:
            if self._active:
                raise CaptureError("aborted", "a capture session is already active")
        if not self._microphone_free.wait(self._release_timeout):
            raise CaptureError("aborted", "the previous capture session still holds the microphone")
        with self._lock:
            self._session += 1
            self._active = True

    def stop(self) -> None:
        with self._lock:
            self._session += 1
            self._active = False

    def updates(self) -> Iterator[TranscriptUpdate]:
        with self._lock:
            session = self._session
        return self._listen(session)

    def _is_current(self, session: int) -> bool:
        with self._lock:
            return self._active and session == self._session

    def _finish(self, session: int) -> bool:
        """End ``session``; return whether it was still the live one."""
        with self._lock:
            current = self._active and session == self._session
            if current:
                self._active = False
            return current

    def _listen(self, session: int) -> Iterator[TranscriptUpdate]:
        sr = self._sr
        if not self._is_current(session):
            return

        self._microphone_free.clear()
        try:
            with sr.Microphone(sample_rate=self._sample_rate) as source:
                if self._adjust_noise_seconds > 0:
                    self._recognizer.adjust_for_ambient_noise(source, duration=self._adjust_noise_seconds)
                audio = self._recognizer.listen(
                    source,
                    timeout=self._listen_timeout,
                    phrase_time_limit=self._phrase_time_limit,
                )
        except sr.WaitTimeoutError as exc:
            self._finish(session)
            raise CaptureError("no-speech") from exc
        except OSError as exc:
            self._finish(session)
            raise CaptureError("audio-capture", str(exc)) from exc
        finally:
            self._microphone_free.set()

        if not self._is_current(session):
            return

        try:
            text = self._recognizer.recognize_google(audio, language=self._language)
        except sr.UnknownValueError as exc:
            self._finish(session)
            raise CaptureError("no-speech") from exc
        except sr.RequestError as exc:
            self._finish(session)
            raise CaptureError("network", str(exc)) from exc

        if self._finish(session):
            yield TranscriptUpdate(text=text, final=True)
