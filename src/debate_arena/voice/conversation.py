"""Turn-taking conversation state machine.

The machine owns the transcript, the current ``TurnPhase`` and the pending
audio URL. Every input (a user action, a capture update, a turn reply, a
playback signal) is a small event object fed to ``dispatch``. Events are
applied one at a time in arrival order: an event raised while another is
being applied, from any thread, is queued behind it.

Capture pumping and turn requests run on an executor and report back as
events. Replies and playback signals carry the turn token they were issued
under and capture updates carry their session token; anything stamped with
a superseded token is dropped, so a late reply can never resurrect a turn
the user already barged in on.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable

from debate_arena.models import ConversationEntry, Speaker, TurnPhase, TurnResponse
from debate_arena.telemetry import Telemetry
from debate_arena.turns import TurnServiceClient

from .interfaces import CaptureError, PlaybackController, TranscriptCapture

TURN_SERVICE_ERROR_TEXT = "Error communicating with AI. Please try again."

_STATUS_TEXT = {
    TurnPhase.IDLE: "Ready",
    TurnPhase.LISTENING: "Listening...",
    TurnPhase.AWAITING_REPLY: "AI is thinking...",
    TurnPhase.SPEAKING: "AI Speaking...",
}


@dataclass(frozen=True, slots=True)
class StartCapture:
    """User pressed the microphone: start listening, barging in if needed."""


@dataclass(frozen=True, slots=True)
class StopCapture:
    """User released the microphone before a final transcript."""


@dataclass(frozen=True, slots=True)
class TranscriptReceived:
    session: int
    text: str
    final: bool


@dataclass(frozen=True, slots=True)
class CaptureFailed:
    session: int
    reason: str


@dataclass(frozen=True, slots=True)
class CaptureEnded:
    session: int


@dataclass(frozen=True, slots=True)
class ReplyReceived:
    turn: int
    response: TurnResponse


@dataclass(frozen=True, slots=True)
class PlaybackFinished:
    turn: int


@dataclass(frozen=True, slots=True)
class PlaybackFailed:
    turn: int
    reason: str


ConversationEvent = (
    StartCapture
    | StopCapture
    | TranscriptReceived
    | CaptureFailed
    | CaptureEnded
    | ReplyReceived
    | PlaybackFinished
    | PlaybackFailed
)


@dataclass(frozen=True, slots=True)
class ConversationSnapshot:
    """Observer view published after every applied event."""

    phase: TurnPhase
    status_text: str
    utterance: str
    pending_audio: str | None
    last_entry: ConversationEntry | None


class ConversationStateMachine:
    """Coordinates capture, the turn service and playback for one conversation."""

    def __init__(
        self,
        *,
        turn_client: TurnServiceClient,
        playback: PlaybackController,
        capture: TranscriptCapture | None = None,
        executor: Executor | None = None,
        telemetry: Telemetry | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._turn_client = turn_client
        self._playback = playback
        self._capture = capture
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=4, thread_name_prefix="conversation")
        self._telemetry = telemetry
        self._logger = logger or logging.getLogger("debate_arena.voice.conversation")

        self._phase = TurnPhase.IDLE
        self._entries: list[ConversationEntry] = []
        self._utterance = ""
        self._pending_audio: str | None = None
        self._turn = 0
        self._session = 0

        self._lock = threading.RLock()
        self._events: deque[ConversationEvent] = deque()
        self._draining = False
        self._listeners: list[Callable[[ConversationSnapshot], None]] = []
        self._futures: list[Future] = []
        self._handlers: dict[type, Callable[[ConversationEvent], bool]] = {
            StartCapture: self._on_start_capture,
            StopCapture: self._on_stop_capture,
            TranscriptReceived: self._on_transcript,
            CaptureFailed: self._on_capture_failed,
            CaptureEnded: self._on_capture_ended,
            ReplyReceived: self._on_reply,
            PlaybackFinished: self._on_playback_finished,
            PlaybackFailed: self._on_playback_failed,
        }

    @property
    def phase(self) -> TurnPhase:
        return self._phase

    @property
    def entries(self) -> tuple[ConversationEntry, ...]:
        return tuple(self._entries)

    @property
    def utterance(self) -> str:
        return self._utterance

    @property
    def pending_audio(self) -> str | None:
        return self._pending_audio

    @property
    def supports_capture(self) -> bool:
        return self._capture is not None

    @property
    def status_text(self) -> str:
        if self._capture is None:
            return "Voice input not supported"
        return _STATUS_TEXT[self._phase]

    def snapshot(self) -> ConversationSnapshot:
        with self._lock:
            return ConversationSnapshot(
                phase=self._phase,
                status_text=self.status_text,
                utterance=self._utterance,
                pending_audio=self._pending_audio,
                last_entry=self._entries[-1] if self._entries else None,
            )

    def add_listener(self, listener: Callable[[ConversationSnapshot], None]) -> None:
        """Register a callback invoked after every applied event."""
        self._listeners.append(listener)

    def start_capture(self) -> None:
        self.dispatch(StartCapture())

    def stop_capture(self) -> None:
        self.dispatch(StopCapture())

    def dispatch(self, event: ConversationEvent) -> None:
        """Queue ``event`` and apply queued events unless a drain is already running."""
        with self._lock:
            self._events.append(event)
            if self._draining:
                return
            self._draining = True
            try:
                while self._events:
                    event = self._events.popleft()
                    try:
                        self._apply(event)
                    except Exception:  # noqa: BLE001 - one failing event must not strand the rest of the queue.
                        self._logger.exception("event_failed", extra={"event": type(event).__name__})
            finally:
                self._draining = False

    def wait_for_background(self, timeout: float | None = None) -> bool:
        """Block until capture and turn work, including work it submits, has finished."""
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            with self._lock:
                pending = [future for future in self._futures if not future.done()]
            if not pending:
                return True
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            _, not_done = wait(pending, timeout=remaining)
            if not_done:
                return False

    def close(self) -> None:
        """Release capture and playback and shut down an owned executor."""
        with self._lock:
            if self._phase == TurnPhase.LISTENING and self._capture is not None:
                self._capture.stop()
            if self._phase == TurnPhase.SPEAKING:
                self._playback.stop()
            self._session += 1
            self._turn += 1
            self._pending_audio = None
            self._utterance = ""
            self._phase = TurnPhase.IDLE
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)

    def _apply(self, event: ConversationEvent) -> None:
        previous = self._phase
        applied = self._handlers[type(event)](event)
        if not applied:
            self._logger.debug("event_ignored", extra={"event": type(event).__name__, "phase": previous.value})
            return

        if previous != self._phase:
            self._logger.info(
                "phase_changed",
                extra={"from_phase": previous.value, "to_phase": self._phase.value, "turn": self._turn},
            )
            if self._telemetry is not None:
                self._telemetry.emit(
                    "phase_changed",
                    {"from": previous.value, "to": self._phase.value, "turn": self._turn},
                )

        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:  # noqa: BLE001 - observers never block the conversation.
                self._logger.exception("listener_failed", extra={"phase": snapshot.phase.value})

    def _on_start_capture(self, event: StartCapture) -> bool:
        if self._capture is None:
            self._logger.warning("capture_unavailable")
            return False
        if self._phase == TurnPhase.LISTENING:
            return False

        if self._phase == TurnPhase.SPEAKING:
            self._turn += 1
            self._playback.stop()
            self._pending_audio = None
            self._logger.info("assistant_interrupted", extra={"turn": self._turn})
        elif self._phase == TurnPhase.AWAITING_REPLY:
            self._turn += 1
            self._logger.info("turn_superseded", extra={"turn": self._turn})

        self._utterance = ""
        self._session += 1
        try:
            self._capture.start()
        except CaptureError as exc:
            self._logger.warning("capture_start_failed", extra={"reason": exc.reason})
            self._phase = TurnPhase.IDLE
            return True

        self._phase = TurnPhase.LISTENING
        self._submit(self._pump_capture, self._session)
        return True

    def _on_stop_capture(self, event: StopCapture) -> bool:
        if self._phase != TurnPhase.LISTENING:
            return False

        self._session += 1
        self._capture.stop()
        self._utterance = ""
        self._phase = TurnPhase.IDLE
        return True

    def _on_transcript(self, event: TranscriptReceived) -> bool:
        if event.session != self._session or self._phase != TurnPhase.LISTENING:
            return False

        if not event.final:
            self._utterance = event.text
            return True

        self._capture.stop()
        self._utterance = ""
        text = event.text.strip()
        if not text:
            self._phase = TurnPhase.IDLE
            return True

        self._entries.append(ConversationEntry(speaker=Speaker.USER, text=text))
        self._turn += 1
        self._phase = TurnPhase.AWAITING_REPLY
        self._submit(self._request_turn, self._turn, text)
        return True

    def _on_capture_failed(self, event: CaptureFailed) -> bool:
        if event.session != self._session or self._phase != TurnPhase.LISTENING:
            return False

        if event.reason == "not-allowed":
            self._logger.error("microphone_permission_denied")
        else:
            self._logger.warning("capture_failed", extra={"reason": event.reason})
        self._utterance = ""
        self._phase = TurnPhase.IDLE
        return True

    def _on_capture_ended(self, event: CaptureEnded) -> bool:
        if event.session != self._session or self._phase != TurnPhase.LISTENING:
            return False

        self._utterance = ""
        self._phase = TurnPhase.IDLE
        return True

    def _on_reply(self, event: ReplyReceived) -> bool:
        if event.turn != self._turn or self._phase != TurnPhase.AWAITING_REPLY:
            self._logger.info("stale_reply_dropped", extra={"turn": event.turn, "current_turn": self._turn})
            return False

        self._entries.append(ConversationEntry(speaker=Speaker.ASSISTANT, text=event.response.ai_text))
        audio_url = event.response.audio_url
        if not audio_url:
            self._phase = TurnPhase.IDLE
            return True

        turn = event.turn
        self._pending_audio = audio_url
        self._phase = TurnPhase.SPEAKING
        try:
            self._playback.play(
                audio_url,
                on_complete=lambda: self.dispatch(PlaybackFinished(turn)),
                on_error=lambda reason: self.dispatch(PlaybackFailed(turn, reason)),
            )
        except Exception as exc:  # noqa: BLE001 - any playback backend failure ends the turn.
            self._logger.error("playback_start_failed", extra={"error": f"{type(exc).__name__}: {exc}"})
            self._pending_audio = None
            self._phase = TurnPhase.IDLE
        return True

    def _on_playback_finished(self, event: PlaybackFinished) -> bool:
        if event.turn != self._turn or self._phase != TurnPhase.SPEAKING:
            return False

        self._pending_audio = None
        self._phase = TurnPhase.IDLE
        return True

    def _on_playback_failed(self, event: PlaybackFailed) -> bool:
        if event.turn != self._turn or self._phase != TurnPhase.SPEAKING:
            return False

        self._logger.error("playback_failed", extra={"reason": event.reason})
        self._pending_audio = None
        self._phase = TurnPhase.IDLE
        return True

    def _submit(self, fn: Callable[..., None], *args: object) -> None:
        self._futures = [future for future in self._futures if not future.done()]
        future = self._executor.submit(fn, *args)
        future.add_done_callback(self._log_background_failure)
        self._futures.append(future)

    def _log_background_failure(self, future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            self._logger.error(
                "background_task_failed",
                exc_info=(type(exc), exc, exc.__traceback__),
            )

    def _pump_capture(self, session: int) -> None:
        try:
            for update in self._capture.updates():
                self.dispatch(TranscriptReceived(session=session, text=update.text, final=update.final))
                if update.final:
                    return
        except CaptureError as exc:
            self.dispatch(CaptureFailed(session=session, reason=exc.reason))
            return
        except Exception as exc:  # noqa: BLE001 - capture backends fail in backend-specific ways.
            self._logger.exception("capture_pump_failed", extra={"session": session})
            self.dispatch(CaptureFailed(session=session, reason=f"aborted: {type(exc).__name__}"))
            return
        self.dispatch(CaptureEnded(session=session))

    def _request_turn(self, turn: int, text: str) -> None:
        try:
            response = self._turn_client.send_turn(text)
        except Exception as exc:  # noqa: BLE001 - every turn service failure becomes a visible reply.
            self._logger.error("turn_service_failed", extra={"turn": turn, "error": f"{type(exc).__name__}: {exc}"})
            response = TurnResponse(ai_text=TURN_SERVICE_ERROR_TEXT, audio_url=None)
        self.dispatch(ReplyReceived(turn=turn, response=response))
