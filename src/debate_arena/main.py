"""CLI startup entrypoint for Debate Arena."""

from __future__ import annotations

import typer
from rich import print

from debate_arena.config import ConfigurationError, settings
from debate_arena.telemetry import LoggingTelemetry, configure_logging
from debate_arena.turns import (
    HttpTurnServiceClient,
    LocalTurnServiceClient,
    TurnServiceClient,
    TurnServiceError,
    build_turn_processor,
)

app = typer.Typer(help="Debate Arena voice chat service entrypoint")


@app.callback()
def main() -> None:
    configure_logging(settings.log_level)


def _build_turn_client(server_url: str | None) -> TurnServiceClient:
    url = server_url or settings.server_url
    if url:
        return HttpTurnServiceClient(url)
    settings.require_provider_keys()
    return LocalTurnServiceClient(lambda client: build_turn_processor(settings, client))


def _close_turn_client(client: TurnServiceClient) -> None:
    close = getattr(client, "close", None)
    if close is not None:
        close()


@app.command()
def start() -> None:
    """Show runtime backend configuration."""
    print(
        {
            "app_name": settings.app_name,
            "chat_model": settings.chat_model,
            "voice_model": settings.voice_model,
            "groq_api_key_set": settings.groq_api_key is not None,
            "fal_api_key_set": settings.fal_api_key is not None,
            "server": f"{settings.server_host}:{settings.server_port}",
            "server_url": settings.server_url,
        }
    )


@app.command()
def serve(
    host: str = typer.Option(None, help="Bind address (defaults to DEBATE_ARENA_SERVER_HOST)"),
    port: int = typer.Option(None, help="Bind port (defaults to DEBATE_ARENA_SERVER_PORT)"),
) -> None:
    """Run the turn procedure HTTP server."""
    import uvicorn

    from debate_arena.server import create_app

    try:
        server_app = create_app(settings)
    except ConfigurationError as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=1)

    uvicorn.run(
        server_app,
        host=host or settings.server_host,
        port=port or settings.server_port,
        log_level=settings.log_level.lower(),
    )


@app.command("send-turn")
def send_turn(
    text: str,
    server_url: str = typer.Option(None, help="Turn server base URL; runs in-process when omitted"),
) -> None:
    """Send one utterance and print the reply text and audio URL."""
    try:
        client = _build_turn_client(server_url)
    except ConfigurationError as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=1)

    try:
        response = client.send_turn(text)
    except TurnServiceError as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=1)
    finally:
        _close_turn_client(client)

    print(response.model_dump(by_alias=True))


@app.command("voice-chat")
def voice_chat(
    server_url: str = typer.Option(None, help="Turn server base URL; runs in-process when omitted"),
    language: str = typer.Option("en-US", help="Speech recognition language"),
    phrase_time_limit: float = typer.Option(15.0, help="Per-utterance capture limit in seconds"),
) -> None:
    """Run an interactive push-to-talk loop; press Enter to talk or interrupt."""
    from debate_arena.models import TurnPhase
    from debate_arena.voice import ConversationSnapshot, ConversationStateMachine

    try:
        from debate_arena.voice.capture_speechrecognition import SpeechRecognitionCapture
        from debate_arena.voice.playback_sounddevice import SoundDevicePlaybackController
    except ImportError:
        print({"error": "Voice extras are missing. Install with: pip install 'debate-arena[voice]'"})
        raise typer.Exit(code=1)

    try:
        turn_client = _build_turn_client(server_url)
    except ConfigurationError as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=1)

    try:
        capture = SpeechRecognitionCapture(language=language, phrase_time_limit=phrase_time_limit)
        playback = SoundDevicePlaybackController()
    except RuntimeError as exc:
        _close_turn_client(turn_client)
        print({"error": str(exc)})
        raise typer.Exit(code=1)

    machine = ConversationStateMachine(
        turn_client=turn_client,
        playback=playback,
        capture=capture,
        telemetry=LoggingTelemetry(),
    )

    printed_entries = 0

    def _render(snapshot: ConversationSnapshot) -> None:
        nonlocal printed_entries
        entries = machine.entries
        for entry in entries[printed_entries:]:
            print({entry.speaker.value: entry.text})
        printed_entries = len(entries)
        if snapshot.utterance:
            print({"hearing": f"{snapshot.utterance}..."})
        print({"status": snapshot.status_text})

    machine.add_listener(_render)
    print({"voice_chat": "started", "hint": "Press Enter to talk, stop, or interrupt; type q to quit."})

    try:
        while True:
            command = input().strip().lower()
            if command == "q":
                break
            if machine.phase == TurnPhase.LISTENING:
                machine.stop_capture()
            else:
                machine.start_capture()
    except (KeyboardInterrupt, EOFError):
        pass
    finally:
        machine.close()
        _close_turn_client(turn_client)
        print({"voice_chat": "stopped"})


if __name__ == "__main__":
    app()
