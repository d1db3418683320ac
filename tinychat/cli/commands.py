"""CLI commands for tinychat."""

from __future__ import annotations

import json
from pathlib import Path

import typer

from tinychat import __logo__, __version__
from tinychat.chat.commands import ChatCommandHandler
from tinychat.chat.controller import SessionController
from tinychat.config.loader import load_config
from tinychat.config.schema import MemoryType, ModelType
from tinychat.logging import setup_logging
from tinychat.memory.policy import SAFETY_MARGIN
from tinychat.session.store import HistoryStore
from tinychat.utils.helpers import word_count

app = typer.Typer(
    name="tinychat",
    help=f"{__logo__} tinychat - terminal chat with a local language model",
    no_args_is_help=True,
)

USER_PROMPT = "You: "


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"{__logo__} tinychat v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(None, "--version", "-v", callback=version_callback, is_eager=True),
) -> None:
    """tinychat - terminal chat with a local language model."""


def show(text: str) -> None:
    """Display sink for the chat: write without newline and flush immediately."""
    typer.echo(text, nl=False)


def _run_repl(controller: SessionController, commands: ChatCommandHandler) -> None:
    limit = controller.config.max_total_tokens - SAFETY_MARGIN
    while True:
        try:
            line = input(USER_PROMPT).strip()
        except (EOFError, KeyboardInterrupt):
            typer.echo("")
            break
        if not line:
            continue

        reply = commands.handle(line)
        if reply is not None:
            typer.echo(reply.content)
            if reply.exit:
                break
            continue

        if word_count(line) > limit:
            typer.echo("Message too long. Please try again.")
            continue
        try:
            controller.process_input(line)
        except KeyboardInterrupt:
            controller.intake.abort()
            typer.echo("\n[interrupted]")


@app.command()
def chat(
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Settings file (JSON)"),
    resume: str | None = typer.Option(None, "--resume", "-r", help="Saved session file to continue"),
    model: ModelType | None = typer.Option(None, "--model", "-m", help="Model for this run"),
    memory: MemoryType | None = typer.Option(None, "--memory", help="Memory type for this run"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level for stderr logs"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON lines"),
) -> None:
    """Chat with the model server."""
    setup_logging(json_output=json_logs, level=log_level)

    config = load_config(config_path)
    overrides = {}
    if model is not None:
        overrides["model"] = model.value
    if memory is not None:
        overrides["memory"] = memory.value
    if overrides:
        config = config.model_copy(update=overrides)

    try:
        controller = SessionController.from_config(config, show=show, config_path=config_path)
    except (ValueError, RuntimeError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    try:
        typer.echo(
            f"{__logo__} tinychat (model: {controller.model_name}, memory: {controller.memory_kind}). "
            "Type /help for commands."
        )
        controller.initialize()
        if resume:
            controller.resume(resume)
        else:
            controller.start()
        _run_repl(controller, ChatCommandHandler(controller))
    finally:
        controller.end()
        controller.client.close()


@app.command()
def sessions(
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Settings file (JSON)"),
) -> None:
    """List saved chat sessions."""
    config = load_config(config_path)
    try:
        names = HistoryStore(config.history_dir).list_sessions()
    except RuntimeError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    if not names:
        typer.echo("No chat history available.")
        return
    for i, name in enumerate(names, start=1):
        typer.echo(f"{i}. {name}")


@app.command("config")
def show_config(
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Settings file (JSON)"),
) -> None:
    """Print the effective settings."""
    config = load_config(config_path)
    typer.echo(json.dumps(config.model_dump(by_alias=True), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    app()
