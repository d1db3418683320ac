"""Slash commands available inside the chat REPL."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from tinychat.config.schema import MemoryType, ModelType
from tinychat.logging import get_logger

if TYPE_CHECKING:
    from tinychat.chat.controller import SessionController

logger = get_logger(__name__)

HELP_TEXT = (
    "tinychat commands:\n"
    "/new - Save this conversation and start a new one\n"
    "/history - List saved conversations\n"
    "/resume <n|file> - Continue a saved conversation\n"
    "/model [name] - Show or switch the model (" + ", ".join(m.value for m in ModelType) + ")\n"
    "/memory [kind] - Show or switch the memory type (" + ", ".join(m.value for m in MemoryType) + ")\n"
    "/help - Show available commands\n"
    "/exit - Save and quit"
)


@dataclass
class CommandReply:
    content: str
    exit: bool = False


class ChatCommandHandler:
    """Handle slash commands that operate on the chat session."""

    def __init__(self, controller: "SessionController") -> None:
        self.controller = controller

    def handle(self, line: str) -> CommandReply | None:
        """Return the command reply if *line* is a command, else None."""
        text = line.strip()
        if not text.startswith("/"):
            return None
        cmd, _, arg = text.partition(" ")
        cmd = cmd.lower()
        arg = arg.strip()

        if cmd == "/new":
            self.controller.start()
            return CommandReply(f"New conversation started. {self._describe()}")
        if cmd == "/history":
            return CommandReply(self._format_history())
        if cmd == "/resume":
            return self._handle_resume(arg)
        if cmd == "/model":
            return self._handle_model(arg)
        if cmd == "/memory":
            return self._handle_memory(arg)
        if cmd == "/help":
            return CommandReply(HELP_TEXT)
        if cmd in {"/exit", "/quit"}:
            self.controller.end()
            return CommandReply("Goodbye!", exit=True)
        return CommandReply(f"Unknown command: {cmd}. Type /help for available commands.")

    def _describe(self) -> str:
        return f"(model: {self.controller.model_name}, memory: {self.controller.memory_kind})"

    def _format_history(self) -> str:
        names = self.controller.list_sessions()
        if not names:
            return "No chat history available."
        return "\n".join(f"{i}. {name}" for i, name in enumerate(names, start=1))

    def _handle_resume(self, arg: str) -> CommandReply:
        if not arg:
            return CommandReply("Usage: /resume <n|file>")
        names = self.controller.list_sessions()
        if arg.isdigit():
            index = int(arg) - 1
            if not 0 <= index < len(names):
                return CommandReply(f"No saved conversation #{arg}. Use /history to list them.")
            identifier = names[index]
        elif arg in names:
            identifier = arg
        else:
            return CommandReply(f"No saved conversation named {arg}. Use /history to list them.")
        self.controller.resume(identifier)
        return CommandReply(f"Continuing {identifier} {self._describe()}")

    def _handle_model(self, arg: str) -> CommandReply:
        if not arg:
            return CommandReply(f"Current model: {self.controller.model_name}")
        try:
            self.controller.update_model(arg)
        except ValueError:
            choices = ", ".join(m.value for m in ModelType)
            return CommandReply(f"Unknown model: {arg}. Choose one of: {choices}")
        logger.info("model_switched", model=arg)
        return CommandReply(f"Model switched. New conversation started. {self._describe()}")

    def _handle_memory(self, arg: str) -> CommandReply:
        if not arg:
            return CommandReply(f"Current memory type: {self.controller.memory_kind}")
        try:
            self.controller.update_memory(arg.lower())
        except ValueError:
            choices = ", ".join(m.value for m in MemoryType)
            return CommandReply(f"Unknown memory type: {arg}. Choose one of: {choices}")
        logger.info("memory_switched", memory=arg)
        return CommandReply(f"Memory type switched. New conversation started. {self._describe()}")
