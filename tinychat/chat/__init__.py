"""Chat session control: controller, response intake and REPL commands."""

from tinychat.chat.commands import ChatCommandHandler, CommandReply
from tinychat.chat.controller import SessionController
from tinychat.chat.indicator import ActivityIndicator
from tinychat.chat.intake import IntakeState, ResponseIntake

__all__ = [
    "ActivityIndicator",
    "ChatCommandHandler",
    "CommandReply",
    "IntakeState",
    "ResponseIntake",
    "SessionController",
]
