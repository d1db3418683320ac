"""tinychat - terminal chat client with bounded conversation memory."""

__version__ = "0.1.0"
__logo__ = "💬"
