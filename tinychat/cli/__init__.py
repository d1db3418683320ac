"""CLI module for tinychat."""
