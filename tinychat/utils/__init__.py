"""Utility functions for tinychat."""
