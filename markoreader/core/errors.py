"""
Error hierarchy for marko.

Every failure that should end the run is raised as a ``MarkoError`` subclass
and reported once, at the top level, as ``marko: <message>``.
"""

from typing import Optional


class MarkoError(Exception):
    """Base exception for all marko operations."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        return self.message


class InputError(MarkoError):
    """Markdown could not be obtained: unreadable or empty source, bad arguments."""


class RenderError(MarkoError):
    """The external markdown renderer failed."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(f"render failed: {message}", cause=cause)


class ServerError(MarkoError):
    """The reader listener could not be started or was driven out of order."""
