"""Core models and error types."""

from .errors import InputError, MarkoError, RenderError, ServerError
from .models import MarkdownSource, ReaderPage, ReaderState, RenderMode

__all__ = [
    "MarkoError",
    "InputError",
    "RenderError",
    "ServerError",
    "MarkdownSource",
    "ReaderPage",
    "ReaderState",
    "RenderMode",
]
