"""marko - read markdown in the terminal or in a throwaway browser tab."""

__version__ = "0.2.0"
__author__ = "marko authors"

from .core.models import MarkdownSource, ReaderPage, RenderMode

__all__ = ["MarkdownSource", "ReaderPage", "RenderMode"]
