"""Terminal and HTML rendering of markdown."""

from .html_renderer import build_page, extract_title, render_html
from .terminal_renderer import output, render, resolve_style, show
from .terminal_utils import stdin_is_piped, stdout_is_tty, terminal_height, terminal_width

__all__ = [
    "build_page",
    "extract_title",
    "render_html",
    "output",
    "render",
    "resolve_style",
    "show",
    "stdin_is_piped",
    "stdout_is_tty",
    "terminal_height",
    "terminal_width",
]
