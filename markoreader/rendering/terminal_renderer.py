from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, TextIO
import io
import logging
import os
import shlex
import subprocess
import sys

from markdown_it.token import Token
from rich.console import Console
from rich.emoji import Emoji
from rich.markdown import Markdown

from ..app.config import DEFAULT_PAGER, Settings
from ..core.errors import RenderError
from ..core.models import MarkdownSource
from .terminal_utils import stdout_is_tty, terminal_height, terminal_width

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TerminalStyle:
    name: str
    color: bool
    code_theme: str = "monokai"
    ascii_only: bool = False


STYLES: Dict[str, TerminalStyle] = {
    "dark": TerminalStyle("dark", color=True, code_theme="monokai"),
    "light": TerminalStyle("light", color=True, code_theme="default"),
    "dracula": TerminalStyle("dracula", color=True, code_theme="dracula"),
    "notty": TerminalStyle("notty", color=False),
    "ascii": TerminalStyle("ascii", color=False, ascii_only=True),
}

# COLORFGBG background indexes that mean a light terminal
_LIGHT_BACKGROUNDS = {"7", "15"}


class _RenderBuffer(io.StringIO):
    """Capture target for rich; the encoding decides whether boxes fall back to ASCII."""

    encoding = "utf-8"


class _AsciiRenderBuffer(_RenderBuffer):
    encoding = "ascii"


def _replace_emoji(tokens: Iterable[Token]) -> None:
    # Only prose; code spans and fences are separate token types
    for token in tokens:
        if token.type == "text":
            token.content = Emoji.replace(token.content)
        elif token.children:
            _replace_emoji(token.children)


def _prefers_light(env: Mapping[str, str]) -> bool:
    raw = env.get("COLORFGBG", "")
    if not raw:
        return False
    return raw.split(";")[-1].strip() in _LIGHT_BACKGROUNDS


def resolve_style(name: str, is_tty: bool, env: Optional[Mapping[str, str]] = None) -> TerminalStyle:
    """Pick the terminal style for a GLAMOUR_STYLE value.

    ``auto`` (or an unknown name) resolves to ``notty`` when output is not a
    terminal, otherwise to ``light`` or ``dark`` depending on COLORFGBG.
    """
    key = (name or "auto").strip().lower()
    if key in STYLES:
        return STYLES[key]
    if key != "auto":
        logger.warning(f"Unknown GLAMOUR_STYLE {name!r}; using auto")
    if not is_tty:
        return STYLES["notty"]
    return STYLES["light"] if _prefers_light(env if env is not None else os.environ) else STYLES["dark"]


def render(markdown_text: str, width: int, style: TerminalStyle) -> str:
    """Render markdown to a string wrapped at ``width`` columns."""
    buffer = _AsciiRenderBuffer() if style.ascii_only else _RenderBuffer()
    console = Console(
        file=buffer,
        width=width,
        color_system="auto" if style.color else None,
        force_terminal=style.color,
        highlight=False,
        emoji=False,
        soft_wrap=False,
    )
    try:
        document = Markdown(
            markdown_text,
            code_theme=style.code_theme,
            hyperlinks=style.color,
        )
        _replace_emoji(document.parsed)
        console.print(document)
    except Exception as exc:
        raise RenderError(str(exc) or exc.__class__.__name__, cause=exc) from exc
    return buffer.getvalue()


def page(content: str, pager_cmd: str) -> None:
    """Feed ``content`` to the pager and wait for it to exit.

    Raises OSError if the pager cannot be started and CalledProcessError if
    it exits unsuccessfully.
    """
    argv = shlex.split(pager_cmd) or shlex.split(DEFAULT_PAGER)
    lines = content.count("\n")
    logger.debug(f"Paging {lines} lines through {argv!r}")
    subprocess.run(argv, input=content, text=True, check=True)


def output(rendered: str, pager_cmd: str = DEFAULT_PAGER, stream: Optional[TextIO] = None) -> None:
    """Write rendered text, paging it when it overflows an interactive terminal."""
    out = stream or sys.stdout
    if not stdout_is_tty(out):
        out.write(rendered)
        return

    height = terminal_height(out)
    lines = rendered.count("\n")
    if lines <= height:
        out.write(rendered)
        return

    out.flush()
    try:
        page(rendered, pager_cmd)
    except KeyboardInterrupt:
        logger.debug("Pager interrupted")
    except (OSError, ValueError, subprocess.SubprocessError) as exc:
        logger.debug(f"Pager failed ({exc}); printing directly")
        out.write(rendered)


def show(source: MarkdownSource, settings: Settings) -> None:
    width = terminal_width()
    style = resolve_style(settings.style, stdout_is_tty())
    logger.debug(f"Rendering {source.origin} at {width} columns with style {style.name}")
    output(render(source.text, width, style), settings.pager)
