from __future__ import annotations

from typing import Optional, TextIO, Tuple
import os
import stat
import sys

from ..app.config import DEFAULT_HEIGHT, DEFAULT_WIDTH, MAX_WIDTH


def _fileno(stream: TextIO) -> Optional[int]:
    try:
        return stream.fileno()
    except (AttributeError, OSError, ValueError):
        # Replaced streams (pytest capture, StringIO) have no descriptor
        return None


def stdin_is_piped(stream: Optional[TextIO] = None) -> bool:
    """True when stdin is a pipe or regular file rather than a character device."""
    fd = _fileno(stream or sys.stdin)
    if fd is None:
        return False
    try:
        mode = os.fstat(fd).st_mode
    except OSError:
        return False
    return not stat.S_ISCHR(mode)


def stdout_is_tty(stream: Optional[TextIO] = None) -> bool:
    fd = _fileno(stream or sys.stdout)
    if fd is None:
        return False
    return os.isatty(fd)


def _terminal_size(stream: Optional[TextIO] = None) -> Optional[Tuple[int, int]]:
    fd = _fileno(stream or sys.stdout)
    if fd is None:
        return None
    try:
        size = os.get_terminal_size(fd)
    except OSError:
        return None
    return size.columns, size.lines


def terminal_width(stream: Optional[TextIO] = None) -> int:
    """Column count to wrap at: the terminal width capped at MAX_WIDTH, or DEFAULT_WIDTH."""
    size = _terminal_size(stream)
    if size is None or size[0] <= 0:
        return DEFAULT_WIDTH
    return min(size[0], MAX_WIDTH)


def terminal_height(stream: Optional[TextIO] = None) -> int:
    size = _terminal_size(stream)
    if size is None or size[1] <= 0:
        return DEFAULT_HEIGHT
    return size[1]
