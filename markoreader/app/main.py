from __future__ import annotations

from typing import List, Optional, Sequence, TextIO, Tuple
import logging
import sys

from ..core.errors import InputError, MarkoError
from ..core.models import MarkdownSource, RenderMode
from ..rendering.terminal_renderer import show
from ..rendering.terminal_utils import stdin_is_piped
from .config import USAGE, VERSION, Settings, configure_logging
from .web_server import open_reader

logger = logging.getLogger(__name__)

TERM_FLAGS = ("-t", "--term")
HELP_FLAGS = ("--help", "-h")
VERSION_FLAGS = ("--version", "-v")


def parse_flags(args: Sequence[str]) -> Tuple[RenderMode, List[str]]:
    """Pull the terminal-mode flag out of ``args``; everything else passes through in order."""
    mode = RenderMode.READER
    remaining: List[str] = []
    for arg in args:
        if arg in TERM_FLAGS:
            mode = RenderMode.TERMINAL
        else:
            remaining.append(arg)
    return mode, remaining


def _read_stdin(stream: TextIO) -> MarkdownSource:
    buffer = getattr(stream, "buffer", None)
    data = buffer.read() if buffer is not None else stream.read().encode("utf-8")
    if not data:
        raise InputError("stdin is empty")
    return MarkdownSource(data=data, origin="stdin")


def _read_file(path: str) -> MarkdownSource:
    try:
        with open(path, "rb") as fh:
            data = fh.read()
    except OSError as exc:
        raise InputError(f"{path}: {exc.strerror or exc}", cause=exc) from exc
    if not data:
        raise InputError(f"{path}: file is empty")
    return MarkdownSource(data=data, origin=path)


def get_input(args: Sequence[str], stdin: Optional[TextIO] = None) -> MarkdownSource:
    """Resolve where the markdown comes from.

    - no args: piped stdin is read, otherwise usage is printed and the process exits 0
    - first arg decides: help/version print and exit 0, ``-`` reads stdin
    - otherwise exactly one file path is expected
    """
    stream = stdin or sys.stdin
    if not args:
        if stdin_is_piped(stream):
            return _read_stdin(stream)
        print(USAGE)
        raise SystemExit(0)

    first = args[0]
    if first in HELP_FLAGS:
        print(USAGE)
        raise SystemExit(0)
    if first in VERSION_FLAGS:
        print(f"marko {VERSION}")
        raise SystemExit(0)
    if first == "-":
        return _read_stdin(stream)

    if len(args) > 1:
        raise InputError("too many arguments (expected 1 file)")
    return _read_file(first)


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    mode, args = parse_flags(sys.argv[1:] if argv is None else argv)
    try:
        source = get_input(args)
        logger.debug(f"Read {len(source.data)} bytes from {source.origin}; mode={mode.value}")
        if mode is RenderMode.TERMINAL:
            show(source, settings)
        else:
            open_reader(source)
    except MarkoError as exc:
        logger.debug("Run failed", exc_info=exc)
        print(f"marko: {exc}", file=sys.stderr)
        return 1
    return 0


def run():
    """Console entry point for marko."""
    sys.exit(main())


if __name__ == "__main__":
    run()
