from __future__ import annotations

from dataclasses import dataclass
import logging
import os

from rich.console import Console
from rich.logging import RichHandler

from .. import __version__

logger = logging.getLogger(__name__)

VERSION = __version__

DEFAULT_PAGER = "less -r"
DEFAULT_STYLE = "auto"
DEFAULT_LOG_LEVEL = "WARNING"

# Terminal geometry
MAX_WIDTH = 120
DEFAULT_WIDTH = 80
DEFAULT_HEIGHT = 24

# Reader
DEFAULT_TITLE = "marko reader"
CODE_STYLE = "dracula"
LOOPBACK_HOST = "127.0.0.1"

USAGE = """marko — a terminal markdown reader

Usage:
  marko <file.md>       Open in visual reader (default)
  marko -t <file.md>    Render markdown in terminal
  marko -               Read from stdin
  cat file | marko      Pipe markdown to stdin

Options:
  -t, --term    Render in terminal instead of visual reader
  --help        Show this help
  --version     Show version

Environment:
  GLAMOUR_STYLE   Set terminal rendering style (dark, light, notty, dracula, ascii)
  PAGER           Set pager command (default: less -r)"""


def _env_str(name: str, default: str = "") -> str:
    value = os.getenv(name)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


@dataclass(frozen=True)
class Settings:
    """Read-only runtime configuration, loaded once per run."""

    pager: str = DEFAULT_PAGER
    style: str = DEFAULT_STYLE
    log_level: str = DEFAULT_LOG_LEVEL

    @staticmethod
    def from_env() -> "Settings":
        """Build settings from the environment.

        - PAGER: pager command line (default ``less -r``)
        - GLAMOUR_STYLE: terminal style name (default ``auto``)
        - MARKO_LOG_LEVEL: diagnostic log level (default ``WARNING``)
        """
        return Settings(
            pager=_env_str("PAGER", DEFAULT_PAGER),
            style=_env_str("GLAMOUR_STYLE", DEFAULT_STYLE).lower(),
            log_level=_env_str("MARKO_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        )


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Send diagnostics to stderr through rich; silent below WARNING by default."""
    numeric = logging.getLevelName(level)
    unknown = not isinstance(numeric, int)
    if unknown:
        numeric = logging.WARNING
    logging.basicConfig(
        level=numeric,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    # werkzeug logs every request at INFO
    logging.getLogger("werkzeug").setLevel(max(numeric, logging.WARNING))
    if unknown:
        logger.warning(f"Unknown MARKO_LOG_LEVEL {level!r}; using WARNING")
