from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RenderMode(str, Enum):
    """How a run presents the markdown."""

    TERMINAL = "terminal"
    READER = "reader"


class ReaderState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"
    SERVING = "serving"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


@dataclass(frozen=True)
class MarkdownSource:
    data: bytes
    origin: str = "stdin"

    @property
    def text(self) -> str:
        return self.data.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class ReaderPage:
    title: str
    body: str
