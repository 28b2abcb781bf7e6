from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterable, List, Optional
import logging
import signal
import socket
import subprocess
import sys
import threading

from flask import Flask, Response, render_template_string
from werkzeug.serving import BaseWSGIServer, make_server

from ..core.errors import ServerError
from ..core.models import MarkdownSource, ReaderPage, ReaderState
from ..rendering.html_renderer import build_page
from .config import LOOPBACK_HOST

logger = logging.getLogger(__name__)


# GitHub-like reading layout; light/dark chosen by the browser
READER_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{{ title }}</title>
<style>
:root {
  --bg: #ffffff;
  --fg: #24292e;
  --secondary: #586069;
  --border: #e1e4e8;
  --code-bg: #f6f8fa;
  --link: #0366d6;
  --quote-border: #dfe2e5;
  --table-border: #dfe2e5;
}
@media (prefers-color-scheme: dark) {
  :root {
    --bg: #0d1117;
    --fg: #c9d1d9;
    --secondary: #8b949e;
    --border: #30363d;
    --code-bg: #161b22;
    --link: #58a6ff;
    --quote-border: #3b434b;
    --table-border: #30363d;
  }
}
* { margin: 0; padding: 0; box-sizing: border-box; }
body {
  font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", "Noto Sans", Helvetica, Arial, sans-serif;
  font-size: 17px;
  line-height: 1.7;
  color: var(--fg);
  background: var(--bg);
  padding: 3rem 1.5rem;
}
article { max-width: 720px; margin: 0 auto; }
h1, h2, h3, h4, h5, h6 {
  margin-top: 1.5em;
  margin-bottom: 0.5em;
  font-weight: 600;
  line-height: 1.3;
}
h1 { font-size: 2em; border-bottom: 1px solid var(--border); padding-bottom: 0.3em; }
h2 { font-size: 1.5em; border-bottom: 1px solid var(--border); padding-bottom: 0.3em; }
h3 { font-size: 1.25em; }
h1:first-child { margin-top: 0; }
p { margin-bottom: 1em; }
a { color: var(--link); text-decoration: none; }
a:hover { text-decoration: underline; }
code {
  font-family: "SFMono-Regular", Consolas, "Liberation Mono", Menlo, monospace;
  font-size: 0.875em;
  background: var(--code-bg);
  padding: 0.2em 0.4em;
  border-radius: 4px;
}
pre {
  margin-bottom: 1em;
  padding: 1em;
  overflow-x: auto;
  border-radius: 8px;
  line-height: 1.5;
  background: var(--code-bg);
}
pre code { background: none; padding: 0; }
blockquote {
  margin-bottom: 1em;
  padding: 0.5em 1em;
  border-left: 4px solid var(--quote-border);
  color: var(--secondary);
}
ul, ol { margin-bottom: 1em; padding-left: 2em; }
li { margin-bottom: 0.25em; }
.task-list-item { list-style-type: none; }
table { width: 100%; margin-bottom: 1em; border-collapse: collapse; }
th, td { padding: 0.5em 1em; border: 1px solid var(--table-border); text-align: left; }
th { font-weight: 600; background: var(--code-bg); }
img { max-width: 100%; height: auto; }
hr { margin: 1.5em 0; border: none; border-top: 1px solid var(--border); }
input[type="checkbox"] { margin-right: 0.5em; }
</style>
</head>
<body>
<article>{{ body|safe }}</article>
</body>
</html>
"""

_OPEN_COMMANDS = {
    "darwin": ["open"],
    "linux": ["xdg-open"],
    "win32": ["rundll32", "url.dll,FileProtocolHandler"],
}


def create_app(page: ReaderPage, on_request: Optional[Callable[[], None]] = None) -> Flask:
    """Build the reader app: one pre-rendered document answered for every path."""
    app = Flask(__name__)
    with app.app_context():
        document = render_template_string(READER_HTML, title=page.title, body=page.body)

    @app.before_request
    def _notify():
        if on_request is not None:
            on_request()

    @app.get("/", defaults={"path": ""})
    @app.get("/<path:path>")
    def reader(path: str):
        return Response(document, content_type="text/html; charset=utf-8")

    return app


def _browser_command(platform: str) -> Optional[List[str]]:
    if platform.startswith("linux"):
        platform = "linux"
    return _OPEN_COMMANDS.get(platform)


def open_browser(url: str, platform: Optional[str] = None) -> None:
    """Launch the OS default browser without waiting; failures are only logged."""
    command = _browser_command(platform or sys.platform)
    if command is None:
        logger.debug(f"No browser command for platform {platform or sys.platform}")
        return
    try:
        subprocess.Popen(
            [*command, url],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except OSError as exc:
        logger.debug(f"Could not launch browser with {command[0]}: {exc}")


class ReaderServer:
    """Serve one page on an ephemeral loopback port until interrupted.

    Idle -> Listening -> Serving (first request) -> ShuttingDown -> Stopped.
    An interrupt while Listening goes straight to ShuttingDown.
    """

    def __init__(self, page: ReaderPage, host: str = LOOPBACK_HOST):
        self.host = host
        self.app = create_app(page, on_request=self._on_request)
        self._state = ReaderState.IDLE
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._server: Optional[BaseWSGIServer] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def state(self) -> ReaderState:
        with self._lock:
            return self._state

    @property
    def port(self) -> int:
        if self._server is None:
            raise ServerError("reader is not listening")
        return self._server.server_address[1]

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def _transition(self, allowed: Iterable[ReaderState], target: ReaderState) -> None:
        with self._lock:
            if self._state not in allowed:
                raise ServerError(f"cannot move reader from {self._state.value} to {target.value}")
            logger.debug(f"Reader {self._state.value} -> {target.value}")
            self._state = target

    def _on_request(self) -> None:
        with self._lock:
            if self._state is ReaderState.LISTENING:
                logger.debug("Reader listening -> serving")
                self._state = ReaderState.SERVING

    def start(self) -> str:
        """Bind the listener and serve it from a background thread; returns the URL."""
        if self.state is not ReaderState.IDLE:
            raise ServerError(f"cannot start reader while {self.state.value}")
        try:
            listener = socket.create_server((self.host, 0))
        except OSError as exc:
            raise ServerError(f"failed to start server: {exc}", cause=exc) from exc
        try:
            # werkzeug duplicates the descriptor, so the original can be closed
            self._server = make_server(self.host, 0, self.app, threaded=True, fd=listener.fileno())
        finally:
            listener.close()
        self._transition((ReaderState.IDLE,), ReaderState.LISTENING)
        self._thread = threading.Thread(
            target=self._server.serve_forever,
            name="marko-reader",
            daemon=True,
        )
        self._thread.start()
        logger.info(f"Reader listening on {self.url}")
        return self.url

    def interrupt(self) -> None:
        self._stop.set()

    @contextmanager
    def sigint_trapped(self):
        """Route SIGINT to ``interrupt()`` for the duration of the block (main thread only)."""
        if threading.current_thread() is not threading.main_thread():
            yield
            return
        previous = signal.signal(signal.SIGINT, lambda signum, frame: self.interrupt())
        try:
            yield
        finally:
            signal.signal(signal.SIGINT, previous if previous is not None else signal.default_int_handler)

    def wait_for_interrupt(self, poll_interval: float = 0.5) -> None:
        """Block until SIGINT (or ``interrupt()``) arrives."""
        with self.sigint_trapped():
            while not self._stop.wait(poll_interval):
                pass

    def shutdown(self) -> None:
        self._transition((ReaderState.LISTENING, ReaderState.SERVING), ReaderState.SHUTTING_DOWN)
        if self._server is not None:
            self._server.shutdown()
            self._server.server_close()
        if self._thread is not None:
            self._thread.join()
        self._transition((ReaderState.SHUTTING_DOWN,), ReaderState.STOPPED)


def open_reader(source: MarkdownSource) -> None:
    page = build_page(source)
    server = ReaderServer(page)
    # Ctrl+C stays trapped from bind until the listener is closed
    with server.sigint_trapped():
        url = server.start()
        print(f"Reader opened at {url} — Press Ctrl+C to close", flush=True)
        open_browser(url)
        server.wait_for_interrupt()
        print("\nClosing reader...", flush=True)
        server.shutdown()
