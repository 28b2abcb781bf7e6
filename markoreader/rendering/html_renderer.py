from __future__ import annotations

from functools import lru_cache
from typing import Optional
import html
import logging

from markdown_it import MarkdownIt
from mdit_py_plugins.anchors import anchors_plugin
from mdit_py_plugins.tasklists import tasklists_plugin
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.token import Token
from pygments.util import ClassNotFound

from ..app.config import CODE_STYLE, DEFAULT_TITLE
from ..core.errors import RenderError
from ..core.models import MarkdownSource, ReaderPage

logger = logging.getLogger(__name__)


class _FenceHighlighter:
    """Highlight fenced code with inline pygments styles."""

    def __init__(self, style: str = CODE_STYLE):
        self.formatter = HtmlFormatter(style=style, noclasses=True, nowrap=True)
        pyg_style = self.formatter.style
        pre_css = [f"background-color: {pyg_style.background_color}"]
        fg = pyg_style.style_for_token(Token.Text).get("color") or pyg_style.style_for_token(Token).get("color")
        if fg:
            pre_css.insert(0, f"color: #{fg}")
        self.pre_style = "; ".join(pre_css)

    def fence(self, code: str, info: Optional[str]) -> str:
        lang = info.strip().split()[0] if info and info.strip() else ""
        if not lang:
            return f"<pre><code>{html.escape(code)}</code></pre>\n"
        class_attr = f' class="language-{html.escape(lang)}"'
        try:
            lexer = get_lexer_by_name(lang, stripall=False)
        except ClassNotFound:
            logger.debug(f"No lexer for code fence language {lang!r}")
            return f"<pre><code{class_attr}>{html.escape(code)}</code></pre>\n"
        highlighted = highlight(code, lexer, self.formatter)
        return f'<pre style="{self.pre_style}"><code{class_attr}>{highlighted}</code></pre>\n'


def _build_markdown_parser(highlighter: _FenceHighlighter) -> MarkdownIt:
    # gfm-like: tables, strikethrough and linkify on top of commonmark
    md = MarkdownIt("gfm-like", {"linkify": True, "html": True})
    md.use(anchors_plugin, min_level=1, max_level=6)
    md.use(tasklists_plugin)

    def fence_rule(self, tokens, idx, options, env):
        token = tokens[idx]
        return highlighter.fence(token.content, token.info)

    md.add_render_rule("fence", fence_rule)
    return md


@lru_cache(maxsize=1)
def _parser() -> MarkdownIt:
    return _build_markdown_parser(_FenceHighlighter())


def render_html(markdown_text: str) -> str:
    """Convert markdown to an HTML fragment (no page chrome)."""
    try:
        return _parser().render(markdown_text)
    except Exception as exc:
        raise RenderError(str(exc) or exc.__class__.__name__, cause=exc) from exc


def extract_title(markdown_text: str) -> str:
    """Return the text after ``# `` on the first line that starts with it."""
    for line in markdown_text.split("\n"):
        if line.startswith("# "):
            return line[2:].rstrip("\r")
    return DEFAULT_TITLE


def build_page(source: MarkdownSource) -> ReaderPage:
    text = source.text
    return ReaderPage(title=extract_title(text), body=render_html(text))
