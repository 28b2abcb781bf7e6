"""Tests for terminal rendering and the print/page decision."""

import io
import subprocess

import pytest

from markoreader.app.config import Settings
from markoreader.core.errors import RenderError
from markoreader.core.models import MarkdownSource
from markoreader.rendering import terminal_renderer
from markoreader.rendering.terminal_renderer import STYLES, output, render, resolve_style


LONG_PARAGRAPH = " ".join(["wrapping"] * 60)


class FakePager:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def __call__(self, argv, input=None, text=None, check=None):
        self.calls.append({"argv": argv, "input": input})
        if self.error is not None:
            raise self.error
        return subprocess.CompletedProcess(argv, 0)


@pytest.fixture
def tty(monkeypatch):
    """Pretend stdout is a 24-line terminal."""

    def _set(height=24):
        monkeypatch.setattr(terminal_renderer, "stdout_is_tty", lambda stream=None: True)
        monkeypatch.setattr(terminal_renderer, "terminal_height", lambda stream=None: height)

    return _set


@pytest.fixture
def fake_pager(monkeypatch):
    pager = FakePager()
    monkeypatch.setattr(terminal_renderer.subprocess, "run", pager)
    return pager


class TestResolveStyle:
    def test_auto_without_tty_is_notty(self):
        assert resolve_style("auto", is_tty=False) is STYLES["notty"]

    def test_auto_on_tty_defaults_to_dark(self):
        assert resolve_style("auto", is_tty=True, env={}) is STYLES["dark"]

    def test_auto_on_light_terminal(self):
        assert resolve_style("auto", is_tty=True, env={"COLORFGBG": "0;15"}) is STYLES["light"]
        assert resolve_style("auto", is_tty=True, env={"COLORFGBG": "0;default;7"}) is STYLES["light"]

    def test_explicit_style_ignores_tty(self):
        assert resolve_style("Dracula", is_tty=False) is STYLES["dracula"]
        assert resolve_style("ascii", is_tty=True) is STYLES["ascii"]

    def test_unknown_style_falls_back_to_auto(self, caplog):
        assert resolve_style("neon", is_tty=False) is STYLES["notty"]
        assert "neon" in caplog.text


class TestRender:
    def test_plain_render_has_no_escape_codes(self):
        rendered = render("# Hi\n\nBody", 80, STYLES["notty"])
        assert "Hi" in rendered
        assert "Body" in rendered
        assert "\x1b[" not in rendered

    def test_color_render_has_escape_codes(self, monkeypatch):
        monkeypatch.setenv("TERM", "xterm-256color")
        rendered = render("# Hi\n\n**Body**", 80, STYLES["dark"])
        assert "\x1b[" in rendered

    def test_wraps_to_width(self):
        rendered = render(LONG_PARAGRAPH, 40, STYLES["notty"])
        lines = rendered.splitlines()
        assert len(lines) > 1
        assert max(len(line) for line in lines) <= 40

    def test_ascii_style_avoids_box_drawing(self):
        rendered = render("# Heading\n\ntext", 60, STYLES["ascii"])
        assert "Heading" in rendered
        assert "━" not in rendered
        assert "\x1b[" not in rendered

    def test_emoji_shortcodes_are_replaced(self):
        rendered = render("Ship it :rocket:", 80, STYLES["notty"])
        assert "\U0001f680" in rendered
        assert ":rocket:" not in rendered

    def test_emoji_shortcodes_in_code_are_kept(self):
        text = "```\nx = ':rocket:'\n```\n\nand `:+1:` inline, :rocket: in prose\n\n    indented :tada:\n"
        rendered = render(text, 80, STYLES["notty"])
        assert "x = ':rocket:'" in rendered
        assert ":+1:" in rendered
        assert "indented :tada:" in rendered
        assert "in prose" in rendered
        assert rendered.count("\U0001f680") == 1

    def test_renderer_failure_becomes_render_error(self, monkeypatch):
        def boom(*args, **kwargs):
            raise ValueError("boom")

        monkeypatch.setattr(terminal_renderer, "Markdown", boom)
        with pytest.raises(RenderError, match="render failed: boom"):
            render("# x", 80, STYLES["notty"])


class TestOutput:
    def test_not_a_terminal_prints_raw(self, fake_pager):
        stream = io.StringIO()
        rendered = "line\n" * 500
        output(rendered, stream=stream)
        assert stream.getvalue() == rendered
        assert fake_pager.calls == []

    def test_fits_on_screen_prints_directly(self, tty, fake_pager):
        tty(height=24)
        stream = io.StringIO()
        rendered = "line\n" * 24
        output(rendered, stream=stream)
        assert stream.getvalue() == rendered
        assert fake_pager.calls == []

    def test_overflow_uses_default_pager(self, tty, fake_pager):
        tty(height=10)
        stream = io.StringIO()
        rendered = "line\n" * 11
        output(rendered, stream=stream)
        assert stream.getvalue() == ""
        assert fake_pager.calls == [{"argv": ["less", "-r"], "input": rendered}]

    def test_overflow_uses_configured_pager(self, tty, fake_pager):
        tty(height=1)
        output("a\nb\nc\n", pager_cmd="more -s", stream=io.StringIO())
        assert fake_pager.calls[0]["argv"] == ["more", "-s"]

    @pytest.mark.parametrize(
        "error",
        [
            FileNotFoundError(2, "No such file or directory"),
            subprocess.CalledProcessError(1, ["less", "-r"]),
        ],
    )
    def test_pager_failure_falls_back_to_printing(self, tty, monkeypatch, error):
        tty(height=1)
        pager = FakePager(error=error)
        monkeypatch.setattr(terminal_renderer.subprocess, "run", pager)
        stream = io.StringIO()
        rendered = "a\nb\nc\n"
        output(rendered, stream=stream)
        assert len(pager.calls) == 1
        assert stream.getvalue() == rendered

    def test_unparseable_pager_falls_back_to_printing(self, tty, fake_pager):
        tty(height=1)
        stream = io.StringIO()
        output("a\nb\nc\n", pager_cmd='less "-r', stream=stream)
        assert stream.getvalue() == "a\nb\nc\n"
        assert fake_pager.calls == []

    def test_interrupted_pager_exits_quietly(self, tty, monkeypatch):
        tty(height=1)
        pager = FakePager(error=KeyboardInterrupt())
        monkeypatch.setattr(terminal_renderer.subprocess, "run", pager)
        stream = io.StringIO()
        output("a\nb\nc\n", stream=stream)
        assert len(pager.calls) == 1
        assert stream.getvalue() == ""


def test_show_on_non_terminal_matches_direct_render(capsys, fake_pager):
    source = MarkdownSource(data=b"# Hi\n\nBody", origin="test")
    terminal_renderer.show(source, Settings())
    expected = render("# Hi\n\nBody", 80, STYLES["notty"])
    assert capsys.readouterr().out == expected
    assert expected
    assert fake_pager.calls == []
