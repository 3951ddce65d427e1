"""Tests for highlighting engines."""

from __future__ import annotations

import pytest
from pygments.token import Comment

from hlserve import highlight
from hlserve.config import ServerConfig
from hlserve.errors import ConfigError, UnknownLanguageError
from hlserve.highlighting import Engine, PygmentsHighlighter, load_engine
from hlserve.registry import GrammarScope, PygmentsRegistry


def _scope(flag: str) -> GrammarScope:
    scope = PygmentsRegistry().resolve(flag)
    assert scope is not None
    return scope


class TestPygmentsHighlighter:
    """Tokenize + serialize with Pygments."""

    def test_plain_text_is_unchanged(self) -> None:
        html = PygmentsHighlighter().highlight("hello\nworld\n", _scope("plain"))
        assert html == "hello\nworld\n"

    def test_html_is_escaped(self) -> None:
        html = PygmentsHighlighter().highlight("a < b & c\n", _scope("plain"))
        assert html == "a &lt; b &amp; c\n"

    def test_final_newline_added(self) -> None:
        html = PygmentsHighlighter().highlight("hello", _scope("plain"))
        assert html == "hello\n"

    def test_leading_blank_lines_kept(self) -> None:
        html = PygmentsHighlighter().highlight("\n\nhello\n", _scope("plain"))
        assert html == "\n\nhello\n"

    def test_no_wrapper_element(self) -> None:
        html = PygmentsHighlighter().highlight("x = 1\n", _scope("python"))
        assert not html.startswith("<pre")
        assert "<div" not in html

    def test_uses_css_classes(self) -> None:
        html = PygmentsHighlighter().highlight("def f(): pass\n", _scope("python"))
        assert '<span class="k">def</span>' in html
        assert "style=" not in html

    def test_css_prefix(self) -> None:
        html = PygmentsHighlighter(css_prefix="hl-").highlight(
            "def f(): pass\n", _scope("python")
        )
        assert '<span class="hl-k">def</span>' in html

    def test_line_breaks_end_line_comments(self) -> None:
        html = PygmentsHighlighter().highlight("# a\nb\n", _scope("python"))
        assert '<span class="c1"># a</span>' in html
        assert '<span class="n">b</span>' in html

    def test_tokenize_exposes_stream(self) -> None:
        tokens = list(PygmentsHighlighter().tokenize("# note\n", _scope("python")))
        assert any(ttype in Comment and value == "# note" for ttype, value in tokens)

    def test_render_token_stream(self) -> None:
        highlighter = PygmentsHighlighter()
        tokens = list(highlighter.tokenize("x\n", _scope("plain")))
        assert highlighter.render(tokens) == "x\n"

    def test_deterministic(self) -> None:
        highlighter = PygmentsHighlighter()
        scope = _scope("python")
        source = "for i in range(3):\n    print(i)\n"
        assert highlighter.highlight(source, scope) == highlighter.highlight(source, scope)

    def test_style_defs(self) -> None:
        css = PygmentsHighlighter().style_defs(".code")
        assert ".code .k" in css


class TestLoadEngine:
    """Engine selection."""

    def test_default_engine(self) -> None:
        engine = load_engine()
        assert isinstance(engine, Engine)
        assert engine.name == "pygments"
        assert isinstance(engine.registry, PygmentsRegistry)

    def test_engine_from_config(self) -> None:
        engine = load_engine(config=ServerConfig(css_prefix="x-"))
        scope = engine.registry.resolve("python")
        assert scope is not None
        assert 'class="x-k"' in engine.highlighter.highlight("def f(): pass\n", scope)

    def test_unknown_engine(self) -> None:
        with pytest.raises(ConfigError, match="unknown engine"):
            load_engine("chroma")

    def test_rosettes_engine(self) -> None:
        pytest.importorskip("rosettes")
        engine = load_engine("rosettes")
        scope = engine.registry.resolve("python")
        assert scope is not None
        html = engine.highlighter.highlight("x = 1\n", scope)
        assert isinstance(html, str)
        assert html

    def test_rosettes_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        import sys

        # A None entry makes the import raise ImportError
        monkeypatch.setitem(sys.modules, "rosettes", None)
        with pytest.raises(ConfigError, match=r"hlserve\[rosettes\]"):
            load_engine("rosettes")


class TestHighlightFunction:
    """In-process highlight() helper."""

    def test_highlight(self) -> None:
        assert highlight("hello\n", "plain") == "hello\n"

    def test_unknown_language(self) -> None:
        with pytest.raises(UnknownLanguageError) as exc_info:
            highlight("x", "no-such-language-xyz")
        assert exc_info.value.language == "no-such-language-xyz"
