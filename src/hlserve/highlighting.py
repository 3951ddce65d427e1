"""Syntax highlighting engines for hlserve.

An engine is a grammar registry plus a highlighter. The highlighter turns
``(source, scope)`` into an HTML fragment: the source is tokenized with the
scope's grammar and the token stream is serialized to class-based spans,
without any wrapping ``<pre>`` element.

Engines:
    pygments   Default. Pygments lexers and HtmlFormatter.
    rosettes   Optional, needs ``pip install hlserve[rosettes]``.

Usage:
    >>> from hlserve.highlighting import load_engine
    >>> engine = load_engine("pygments")
    >>> scope = engine.registry.resolve("plain")
    >>> engine.highlighter.highlight("a < b\\n", scope)
    'a &lt; b\\n'
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any, Protocol

import pygments
from pygments.formatters import HtmlFormatter

from hlserve.config import ENGINES, ServerConfig, get_server_config
from hlserve.errors import ConfigError
from hlserve.registry import GrammarRegistry, GrammarScope, PygmentsRegistry, RosettesRegistry
from hlserve.utils.logger import get_logger

logger = get_logger(__name__)

TokenStream = Iterable[tuple[Any, str]]


class Highlighter(Protocol):
    """Protocol for highlighters.

    Highlighters take code and a resolved scope and return HTML markup.
    Failures inside the engine are not caught here; they propagate to the
    caller unchanged.
    """

    def highlight(self, source: str, scope: GrammarScope) -> str:
        """Highlight ``source`` with the grammar of ``scope``.

        Contract:
            - MUST escape HTML entities in code
            - MUST use CSS classes (not inline styles)
            - MUST keep the line structure of ``source``
        """
        ...


class PygmentsHighlighter:
    """Pygments-based highlighter.

    Tokenizing and serializing are exposed separately so the token stream can
    be inspected; ``highlight`` chains the two.
    """

    __slots__ = ("_formatter",)

    def __init__(self, css_prefix: str = "") -> None:
        self._formatter = HtmlFormatter(nowrap=True, classprefix=css_prefix)

    def tokenize(self, source: str, scope: GrammarScope) -> Iterator[tuple[Any, str]]:
        """Tokenize ``source`` with the scope's lexer.

        Leading and trailing newlines are kept; a final newline is added if
        the source has none.
        """
        lexer = scope.handle(stripnl=False, ensurenl=True)
        return lexer.get_tokens(source)

    def render(self, tokens: TokenStream) -> str:
        """Serialize a token stream to HTML spans."""
        result: str = pygments.format(tokens, self._formatter)
        return result

    def highlight(self, source: str, scope: GrammarScope) -> str:
        return self.render(self.tokenize(source, scope))

    def style_defs(self, selector: str | None = None) -> str:
        """Return the CSS rules matching the emitted classes."""
        result: str = self._formatter.get_style_defs(selector)
        return result


class RosettesHighlighter:
    """Rosettes-based highlighter."""

    __slots__ = ("_rosettes",)

    def __init__(self, rosettes_module: Any) -> None:
        self._rosettes = rosettes_module

    def highlight(self, source: str, scope: GrammarScope) -> str:
        result: str = self._rosettes.highlight(source, language=scope.handle)
        return result


@dataclass(frozen=True, slots=True)
class Engine:
    """A grammar registry paired with the highlighter that understands its scopes."""

    name: str
    registry: GrammarRegistry
    highlighter: Highlighter


def _import_rosettes() -> Any:
    try:
        import rosettes  # type: ignore[import-not-found]
    except ImportError as exc:
        raise ConfigError(
            "the rosettes engine needs Rosettes: pip install hlserve[rosettes]"
        ) from exc
    return rosettes


def load_engine(name: str | None = None, config: ServerConfig | None = None) -> Engine:
    """Build the engine named ``name`` (default: the configured one).

    Raises:
        ConfigError: Unknown engine name, or Rosettes not installed
    """
    config = config if config is not None else get_server_config()
    name = name if name is not None else config.engine

    if name == "pygments":
        engine = Engine(
            name=name,
            registry=PygmentsRegistry(config.aliases),
            highlighter=PygmentsHighlighter(css_prefix=config.css_prefix),
        )
    elif name == "rosettes":
        rosettes = _import_rosettes()
        engine = Engine(
            name=name,
            registry=RosettesRegistry(rosettes, config.aliases),
            highlighter=RosettesHighlighter(rosettes),
        )
    else:
        raise ConfigError(f"unknown engine {name!r}; expected one of {sorted(ENGINES)}")

    logger.debug("Loaded %s engine", name)
    return engine


__all__ = [
    "Engine",
    "Highlighter",
    "PygmentsHighlighter",
    "RosettesHighlighter",
    "load_engine",
]
