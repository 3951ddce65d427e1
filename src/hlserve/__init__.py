"""
hlserve — Persistent syntax highlighting over a line protocol

One long-lived process answers many highlight requests on stdin/stdout,
so the grammar catalogue is loaded once instead of once per code block.

Protocol:
    -> python          declare a language (any non-empty line without a leading TAB)
    -> \\tx = 1         code line, leading TAB stripped
    ->                 blank line: highlight the block
    <- <span ...>...   HTML
    <- \\x04            block terminator
    ->                 blank line with nothing pending: end of session (exit 0)

An unknown language makes the server exit with status 1 and no output.

Quick Start:
    >>> import io
    >>> from hlserve import serve
    >>> out = io.StringIO()
    >>> serve(io.StringIO("plain\\n\\thello\\n\\n"), out)
    0

    >>> # From the driving side
    >>> from hlserve import HighlightClient
    >>> with HighlightClient() as client:
    ...     html = client.highlight("python", "print('hi')")

Installation:
    pip install hlserve              # Pygments engine
    pip install hlserve[rosettes]    # + optional Rosettes engine
"""

from hlserve.client import HighlightClient
from hlserve.config import (
    ServerConfig,
    get_server_config,
    reset_server_config,
    server_config_context,
    set_server_config,
)
from hlserve.dispatcher import HighlightDispatcher
from hlserve.errors import ConfigError, HlserveError, ProtocolError, UnknownLanguageError
from hlserve.highlighting import (
    Engine,
    Highlighter,
    PygmentsHighlighter,
    RosettesHighlighter,
    load_engine,
)
from hlserve.protocol import (
    AssemblerState,
    HighlightRequest,
    RequestAssembler,
    Session,
    SessionEnd,
)
from hlserve.reader import iter_lines
from hlserve.registry import GrammarRegistry, GrammarScope, PygmentsRegistry, RosettesRegistry
from hlserve.server import HighlightServer, serve

__version__ = "0.1.0"


def highlight(source: str, language: str, *, config: ServerConfig | None = None) -> str:
    """Highlight ``source`` in-process, without the line protocol.

    Raises:
        UnknownLanguageError: ``language`` has no grammar scope
    """
    engine = load_engine(config=config)
    scope = engine.registry.resolve(language)
    if scope is None:
        raise UnknownLanguageError(language)
    return engine.highlighter.highlight(source, scope)


__all__ = [
    "AssemblerState",
    "ConfigError",
    "Engine",
    "GrammarRegistry",
    "GrammarScope",
    "HighlightClient",
    "HighlightDispatcher",
    "HighlightRequest",
    "HighlightServer",
    "Highlighter",
    "HlserveError",
    "ProtocolError",
    "PygmentsHighlighter",
    "PygmentsRegistry",
    "RequestAssembler",
    "RosettesHighlighter",
    "RosettesRegistry",
    "ServerConfig",
    "Session",
    "SessionEnd",
    "UnknownLanguageError",
    "__version__",
    "get_server_config",
    "highlight",
    "iter_lines",
    "load_engine",
    "reset_server_config",
    "serve",
    "server_config_context",
    "set_server_config",
]
