"""Highlight dispatcher: turns a finalized request into a response block.

A response block is the HTML on its own line followed by the block
terminator on its own line, flushed before returning. A request whose
language has no grammar scope produces no output at all; the dispatcher
raises UnknownLanguageError and leaves the decision to exit to its caller.
"""

from __future__ import annotations

from typing import TextIO

from hlserve.config import ServerConfig, get_server_config
from hlserve.errors import UnknownLanguageError
from hlserve.highlighting import Highlighter
from hlserve.protocol.outcomes import HighlightRequest
from hlserve.registry import GrammarRegistry
from hlserve.utils.logger import get_logger

logger = get_logger(__name__)


class HighlightDispatcher:
    """Resolves, highlights and writes one request at a time."""

    __slots__ = ("_registry", "_highlighter", "_output", "_terminator")

    def __init__(
        self,
        registry: GrammarRegistry,
        highlighter: Highlighter,
        output: TextIO,
        config: ServerConfig | None = None,
    ) -> None:
        """Initialize dispatcher.

        Args:
            registry: Resolves language flags to grammar scopes
            highlighter: Produces HTML for a resolved scope
            output: Stream receiving response blocks
            config: Server config (current context config if None)
        """
        config = config if config is not None else get_server_config()
        self._registry = registry
        self._highlighter = highlighter
        self._output = output
        self._terminator = config.block_terminator

    def dispatch(self, request: HighlightRequest) -> str:
        """Highlight ``request`` and write its response block.

        Returns:
            The HTML that was written

        Raises:
            UnknownLanguageError: The language has no grammar scope;
                nothing was written
        """
        scope = self._registry.resolve(request.language)
        if scope is None:
            raise UnknownLanguageError(request.language)

        html = self._highlighter.highlight(request.source, scope)
        self._output.write(f"{html}\n{self._terminator}\n")
        self._output.flush()
        logger.debug(
            "Highlighted %d line(s) as %s (%d chars)",
            request.line_count,
            scope.name,
            len(html),
        )
        return html
