"""Server loop: wires the line reader, assembler and dispatcher together.

This is the only place where protocol outcomes become exit statuses:

    SessionEnd / end of input   -> 0
    UnknownLanguageError        -> 1

Thread Safety:
One HighlightServer per process. The loop is strictly sequential: the next
line is read only after the current one, including any dispatch and its
flushed output, has been handled.

Example:
    >>> import io
    >>> out = io.StringIO()
    >>> serve(io.StringIO("plain\\n\\thi\\n\\n\\n"), out)
    0
    >>> out.getvalue()
    'ready\\nhi\\n\\n\\x04\\n'
"""

from __future__ import annotations

from typing import TextIO

from hlserve.config import ServerConfig, get_server_config
from hlserve.dispatcher import HighlightDispatcher
from hlserve.errors import UnknownLanguageError
from hlserve.highlighting import Engine, load_engine
from hlserve.protocol import HighlightRequest, RequestAssembler, SessionEnd
from hlserve.reader import iter_lines
from hlserve.utils.logger import get_logger

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_UNKNOWN_LANGUAGE = 1


class HighlightServer:
    """One highlight session over a pair of text streams."""

    __slots__ = ("_stdin", "_stdout", "_config", "_engine", "_assembler", "_dispatcher")

    def __init__(
        self,
        stdin: TextIO,
        stdout: TextIO,
        *,
        config: ServerConfig | None = None,
        engine: Engine | None = None,
    ) -> None:
        """Initialize server, load the highlighting engine and warm its registry.

        Args:
            stdin: Stream of protocol lines
            stdout: Stream receiving the ready line and response blocks
            config: Server config (current context config if None)
            engine: Preloaded engine (built from config if None)

        Raises:
            ConfigError: The configured engine cannot be loaded
        """
        self._config = config if config is not None else get_server_config()
        self._engine = engine if engine is not None else load_engine(config=self._config)
        # Grammars behind the alias table are loaded before "ready" goes out.
        preloaded = self._engine.registry.preload(self._config.aliases)
        logger.debug("Preloaded %d grammars", preloaded)
        self._stdin = stdin
        self._stdout = stdout
        self._assembler = RequestAssembler()
        self._dispatcher = HighlightDispatcher(
            self._engine.registry,
            self._engine.highlighter,
            stdout,
            self._config,
        )

    @property
    def assembler(self) -> RequestAssembler:
        return self._assembler

    def announce(self) -> None:
        """Write the readiness line."""
        self._stdout.write(f"{self._config.ready_message}\n")
        self._stdout.flush()
        logger.info("Ready (%s engine)", self._engine.name)

    def run(self) -> int:
        """Announce readiness, then serve until the session ends.

        Returns:
            Process exit status
        """
        self.announce()
        for outcome in self._assembler.feed_lines(iter_lines(self._stdin)):
            if isinstance(outcome, SessionEnd):
                logger.info("Session ended by blank line")
                return EXIT_OK
            try:
                self.handle(outcome)
            except UnknownLanguageError as exc:
                logger.error("%s", exc)
                return EXIT_UNKNOWN_LANGUAGE

        if self._assembler.pending_language is not None:
            logger.debug(
                "Input closed with %r unfinalized", self._assembler.pending_language
            )
        logger.info("Input closed")
        return EXIT_OK

    def handle(self, request: HighlightRequest) -> str:
        """Dispatch one finalized request."""
        return self._dispatcher.dispatch(request)


def serve(
    stdin: TextIO,
    stdout: TextIO,
    *,
    config: ServerConfig | None = None,
    engine: Engine | None = None,
) -> int:
    """Run a highlight session and return its exit status."""
    return HighlightServer(stdin, stdout, config=config, engine=engine).run()
