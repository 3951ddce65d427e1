"""Client side of the highlight protocol.

Spawns an hlserve process once and pipes every highlight through it, so the
grammar catalogue is loaded a single time per document build.

Usage:
    >>> with HighlightClient() as client:
    ...     html = client.highlight("python", "x = 1")

Failure model:
    The server answers an unknown language by exiting with status 1 and no
    output. The client sees end of input before the terminator line and
    raises UnknownLanguageError; the client is unusable afterwards.
"""

from __future__ import annotations

import subprocess
import sys
from collections.abc import Mapping, Sequence
from types import TracebackType
from typing import NoReturn, TextIO

from hlserve.config import ServerConfig, get_server_config
from hlserve.errors import ProtocolError, UnknownLanguageError
from hlserve.protocol.modes import CODE_LINE_MARKER
from hlserve.utils.logger import get_logger

logger = get_logger(__name__)


def default_command(extra_args: Sequence[str] = ()) -> list[str]:
    """Command line running hlserve with the current interpreter."""
    return [sys.executable, "-m", "hlserve", *extra_args]


def split_code(code: str) -> list[str]:
    """Split ``code`` into protocol code lines.

    Any of ``\\r\\n``, ``\\r`` and ``\\n`` ends a line. A single trailing
    line break does not start an extra empty line.

    Example:
        >>> split_code("a\\r\\nb\\n")
        ['a', 'b']
    """
    if not code:
        return []
    lines = code.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


class HighlightClient:
    """Persistent connection to an hlserve process."""

    def __init__(
        self,
        command: Sequence[str] | None = None,
        *,
        renames: Mapping[str, str] | None = None,
        config: ServerConfig | None = None,
        timeout: float = 10.0,
    ) -> None:
        """Spawn the server.

        Args:
            command: Server command line (``python -m hlserve`` if None)
            renames: Language renames applied before sending a declaration
            config: Protocol markers to expect (current context config if None)
            timeout: Seconds to wait for the server to exit on close()
        """
        self._config = config if config is not None else get_server_config()
        self._renames = dict(renames or {})
        self._timeout = timeout
        self._ready = False
        self._command = list(command) if command is not None else default_command()
        logger.debug("Starting highlight server: %s", self._command)
        self._process = subprocess.Popen(
            self._command,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            bufsize=1,
        )

    @property
    def returncode(self) -> int | None:
        return self._process.poll()

    def wait_ready(self) -> None:
        """Block until the server announces readiness.

        Raises:
            ProtocolError: The server exited or wrote something else first
        """
        if self._ready:
            return
        line = self._readline()
        if not line:
            raise ProtocolError("server exited before becoming ready")
        if line.rstrip("\n") != self._config.ready_message:
            raise ProtocolError("expected ready line from server", line)
        self._ready = True
        logger.debug("Highlight server ready")

    def highlight(self, language: str, code: str) -> str:
        """Highlight ``code`` as ``language``.

        Returns:
            The HTML the server produced for the block

        Raises:
            ValueError: ``language`` cannot be sent as a declaration line, or
                a line of ``code`` equals the block terminator
            UnknownLanguageError: The server has no grammar for ``language``
            ProtocolError: The server exited for any other reason
        """
        language = self._renames.get(language, language)
        if (
            not language
            or language.startswith(CODE_LINE_MARKER)
            or "\n" in language
            or "\r" in language
        ):
            raise ValueError(f"invalid language flag: {language!r}")

        code_lines = split_code(code)
        terminator = self._config.block_terminator
        # Plain text renders such a line verbatim and would end the response early.
        if terminator in code_lines:
            raise ValueError(f"code line equals the block terminator {terminator!r}")

        self.wait_ready()

        request = [language]
        request.extend(CODE_LINE_MARKER + line for line in code_lines)
        request.append("")
        try:
            self._stdin().write("\n".join(request) + "\n")
            self._stdin().flush()
        except BrokenPipeError:
            self._raise_exited(language)

        lines: list[str] = []
        while True:
            line = self._readline()
            if not line:
                self._raise_exited(language)
            if line.rstrip("\n") == terminator:
                break
            lines.append(line)

        html = "".join(lines)
        if html.endswith("\n"):
            html = html[:-1]
        return html

    def close(self) -> int:
        """End the session and wait for the server to exit.

        Returns:
            The server's exit status
        """
        if self._process.poll() is None:
            try:
                # A blank line with no language pending ends the session.
                self._stdin().write("\n")
                self._stdin().flush()
            except BrokenPipeError:
                pass
        if self._process.stdin is not None:
            try:
                self._process.stdin.close()
            except BrokenPipeError:
                pass
        try:
            returncode = self._process.wait(timeout=self._timeout)
        except subprocess.TimeoutExpired:
            logger.warning("Highlight server did not exit, killing it")
            self._process.kill()
            returncode = self._process.wait()
        if self._process.stdout is not None:
            self._process.stdout.close()
        return returncode

    def __enter__(self) -> HighlightClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _stdin(self) -> TextIO:
        assert self._process.stdin is not None
        return self._process.stdin

    def _readline(self) -> str:
        assert self._process.stdout is not None
        return self._process.stdout.readline()

    def _raise_exited(self, language: str) -> NoReturn:
        returncode = self._process.wait(timeout=self._timeout)
        if returncode == 1:
            raise UnknownLanguageError(language)
        raise ProtocolError(f"highlight server exited with status {returncode}")
