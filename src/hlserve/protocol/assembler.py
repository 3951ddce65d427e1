"""Request assembler: the line protocol state machine.

Classifies each protocol line and keeps the per-session state (pending
language and collected source). Evaluated per line, in priority order:

1. Non-empty line not starting with TAB: language declaration. Any block
   still being collected is discarded without being emitted.
2. Non-empty line starting with TAB: code line, TAB stripped. This is not
   gated on a pending language; lines arriving while idle are collected
   into a buffer that only a later declaration can clear.
3. Empty line with a language pending: finalize into a HighlightRequest.
4. Empty line with nothing pending: end of session.

The assembler has no side effects beyond its own session record, so it can
be driven directly in tests: construct, feed lines, inspect outcomes.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from hlserve.protocol.buffer import SourceBuffer
from hlserve.protocol.modes import CODE_LINE_MARKER, AssemblerState
from hlserve.protocol.outcomes import HighlightRequest, Outcome, SessionEnd
from hlserve.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(slots=True)
class Session:
    """Mutable state of the single in-flight request.

    Attributes:
        pending_language: Most recent declaration not yet finalized
        buffer: Code collected since that declaration
    """

    pending_language: str | None = None
    buffer: SourceBuffer = field(default_factory=SourceBuffer)

    def reset(self) -> None:
        """Clear language and buffer together."""
        self.pending_language = None
        self.buffer.clear()


class RequestAssembler:
    """Line-driven builder of highlight requests.

    Usage:
            >>> asm = RequestAssembler()
            >>> asm.feed("python")
            >>> asm.feed("\\tprint(1)")
            >>> asm.feed("")
            HighlightRequest(language='python', source='print(1)\\n')
            >>> asm.feed("")
            SessionEnd()

    """

    __slots__ = ("_session",)

    def __init__(self, session: Session | None = None) -> None:
        self._session = session if session is not None else Session()

    @property
    def state(self) -> AssemblerState:
        """Current machine state, derived from the pending language."""
        if self._session.pending_language is None:
            return AssemblerState.IDLE
        return AssemblerState.COLLECTING

    @property
    def pending_language(self) -> str | None:
        return self._session.pending_language

    @property
    def buffered_source(self) -> str:
        """Source collected so far for the pending request."""
        return self._session.buffer.build()

    def feed(self, line: str) -> Outcome | None:
        """Apply one protocol line.

        Args:
            line: A protocol line without its terminator

        Returns:
            HighlightRequest when a block is finalized, SessionEnd on a blank
            line with nothing pending, None otherwise.
        """
        session = self._session

        if line and not line.startswith(CODE_LINE_MARKER):
            if session.pending_language is not None and session.buffer:
                logger.debug(
                    "Discarding %d unfinalized line(s) for %r",
                    len(session.buffer),
                    session.pending_language,
                )
            session.buffer.clear()
            session.pending_language = line
            logger.debug("Language declared: %r", line)
            return None

        if line:
            session.buffer.append_line(line[1:])
            return None

        if session.pending_language is not None:
            request = HighlightRequest(
                language=session.pending_language,
                source=session.buffer.build(),
            )
            session.reset()
            return request

        return SessionEnd()

    def feed_lines(self, lines: Iterable[str]) -> Iterator[Outcome]:
        """Feed lines in order, yielding every non-None outcome.

        Stops after the first SessionEnd. Lines are pulled lazily, so the
        caller fully handles one outcome before the next line is read.
        """
        for line in lines:
            outcome = self.feed(line)
            if outcome is None:
                continue
            yield outcome
            if isinstance(outcome, SessionEnd):
                return

    def reset(self) -> None:
        """Drop any pending language and collected source."""
        self._session.reset()
