"""Line reader for the highlight protocol.

Turns a text stream into the sequence of protocol lines: one item per input
line, in arrival order, with the line terminator removed. Empty lines are
kept since they carry meaning (finalize / session end).

Iteration stops at end of input. Whatever the caller has accumulated at that
point is simply never finalized.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TextIO


def strip_terminator(line: str) -> str:
    """Remove one trailing ``\\n`` or ``\\r\\n`` from ``line``."""
    if line.endswith("\n"):
        line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
    return line


def iter_lines(stream: TextIO) -> Iterator[str]:
    """Yield lines from ``stream`` lazily, without terminators.

    Uses ``readline`` rather than iterating the stream so that a line is
    handed out as soon as it arrives on a pipe.

    Example:
        >>> import io
        >>> list(iter_lines(io.StringIO("python\\n\\tx = 1\\n\\n")))
        ['python', '\\tx = 1', '']
    """
    while True:
        line = stream.readline()
        if not line:
            return
        yield strip_terminator(line)
