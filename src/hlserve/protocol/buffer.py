"""Source buffer for the request being collected.

Appends code lines to a list and joins once at finalization, so a block of
n lines costs O(n) instead of O(n²) string concatenation.
"""

from __future__ import annotations


class SourceBuffer:
    """Accumulates code lines for one request.

    Every appended line gets a trailing newline, so the built source is the
    collected lines joined and terminated by ``\\n``.

    Usage:
            >>> buf = SourceBuffer()
            >>> buf.append_line("hello")
            >>> buf.append_line("world")
            >>> buf.build()
            'hello\\nworld\\n'

    """

    __slots__ = ("_parts", "_lines")

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._lines = 0

    def append_line(self, line: str) -> None:
        """Append one code line (without terminator)."""
        if line:
            self._parts.append(line)
        self._parts.append("\n")
        self._lines += 1

    def build(self) -> str:
        """Join all collected lines into the request source."""
        return "".join(self._parts)

    def clear(self) -> None:
        """Drop everything collected so far."""
        self._parts.clear()
        self._lines = 0

    def __len__(self) -> int:
        """Return number of collected lines."""
        return self._lines

    def __bool__(self) -> bool:
        return self._lines > 0
