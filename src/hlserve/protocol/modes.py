"""Request assembler states.

The assembler is a two-state machine:
- IDLE: no language pending, a blank line ends the session
- COLLECTING: a language is pending, a blank line finalizes the block
"""

from __future__ import annotations

from enum import Enum, auto


class AssemblerState(Enum):
    """Request assembler states."""

    IDLE = auto()
    COLLECTING = auto()


# Structural marker in front of every code line
CODE_LINE_MARKER = "\t"
