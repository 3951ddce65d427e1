"""Line protocol for hlserve.

Exports the request assembler, its states, and the outcomes it produces.
"""

from hlserve.protocol.assembler import RequestAssembler, Session
from hlserve.protocol.buffer import SourceBuffer
from hlserve.protocol.modes import CODE_LINE_MARKER, AssemblerState
from hlserve.protocol.outcomes import HighlightRequest, Outcome, SessionEnd

__all__ = [
    "CODE_LINE_MARKER",
    "AssemblerState",
    "HighlightRequest",
    "Outcome",
    "RequestAssembler",
    "Session",
    "SessionEnd",
    "SourceBuffer",
]
