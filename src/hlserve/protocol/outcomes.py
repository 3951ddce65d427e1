"""Outcomes produced by the request assembler.

Thread Safety:
All outcomes are frozen and safe to share.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class HighlightRequest:
    """A finalized block, ready for dispatch.

    Attributes:
        language: The declared language flag (never empty)
        source: Accumulated code; every collected line ends with ``\\n``
    """

    language: str
    source: str

    @property
    def line_count(self) -> int:
        """Number of code lines collected for this request."""
        return self.source.count("\n")


@dataclass(frozen=True, slots=True)
class SessionEnd:
    """A blank line arrived with no language pending."""

    pass


Outcome = HighlightRequest | SessionEnd
