"""Exception classes for hlserve.

Provides standardized exceptions for error handling throughout hlserve.
"""

from __future__ import annotations


class HlserveError(Exception):
    """Base exception for all hlserve errors.

    Subclass this for specific error categories.
    """

    pass


class UnknownLanguageError(HlserveError):
    """A declared language has no grammar scope in the registry.

    Raised by the dispatcher before any output is written for the request.
    The server driver turns it into exit status 1.
    """

    def __init__(self, language: str) -> None:
        """Initialize with the unresolved language flag.

        Args:
            language: The raw language identifier from the declaration line
        """
        self.language = language
        super().__init__(f"no grammar scope for language {language!r}")


class ConfigError(HlserveError):
    """Invalid server configuration (unknown engine, bad alias, ...)."""

    pass


class ProtocolError(HlserveError):
    """The peer violated the line protocol.

    Raised on the client side when the server does not announce readiness
    or answers with something other than a terminated block.
    """

    def __init__(self, message: str, line: str | None = None) -> None:
        """Initialize protocol error.

        Args:
            message: Description of the violation
            line: The offending line, if any
        """
        self.line = line
        detail = f" (got {line!r})" if line is not None else ""
        super().__init__(f"{message}{detail}")
