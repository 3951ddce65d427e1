"""Grammar registry: resolves language flags to grammar scopes.

A flag is whatever the driving process puts on a declaration line: a
language name ("python"), a short alias ("py"), a file extension ("rs",
".rs") or a file name ("Makefile"). Resolution yields exactly one
GrammarScope or None.

Thread Safety:
GrammarScope is frozen. Registries cache resolutions in a plain dict and are
meant to be owned by a single server loop.

Example:
    >>> registry = PygmentsRegistry()
    >>> registry.resolve("py").name
    'Python'
    >>> registry.resolve("no-such-language") is None
    True
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from pygments.lexers import (
    find_lexer_class_by_name,
    find_lexer_class_for_filename,
    get_all_lexers,
)
from pygments.util import ClassNotFound

from hlserve.config import get_server_config
from hlserve.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class GrammarScope:
    """Opaque handle on one language's tokenization rules.

    Attributes:
        name: Canonical language name reported by the engine
        flag: The flag this scope was resolved from
        handle: Engine-specific grammar (Pygments lexer class, Rosettes name)
    """

    name: str
    flag: str
    handle: Any


class GrammarRegistry(Protocol):
    """Protocol for grammar registries."""

    def resolve(self, flag: str) -> GrammarScope | None:
        """Resolve a language flag.

        Contract:
            - MUST NOT raise for unknown flags; return None instead
            - Resolving the same flag twice MUST give equal scopes
        """
        ...

    def supports_language(self, flag: str) -> bool:
        """Check whether ``flag`` resolves to a scope."""
        ...

    def preload(self, flags: Iterable[str]) -> int:
        """Resolve ``flags`` ahead of the first request; return how many resolved."""
        ...


def normalize_flag(flag: str) -> str:
    """Normalize a flag for lookup: surrounding whitespace removed, lower-cased."""
    return flag.strip().lower()


class PygmentsRegistry:
    """Grammar registry backed by the Pygments lexer catalogue.

    Lookup order for a normalized flag, after applying the alias table:
    lexer alias, the raw flag as a file name ("CMakeLists.txt"), then a
    file extension ("rs", ".rs").
    """

    __slots__ = ("_aliases", "_cache")

    def __init__(self, aliases: Mapping[str, str] | None = None) -> None:
        if aliases is None:
            aliases = get_server_config().aliases
        self._aliases = {normalize_flag(k): v for k, v in aliases.items()}
        self._cache: dict[str, GrammarScope | None] = {}

    def resolve(self, flag: str) -> GrammarScope | None:
        key = normalize_flag(flag)
        if key in self._cache:
            return self._cache[key]

        scope = self._lookup(flag, key)
        if scope is None:
            logger.debug("No grammar for flag %r", flag)
        else:
            logger.debug("Resolved %r to %s", flag, scope.name)
        self._cache[key] = scope
        return scope

    def supports_language(self, flag: str) -> bool:
        return self.resolve(flag) is not None

    def preload(self, flags: Iterable[str]) -> int:
        return sum(self.resolve(flag) is not None for flag in flags)

    def languages(self) -> list[str]:
        """Return sorted canonical names of every known language."""
        return sorted({name for name, *_ in get_all_lexers()}, key=str.lower)

    def _lookup(self, flag: str, key: str) -> GrammarScope | None:
        if not key:
            return None
        name = self._aliases.get(key, key)

        try:
            lexer_cls = find_lexer_class_by_name(name)
        except ClassNotFound:
            lexer_cls = None

        if lexer_cls is None:
            lexer_cls = find_lexer_class_for_filename(flag.strip())

        if lexer_cls is None:
            extension = name.lstrip(".")
            if extension:
                lexer_cls = find_lexer_class_for_filename(f"file.{extension}")

        if lexer_cls is None:
            return None
        return GrammarScope(name=lexer_cls.name, flag=flag, handle=lexer_cls)


class RosettesRegistry:
    """Grammar registry backed by Rosettes (``hlserve[rosettes]``)."""

    __slots__ = ("_aliases", "_rosettes")

    def __init__(self, rosettes_module: Any, aliases: Mapping[str, str] | None = None) -> None:
        if aliases is None:
            aliases = get_server_config().aliases
        self._aliases = {normalize_flag(k): v for k, v in aliases.items()}
        self._rosettes = rosettes_module

    def resolve(self, flag: str) -> GrammarScope | None:
        key = normalize_flag(flag)
        if not key:
            return None
        name = self._aliases.get(key, key)
        try:
            supported: bool = self._rosettes.supports_language(name)
        except Exception:
            logger.debug("Rosettes rejected flag %r", flag, exc_info=True)
            return None
        if not supported:
            return None
        return GrammarScope(name=name, flag=flag, handle=name)

    def supports_language(self, flag: str) -> bool:
        return self.resolve(flag) is not None

    def preload(self, flags: Iterable[str]) -> int:
        return sum(self.resolve(flag) is not None for flag in flags)


__all__ = [
    "GrammarRegistry",
    "GrammarScope",
    "PygmentsRegistry",
    "RosettesRegistry",
    "normalize_flag",
]
