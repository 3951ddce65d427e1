"""ContextVar-based server configuration for hlserve.

Provides context-local configuration using Python's ContextVars (PEP 567).
The CLI builds one ServerConfig at startup; the server, registry and
dispatcher read it when they are not handed one explicitly.

Usage:
    from hlserve.config import ServerConfig, server_config_context

    with server_config_context(ServerConfig(css_prefix="hl-")):
        exit_code = serve(sys.stdin, sys.stdout)

"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, replace
from types import MappingProxyType

from hlserve.errors import ConfigError

# Flags the driving process commonly sends that Pygments does not know
# under that exact name.
DEFAULT_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "md": "markdown",
        "sh": "bash",
        "plain": "text",
        "plaintext": "text",
        "txt": "text",
    }
)

ENGINES = frozenset({"pygments", "rosettes"})


def _default_aliases() -> Mapping[str, str]:
    return DEFAULT_ALIASES


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Immutable server configuration.

    Attributes:
        ready_message: Line written once the grammar registry is loaded
        block_terminator: Line written after every highlighted block
        aliases: Language flag renames applied before registry lookup
        css_prefix: Prefix for the CSS classes of highlighted spans
        engine: Highlighting engine name ("pygments" or "rosettes")

    """

    ready_message: str = "ready"
    block_terminator: str = "\x04"
    aliases: Mapping[str, str] = field(default_factory=_default_aliases)
    css_prefix: str = ""
    engine: str = "pygments"

    def __post_init__(self) -> None:
        if self.engine not in ENGINES:
            raise ConfigError(
                f"unknown engine {self.engine!r}; expected one of {sorted(ENGINES)}"
            )
        if "\n" in self.ready_message or "\n" in self.block_terminator:
            raise ConfigError("protocol markers must fit on a single line")
        if not self.block_terminator:
            raise ConfigError("block terminator must not be empty")
        # Normalize keys the same way the registry normalizes flags.
        normalized = {k.strip().lower(): v for k, v in self.aliases.items()}
        object.__setattr__(self, "aliases", MappingProxyType(normalized))

    @classmethod
    def from_dict(cls, config_dict: dict) -> ServerConfig:
        """Create ServerConfig from dictionary.

        Only includes keys that are valid ServerConfig fields; unknown keys
        are silently ignored.

        Example:
            >>> config = ServerConfig.from_dict({"css_prefix": "hl-", "port": 1})
            >>> config.css_prefix
            'hl-'

        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        return cls(**filtered)

    def with_aliases(self, extra: Mapping[str, str]) -> ServerConfig:
        """Return a copy whose alias table is extended by ``extra``.

        Entries in ``extra`` win over existing ones.
        """
        merged = dict(self.aliases)
        merged.update(extra)
        return replace(self, aliases=merged)


def parse_alias(entry: str) -> tuple[str, str]:
    """Parse a ``FLAG=NAME`` alias specification.

    Raises:
        ConfigError: If either side is empty or ``=`` is missing
    """
    flag, sep, name = entry.partition("=")
    flag, name = flag.strip(), name.strip()
    if not sep or not flag or not name:
        raise ConfigError(f"alias must look like FLAG=NAME, got {entry!r}")
    return flag, name


# Module-level default config (reused, never recreated)
_DEFAULT_CONFIG: ServerConfig = ServerConfig()

_server_config: ContextVar[ServerConfig] = ContextVar(
    "server_config",
    default=_DEFAULT_CONFIG,
)


def get_server_config() -> ServerConfig:
    """Get current server configuration for this context."""
    return _server_config.get()


def set_server_config(config: ServerConfig) -> None:
    """Set server configuration for current context."""
    _server_config.set(config)


def reset_server_config() -> None:
    """Reset to the default configuration."""
    _server_config.set(_DEFAULT_CONFIG)


@contextmanager
def server_config_context(config: ServerConfig) -> Iterator[None]:
    """Context manager for temporary config changes.

    Restores the previous config even if an exception is raised.

    Example:
        >>> with server_config_context(ServerConfig(css_prefix="x-")):
        ...     get_server_config().css_prefix
        'x-'

    """
    previous = _server_config.get()
    _server_config.set(config)
    try:
        yield
    finally:
        _server_config.set(previous)


__all__ = [
    "DEFAULT_ALIASES",
    "ENGINES",
    "ServerConfig",
    "get_server_config",
    "parse_alias",
    "reset_server_config",
    "server_config_context",
    "set_server_config",
]
