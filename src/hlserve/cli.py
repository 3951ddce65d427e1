"""Command-line entry point for hlserve.

Runs one highlight session on stdin/stdout. Log output goes to stderr;
stdout carries nothing but the protocol.

Usage:
    hlserve [--engine pygments|rosettes] [--alias FLAG=NAME ...]
            [--css-prefix PREFIX] [--log-level LEVEL]
    hlserve --list-languages

Exit statuses:
    0    session ended (blank line or end of input)
    1    unknown language
    2    bad arguments or engine not installed
    3    the highlighting engine raised
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from hlserve import __version__
from hlserve.config import ENGINES, ServerConfig, parse_alias, server_config_context
from hlserve.errors import ConfigError
from hlserve.registry import PygmentsRegistry
from hlserve.server import serve
from hlserve.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)

EXIT_CONFIG_ERROR = 2
EXIT_ENGINE_FAILURE = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hlserve",
        description=(
            "Persistent syntax highlighting server. Reads a language line, "
            "TAB-prefixed code lines and a blank line; answers with HTML "
            "followed by an EOT line."
        ),
    )
    parser.add_argument(
        "--engine",
        choices=sorted(ENGINES),
        default="pygments",
        help="highlighting engine (default: %(default)s)",
    )
    parser.add_argument(
        "--alias",
        action="append",
        default=[],
        metavar="FLAG=NAME",
        help="map a language flag to another name before lookup (repeatable)",
    )
    parser.add_argument(
        "--css-prefix",
        default="",
        metavar="PREFIX",
        help="prefix for the CSS classes of highlighted spans",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="stderr log level (default: %(default)s)",
    )
    parser.add_argument(
        "--list-languages",
        action="store_true",
        help="print the languages Pygments knows and exit",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def build_config(args: argparse.Namespace) -> ServerConfig:
    """Turn parsed arguments into a ServerConfig.

    Raises:
        ConfigError: On a malformed --alias
    """
    config = ServerConfig(engine=args.engine, css_prefix=args.css_prefix)
    extra = dict(parse_alias(entry) for entry in args.alias)
    if extra:
        config = config.with_aliases(extra)
    return config


def _use_utf8(stream: object, errors: str = "strict") -> None:
    reconfigure = getattr(stream, "reconfigure", None)
    if reconfigure is not None:
        reconfigure(encoding="utf-8", errors=errors)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        configure_logging(args.log_level)
    except ValueError as exc:
        parser.error(str(exc))

    try:
        config = build_config(args)
    except ConfigError as exc:
        parser.error(str(exc))

    if args.list_languages:
        for name in PygmentsRegistry(config.aliases).languages():
            print(name)
        return 0

    # Undecodable input bytes become U+FFFD instead of ending the session.
    _use_utf8(sys.stdin, errors="replace")
    _use_utf8(sys.stdout)

    with server_config_context(config):
        try:
            return serve(sys.stdin, sys.stdout, config=config)
        except ConfigError as exc:
            logger.error("%s", exc)
            return EXIT_CONFIG_ERROR
        except KeyboardInterrupt:
            return 130
        except Exception:
            # Status 1 belongs to unknown languages.
            logger.exception("Highlighting engine failed")
            return EXIT_ENGINE_FAILURE


if __name__ == "__main__":
    sys.exit(main())
