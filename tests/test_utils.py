"""Tests for hlserve utility modules."""

import logging

import pytest


class TestGetLogger:
    def test_prefix_added(self) -> None:
        from hlserve.utils.logger import get_logger

        assert get_logger("mymodule").name == "hlserve.mymodule"

    def test_prefix_not_doubled(self) -> None:
        from hlserve.utils.logger import get_logger

        assert get_logger("hlserve.server").name == "hlserve.server"
        assert get_logger("hlserve").name == "hlserve"


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def _restore(self):  # type: ignore[no-untyped-def]
        logger = logging.getLogger("hlserve")
        handlers, level = list(logger.handlers), logger.level
        yield
        logger.handlers[:] = handlers
        logger.setLevel(level)

    def test_level_name(self) -> None:
        from hlserve.utils.logger import configure_logging

        configure_logging("debug")
        assert logging.getLogger("hlserve").level == logging.DEBUG

    def test_repeated_calls_keep_one_handler(self) -> None:
        from hlserve.utils.logger import configure_logging

        before = len(logging.getLogger("hlserve").handlers)
        configure_logging("INFO")
        configure_logging("INFO")
        assert len(logging.getLogger("hlserve").handlers) == before + 1

    def test_unknown_level(self) -> None:
        from hlserve.utils.logger import configure_logging

        with pytest.raises(ValueError, match="unknown log level"):
            configure_logging("chatty")
