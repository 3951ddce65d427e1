"""Tests for HighlightClient against a real server process."""

from __future__ import annotations

import sys

import pytest

from hlserve.client import HighlightClient, default_command, split_code
from hlserve.errors import ProtocolError, UnknownLanguageError


class TestSplitCode:
    def test_empty(self) -> None:
        assert split_code("") == []

    def test_trailing_newline_dropped_once(self) -> None:
        assert split_code("a\nb\n") == ["a", "b"]
        assert split_code("a\n\n") == ["a", ""]

    def test_line_endings(self) -> None:
        assert split_code("a\r\nb\rc") == ["a", "b", "c"]

    def test_blank_lines_kept(self) -> None:
        assert split_code("a\n\nb") == ["a", "", "b"]


class TestDefaultCommand:
    def test_uses_current_interpreter(self) -> None:
        assert default_command(["--log-level", "DEBUG"]) == [
            sys.executable,
            "-m",
            "hlserve",
            "--log-level",
            "DEBUG",
        ]


class TestHighlightClient:
    def test_plain(self) -> None:
        with HighlightClient() as client:
            assert client.highlight("plain", "hello\nworld") == "hello\nworld\n"

    def test_many_requests_one_process(self) -> None:
        with HighlightClient() as client:
            first = client.highlight("python", "def f():\n    return 1\n")
            second = client.highlight("python", "def f():\n    return 1\n")
            third = client.highlight("plain", "<tag>")

        assert first == second
        assert '<span class="k">def</span>' in first
        assert third == "&lt;tag&gt;\n"

    def test_blank_lines_in_code(self) -> None:
        with HighlightClient() as client:
            assert client.highlight("plain", "a\n\n\nb\n") == "a\n\n\nb\n"

    def test_renames(self) -> None:
        with HighlightClient(renames={"snek": "python"}) as client:
            assert '<span class="k">def</span>' in client.highlight("snek", "def f(): pass")

    def test_close_returns_status(self) -> None:
        client = HighlightClient()
        client.highlight("plain", "x")
        assert client.close() == 0
        assert client.returncode == 0

    def test_unknown_language(self) -> None:
        client = HighlightClient()
        with pytest.raises(UnknownLanguageError) as exc_info:
            client.highlight("no-such-language-xyz", "x")
        assert exc_info.value.language == "no-such-language-xyz"
        assert client.close() == 1

    @pytest.mark.parametrize("code", ["\x04", "before\n\x04\nafter", "a\r\n\x04\r\n"])
    def test_terminator_line_rejected(self, code: str) -> None:
        with HighlightClient() as client:
            with pytest.raises(ValueError, match="block terminator"):
                client.highlight("plain", code)
            # The session is still in step after the rejected call
            assert client.highlight("plain", "second") == "second\n"

    def test_terminator_inside_line_allowed(self) -> None:
        with HighlightClient() as client:
            html = client.highlight("plain", "a\x04b\nafter")
            assert client.highlight("plain", "second") == "second\n"
        assert html.endswith("after\n")

    @pytest.mark.parametrize("language", ["", "\tpython", "py\nthon"])
    def test_invalid_language_flag(self, language: str) -> None:
        with HighlightClient() as client:
            with pytest.raises(ValueError, match="invalid language flag"):
                client.highlight(language, "x")

    def test_server_not_ready(self) -> None:
        client = HighlightClient([sys.executable, "-c", "print('hello')"])
        with pytest.raises(ProtocolError, match="ready"):
            client.highlight("plain", "x")
        client.close()

    def test_server_exits_early(self) -> None:
        client = HighlightClient([sys.executable, "-c", "pass"])
        with pytest.raises(ProtocolError, match="before becoming ready"):
            client.wait_ready()
        client.close()
