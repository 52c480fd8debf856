"""Tests for ota.output.console module."""

from __future__ import annotations

import pytest

from ota.output.console import ConsoleProtocol, MockConsole, OutputRecord, RichConsole, Style


class TestStyle:
    def test_str_conversion(self) -> None:
        assert str(Style.SUCCESS) == "success"
        assert str(Style.DIM) == "dim"


class TestMockConsole:
    """Test MockConsole for testing purposes."""

    def test_print_captures_message(self) -> None:
        console = MockConsole()
        console.print("hello")
        assert console.outputs == [OutputRecord("hello", Style.DEFAULT)]

    def test_prefixed_helpers(self) -> None:
        console = MockConsole()
        console.success("uploaded")
        console.error("failed")
        console.warning("careful")
        console.info("fyi")
        assert console.messages == ["OK uploaded", "error: failed", "warning: careful", "info: fyi"]
        assert console.has_success() is True
        assert console.has_error() is True

    def test_kv(self) -> None:
        console = MockConsole()
        console.kv("Branch", "main")
        assert console.outputs[0].message == "Branch: main"

    def test_header_and_newline(self) -> None:
        console = MockConsole()
        console.header("Published update group")
        console.newline()
        assert console.outputs[0].style == Style.HEADER
        assert console.text == "Published update group\n"

    def test_find_and_clear(self) -> None:
        console = MockConsole()
        console.print("hello world")
        console.print("goodbye")
        assert len(console.find("hello")) == 1
        console.clear()
        assert console.outputs == []


class TestRichConsole:
    def test_kv_alignment(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.kv("Branch", "main")
        out = capsys.readouterr().out
        assert out.startswith("Branch")
        assert out.rstrip().endswith("main")

    def test_markup_in_messages_is_literal(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.print("[bold]not markup[/bold]")
        assert "[bold]not markup[/bold]" in capsys.readouterr().out

    def test_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole(stderr=True)
        console.info("to stderr")
        captured = capsys.readouterr()
        assert "to stderr" in captured.err
        assert captured.out == ""


class TestConsoleProtocol:
    def test_mock_satisfies_protocol(self) -> None:
        def use_console(c: ConsoleProtocol) -> None:
            c.print("test")
            c.success("ok")
            c.error("err")
            c.warning("warn")
            c.info("info")
            c.header("hdr")
            c.kv("k", "v")
            c.newline()

        mock = MockConsole()
        use_console(mock)
        assert len(mock.outputs) == 8


@pytest.mark.parametrize(
    "name", ["print", "success", "error", "warning", "info", "header", "kv", "newline"]
)
def test_protocol_methods_are_documented(name: str) -> None:
    assert getattr(ConsoleProtocol, name).__doc__
