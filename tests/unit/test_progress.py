#
# tests/unit/test_progress.py
#
"""
Tests for the animated and plain progress renderers.
"""

import asyncio
from unittest.mock import MagicMock

import pytest

from suitewatch.protocols import ProgressRenderer, StatusLine
from suitewatch.runtime.progress import (
    CLEAR_LINE,
    AnimatedProgressRenderer,
    PlainProgressRenderer,
    PlainStatusLine,
    TerminalStatusLine,
    create_progress_renderer,
)


def output_of(console) -> str:
    return console.file.getvalue()


class TestFactory:
    def test_terminal_gets_animated_renderer(self, terminal_console) -> None:
        renderer = create_progress_renderer(terminal_console)
        assert isinstance(renderer, AnimatedProgressRenderer)
        assert isinstance(renderer.status_line, TerminalStatusLine)
        assert isinstance(renderer, ProgressRenderer)

    def test_non_terminal_gets_plain_renderer(self, plain_console) -> None:
        renderer = create_progress_renderer(plain_console)
        assert isinstance(renderer, PlainProgressRenderer)
        assert isinstance(renderer.status_line, PlainStatusLine)


class TestPlainRenderer:
    def test_initial_and_final_label_printed_once(self, plain_console) -> None:
        renderer = PlainProgressRenderer(PlainStatusLine(plain_console))
        renderer.set_status("Suites 0 | Waiting for Jest to start")
        renderer.start()
        renderer.set_status("Suites 1", 0.1)
        renderer.set_status("Suites 2", 0.2)
        renderer.stop("done | Suites 2")
        renderer.stop("done again")

        assert output_of(plain_console).splitlines() == [
            "Suites 0 | Waiting for Jest to start",
            "done | Suites 2",
        ]


class TestTerminalStatusLine:
    def test_overwrites_in_place_and_ends_with_newline(self, terminal_console) -> None:
        line = TerminalStatusLine(terminal_console)
        line.update_progress("one")
        line.update_progress("two")
        line.teardown("final")
        line.update_progress("ignored")

        output = output_of(terminal_console)
        assert output == f"{CLEAR_LINE}one{CLEAR_LINE}two{CLEAR_LINE}final\n"
        assert output.count("\n") == 1


class TestAnimatedRenderer:
    @pytest.fixture
    def status_line(self) -> MagicMock:
        return MagicMock(spec=StatusLine)

    def last_text(self, status_line: MagicMock) -> str:
        return status_line.update_progress.call_args.args[0]

    def test_unknown_ratio_bounces(self, status_line: MagicMock) -> None:
        renderer = AnimatedProgressRenderer(status_line, bar_width=3)
        renderer.set_status("working")
        positions = []
        for _ in range(8):
            renderer.render_frame()
            positions.append(renderer.position)
        assert positions == [1, 2, 3, 2, 1, 0, 1, 2]
        assert self.last_text(status_line).startswith("[##.] ")

    def test_known_ratio_snaps_fill_and_keeps_spinning(self, status_line: MagicMock) -> None:
        renderer = AnimatedProgressRenderer(status_line, bar_width=10)
        renderer.set_status("40% | Suites 4/10", 0.4)
        first = self.last_text(status_line)
        renderer.render_frame()
        second = self.last_text(status_line)

        assert first == "[####......] - 40% | Suites 4/10"
        assert second == "[####......] \\ 40% | Suites 4/10"

    def test_ratio_is_clamped_and_invalid_ratio_ignored(self, status_line: MagicMock) -> None:
        renderer = AnimatedProgressRenderer(status_line, bar_width=4)
        renderer.set_status("over", 3.0)
        assert self.last_text(status_line).startswith("[####]")
        renderer.set_status("nan", float("nan"))
        assert renderer.ratio is None

    def test_set_status_renders_without_advancing(self, status_line: MagicMock) -> None:
        renderer = AnimatedProgressRenderer(status_line, bar_width=5)
        renderer.set_status("a")
        renderer.set_status("b")
        assert renderer.frame_index == 0
        assert renderer.position == 0
        assert status_line.update_progress.call_count == 2

    def test_empty_label_falls_back_to_default(self, status_line: MagicMock) -> None:
        renderer = AnimatedProgressRenderer(status_line, default_label="Running npm test...", bar_width=2)
        renderer.set_status(None)
        assert self.last_text(status_line).endswith("Running npm test...")

    @pytest.mark.asyncio
    async def test_timer_ticks_until_stopped(self, status_line: MagicMock) -> None:
        renderer = AnimatedProgressRenderer(status_line, bar_width=5, tick_interval=0.01)
        renderer.start()
        assert renderer.is_running
        await asyncio.sleep(0.08)
        renderer.stop("finished")

        assert not renderer.is_running
        assert renderer.frame_index != 0 or renderer.position > 0
        status_line.teardown.assert_called_once_with("finished")

        calls_after_stop = status_line.update_progress.call_count
        await asyncio.sleep(0.03)
        assert status_line.update_progress.call_count == calls_after_stop

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self, status_line: MagicMock) -> None:
        renderer = AnimatedProgressRenderer(status_line, tick_interval=0.01)
        renderer.start()
        renderer.stop("one")
        renderer.stop("two")
        renderer.start()
        status_line.teardown.assert_called_once_with("one")
        assert not renderer.is_running

    @pytest.mark.asyncio
    async def test_end_to_end_on_terminal(self, terminal_console) -> None:
        renderer = create_progress_renderer(terminal_console, bar_width=4, tick_interval=0.01)
        renderer.set_status("Suites 0", None)
        renderer.start()
        await asyncio.sleep(0.03)
        renderer.stop("[####] done")

        output = output_of(terminal_console)
        assert output.endswith(f"{CLEAR_LINE}[####] done\n")
        assert output.count("\n") == 1
