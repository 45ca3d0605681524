# src/suitewatch/runtime/progress.py

"""
Single-line progress display.

Interactive terminals get an animated bar redrawn in place on a timer;
anything else (CI logs, pipes) gets the first and the final label only.
The implementation is picked once, in ``create_progress_renderer``.
"""

import asyncio

import structlog
from rich.console import Console

from suitewatch.protocols import ProgressRenderer, StatusLine
from suitewatch.telemetry import StructLogger

log: StructLogger = structlog.get_logger("runtime.progress")

SPINNER_FRAMES = ("-", "\\", "|", "/")
DEFAULT_BAR_WIDTH = 28
DEFAULT_TICK_INTERVAL = 0.16  # 160 milliseconds
DEFAULT_LABEL = "Running tests..."
CLEAR_LINE = "\r\x1b[2K"


def _normalize_ratio(ratio: float | None) -> float | None:
    if ratio is None or ratio != ratio or ratio < 0:  # ratio != ratio catches NaN
        return None
    return min(1.0, float(ratio))


# --- Status lines ---
class TerminalStatusLine:
    """Overwrites the current terminal line on every update."""

    def __init__(self, console: Console):
        self.console = console
        self._active = True
        self.text = ""

    def _render(self) -> None:
        stream = self.console.file
        stream.write(f"{CLEAR_LINE}{self.text}")
        stream.flush()

    def update_progress(self, text: str) -> None:
        if not self._active:
            return
        self.text = text
        self._render()

    def teardown(self, final_line: str | None = None) -> None:
        if not self._active:
            return
        if final_line:
            self.text = final_line
            self._render()
        self.console.file.write("\n")
        self.console.file.flush()
        self._active = False


class PlainStatusLine:
    """Prints the first progress text and the final line, nothing in between."""

    def __init__(self, console: Console):
        self.console = console
        self._progress_printed = False
        self._torn_down = False

    def _print(self, text: str) -> None:
        self.console.print(text, markup=False, highlight=False, emoji=False, soft_wrap=True)

    def update_progress(self, text: str) -> None:
        if self._progress_printed or self._torn_down:
            return
        self._print(text)
        self._progress_printed = True

    def teardown(self, final_line: str | None = None) -> None:
        if self._torn_down:
            return
        if final_line:
            self._print(final_line)
        self._torn_down = True


# --- Renderers ---
class AnimatedProgressRenderer:
    """
    Drives a bouncing (unknown ratio) or filling (known ratio) bar from an
    event-loop timer.
    """

    def __init__(
        self,
        status_line: StatusLine,
        default_label: str = DEFAULT_LABEL,
        bar_width: int = DEFAULT_BAR_WIDTH,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
    ):
        self.status_line = status_line
        self.default_label = default_label
        self.bar_width = bar_width
        self.tick_interval = tick_interval
        self.label = default_label
        self.ratio: float | None = None
        self.position = 0
        self.direction = 1
        self.frame_index = 0
        self._timer_handle: asyncio.TimerHandle | None = None
        self._stopped = False

    @property
    def is_running(self) -> bool:
        return self._timer_handle is not None

    def start(self) -> None:
        if self._timer_handle is not None or self._stopped:
            return
        self.render_frame(advance=False)
        self._schedule_tick()
        log.debug("Progress animation started", tick_interval=self.tick_interval)

    def set_status(self, label: str | None, ratio: float | None = None) -> None:
        if self._stopped:
            return
        self.label = label or self.default_label
        self.ratio = _normalize_ratio(ratio)
        self.render_frame(advance=False)

    def stop(self, final_label: str | None = None) -> None:
        self._cancel_timer()
        if self._stopped:
            return
        self._stopped = True
        self.status_line.teardown(final_label)
        log.debug("Progress animation stopped")

    def render_frame(self, advance: bool = True) -> str:
        if advance:
            self.frame_index = (self.frame_index + 1) % len(SPINNER_FRAMES)
            if self.ratio is None:
                self.position += self.direction
                if self.position >= self.bar_width:
                    self.position = self.bar_width
                    self.direction = -1
                elif self.position <= 0:
                    self.position = 0
                    self.direction = 1

        if self.ratio is None:
            filled = max(0, min(self.bar_width, self.position))
        else:
            filled = max(0, min(self.bar_width, int(self.ratio * self.bar_width + 0.5)))

        bar = "#" * filled + "." * (self.bar_width - filled)
        text = f"[{bar}] {SPINNER_FRAMES[self.frame_index]} {self.label}"
        self.status_line.update_progress(text)
        return text

    def _tick(self) -> None:
        self._timer_handle = None
        if self._stopped:
            return
        self.render_frame()
        self._schedule_tick()

    def _schedule_tick(self) -> None:
        loop = asyncio.get_running_loop()
        self._timer_handle = loop.call_later(self.tick_interval, self._tick)

    def _cancel_timer(self) -> None:
        if self._timer_handle:
            self._timer_handle.cancel()
            self._timer_handle = None


class PlainProgressRenderer:
    """Non-interactive counterpart: the label once at start, the final label once at stop."""

    def __init__(self, status_line: StatusLine, default_label: str = DEFAULT_LABEL):
        self.status_line = status_line
        self.default_label = default_label
        self.label = default_label
        self.ratio: float | None = None
        self._stopped = False

    def start(self) -> None:
        self.status_line.update_progress(self.label)

    def set_status(self, label: str | None, ratio: float | None = None) -> None:
        self.label = label or self.default_label
        self.ratio = _normalize_ratio(ratio)
        self.status_line.update_progress(self.label)

    def stop(self, final_label: str | None = None) -> None:
        if self._stopped:
            return
        self._stopped = True
        self.status_line.teardown(final_label)


def create_progress_renderer(
    console: Console,
    default_label: str = DEFAULT_LABEL,
    bar_width: int = DEFAULT_BAR_WIDTH,
    tick_interval: float = DEFAULT_TICK_INTERVAL,
) -> ProgressRenderer:
    """Picks the renderer once, based on whether the console is a terminal."""
    if console.is_terminal:
        log.debug("Using animated progress renderer")
        return AnimatedProgressRenderer(
            TerminalStatusLine(console),
            default_label=default_label,
            bar_width=bar_width,
            tick_interval=tick_interval,
        )
    log.debug("Using plain progress renderer")
    return PlainProgressRenderer(PlainStatusLine(console), default_label=default_label)

# 🔼⚙️
