import io
import sys
import textwrap
from pathlib import Path

import pytest
from rich.console import Console

from suitewatch.config import RunConfig


class FakeClock:
    """Manually advanced stand-in for time.time()."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def plain_console() -> Console:
    """A non-terminal console writing to memory."""
    return Console(file=io.StringIO(), force_terminal=False, width=200)


@pytest.fixture
def terminal_console() -> Console:
    """A console that reports itself as an interactive terminal."""
    return Console(file=io.StringIO(), force_terminal=True, width=200)


@pytest.fixture
def write_runner_script(tmp_path: Path):
    """Writes a Python script standing in for the test runner and returns its command."""

    def _write(body: str, name: str = "fake_runner.py") -> tuple[str, ...]:
        script = tmp_path / name
        preamble = "import sys\nsys.stdout.reconfigure(encoding=\"utf-8\")\n"
        script.write_text(preamble + textwrap.dedent(body), encoding="utf-8")
        return (sys.executable, str(script))

    return _write


@pytest.fixture
def run_config(tmp_path: Path, write_runner_script) -> RunConfig:
    """A run of a fake runner that passes one suite and fails another."""
    command = write_runner_script(
        """
        import sys
        print("PASS suites/a.test.js (1.2 s)")
        print("FAIL suites/b.test.js (0.5 s)")
        print("  ● b renders")
        sys.stderr.write("noise on stderr\\n")
        sys.exit(1)
        """
    )
    return RunConfig(
        command=command,
        discovery_command=None,
        working_dir=tmp_path,
        tick_interval=0.01,
    )
