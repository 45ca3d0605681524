# src/suitewatch/runtime/discovery.py
"""
Best-effort listing of the suites a run is going to execute.
"""
import asyncio
from pathlib import Path

import structlog
from attrs import define, field

from suitewatch.exceptions import DiscoveryError
from suitewatch.telemetry import StructLogger

log: StructLogger = structlog.get_logger("runtime.discovery")


@define(frozen=True, slots=True)
class SuitePlan:
    """Suites known before the run starts, in the order the runner listed them."""
    suites: tuple[str, ...] = field(factory=tuple, converter=tuple)

    def __len__(self) -> int:
        return len(self.suites)

    def __contains__(self, suite: object) -> bool:
        return suite in self.suites


def parse_suite_listing(output: str) -> SuitePlan:
    """One suite path per non-blank line; duplicates keep their first position."""
    suites = dict.fromkeys(line.strip() for line in output.splitlines() if line.strip())
    return SuitePlan(suites)


async def discover_suites(command: list[str], working_dir: Path) -> SuitePlan:
    """
    Runs the listing command and parses its stdout.

    Raises:
        DiscoveryError: The command is missing, cannot run, or exits non-zero.
    """
    discovery_log = log.bind(command=" ".join(command), working_dir=str(working_dir))
    discovery_log.debug("Discovering test suites", emoji_key="discover")

    try:
        process = await asyncio.create_subprocess_exec(
            *command,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=working_dir,
        )
        stdout_bytes, stderr_bytes = await process.communicate()
    except OSError as e:
        discovery_log.warning("Suite discovery could not start", error=str(e))
        raise DiscoveryError(f"Could not run '{command[0]}': {e}", command=command, details=e) from e

    exit_code = process.returncode if process.returncode is not None else -1
    if exit_code != 0:
        stderr = stderr_bytes.decode("utf-8", errors="replace").strip()
        discovery_log.warning("Suite discovery failed", exit_code=exit_code)
        raise DiscoveryError(f"{' '.join(command)} exited with code {exit_code}. {stderr}".strip(), command=command)

    plan = parse_suite_listing(stdout_bytes.decode("utf-8", errors="replace"))
    discovery_log.info("Suites discovered", count=len(plan), emoji_key="discover")
    return plan

# 🔼⚙️
