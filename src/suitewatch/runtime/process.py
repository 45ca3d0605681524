# src/suitewatch/runtime/process.py
"""
Runs the test-runner subprocess as a message producer and consumes its
output: every chunk is teed to the log file and to a per-stream LineBuffer.
"""
import asyncio
from pathlib import Path
from typing import BinaryIO, TypeAlias

import structlog
from attrs import define

from suitewatch.exceptions import SpawnError
from suitewatch.parsing import LineBuffer
from suitewatch.protocols import LineSink
from suitewatch.telemetry import StructLogger

log: StructLogger = structlog.get_logger("runtime.process")

CHUNK_SIZE = 64 * 1024
STREAM_SOURCES = ("stdout", "stderr")


# --- Messages ---
@define(frozen=True, slots=True)
class OutputChunk:
    source: str
    data: bytes


@define(frozen=True, slots=True)
class StreamClosed:
    source: str


@define(frozen=True, slots=True)
class ProcessExited:
    returncode: int


ProcessMessage: TypeAlias = OutputChunk | StreamClosed | ProcessExited


def normalize_returncode(returncode: int | None) -> int:
    """Maps a signal termination (negative code) to the shell convention 128 + N."""
    if returncode is None:
        return 0
    if returncode < 0:
        return 128 + abs(returncode)
    return returncode


class ProcessProducer:
    """Spawns the runner and publishes its output as messages on a queue."""

    def __init__(self, command: list[str], working_dir: Path, queue: asyncio.Queue[ProcessMessage]):
        self.command = command
        self.working_dir = working_dir
        self.queue = queue
        self.process: asyncio.subprocess.Process | None = None
        self._log = log.bind(command=" ".join(command), working_dir=str(working_dir))

    async def spawn(self) -> None:
        """
        Starts the subprocess. The child inherits the environment and stdin.

        Raises:
            SpawnError: The executable is missing or cannot be run.
        """
        self._log.info("Spawning test runner", emoji_key="spawn")
        try:
            self.process = await asyncio.create_subprocess_exec(
                *self.command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=self.working_dir,
            )
        except FileNotFoundError as e:
            self._log.error("Test runner command not found", command_executable=self.command[0])
            raise SpawnError(
                f"Test runner command not found: '{self.command[0]}'. Is it installed and in the system's PATH?",
                command=self.command,
                details=e,
            ) from e
        except OSError as e:
            self._log.error("Failed to start test runner", error=str(e))
            raise SpawnError(f"Failed to start '{self.command[0]}': {e}", command=self.command, details=e) from e

        self._log.debug("Test runner started", pid=self.process.pid)

    async def run(self) -> None:
        """Pumps both output streams, then reports the exit code. Call after spawn()."""
        if self.process is None:
            raise RuntimeError("ProcessProducer.run() called before spawn()")

        await asyncio.gather(
            self._pump("stdout", self.process.stdout),
            self._pump("stderr", self.process.stderr),
        )
        returncode = normalize_returncode(await self.process.wait())
        self._log.info("Test runner exited", exit_code=returncode)
        await self.queue.put(ProcessExited(returncode))

    async def _pump(self, source: str, stream: asyncio.StreamReader | None) -> None:
        if stream is not None:
            while chunk := await stream.read(CHUNK_SIZE):
                await self.queue.put(OutputChunk(source, chunk))
        await self.queue.put(StreamClosed(source))


class OutputConsumer:
    """
    Drains producer messages: writes each chunk verbatim to the log file and
    feeds the matching LineBuffer, which forwards complete lines to the sink.
    """

    def __init__(self, sink: LineSink, log_file: BinaryIO | None = None):
        self.sink = sink
        self.log_file = log_file
        self.bytes_logged = 0
        self._buffers = {source: LineBuffer(sink.handle_line, source=source) for source in STREAM_SOURCES}

    def _buffer_for(self, source: str) -> LineBuffer:
        if source not in self._buffers:
            self._buffers[source] = LineBuffer(self.sink.handle_line, source=source)
        return self._buffers[source]

    def handle_message(self, message: ProcessMessage) -> int | None:
        """Processes one message; returns the exit code once the process has exited."""
        match message:
            case OutputChunk(source=source, data=data):
                if self.log_file is not None:
                    self.log_file.write(data)
                    self.bytes_logged += len(data)
                self._buffer_for(source).ingest(data)
            case StreamClosed(source=source):
                self._buffer_for(source).ingest(None)
            case ProcessExited(returncode=returncode):
                # Flush anything a stream left behind without an explicit close.
                for buffer in self._buffers.values():
                    buffer.ingest(None)
                return returncode
        return None

    async def consume(self, queue: asyncio.Queue[ProcessMessage]) -> int:
        while True:
            message = await queue.get()
            returncode = self.handle_message(message)
            if returncode is not None:
                log.debug("Output consumer finished", bytes_logged=self.bytes_logged)
                return returncode


async def run_process(command: list[str], working_dir: Path, sink: LineSink, log_path: Path) -> int:
    """
    Runs the command to completion, teeing its combined output to ``log_path``
    (truncated first) and to ``sink``. Returns the normalized exit code.

    Raises:
        SpawnError: The process could not be started.
    """
    queue: asyncio.Queue[ProcessMessage] = asyncio.Queue()
    producer = ProcessProducer(command, working_dir, queue)

    with log_path.open("wb") as log_file:
        await producer.spawn()
        consumer = OutputConsumer(sink, log_file)
        producer_task = asyncio.create_task(producer.run())
        consumer_task = asyncio.create_task(consumer.consume(queue))
        try:
            await asyncio.wait({producer_task, consumer_task}, return_when=asyncio.FIRST_EXCEPTION)
            if producer_task.done() and producer_task.exception() is not None:
                raise producer_task.exception()
            return consumer_task.result()
        finally:
            for task in (producer_task, consumer_task):
                if not task.done():
                    task.cancel()
            await asyncio.gather(producer_task, consumer_task, return_exceptions=True)
            if producer.process is not None and producer.process.returncode is None:
                log.warning("Killing test runner left running", pid=producer.process.pid)
                producer.process.kill()
                await producer.process.wait()

# 🔼⚙️
