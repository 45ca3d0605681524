#
# src/suitewatch/parsing/line_buffer.py
#
"""
Reassembles logical lines from arbitrarily split output chunks.
"""
import codecs
from collections.abc import Callable

import structlog

from suitewatch.telemetry import StructLogger

log: StructLogger = structlog.get_logger("parsing.line_buffer")

LineCallback = Callable[[str, str], None]


class LineBuffer:
    """
    Buffers one output stream and emits complete lines to a callback.

    Chunks may split a line (or a multi-byte character) at any offset.
    Carriage returns count as line terminators. Passing ``None`` marks the
    end of the stream and flushes whatever partial line is left.
    """

    def __init__(self, on_line: LineCallback, source: str = "stdout", encoding: str = "utf-8"):
        self._on_line = on_line
        self.source = source
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""
        self._closed = False
        self.lines_emitted = 0

    def ingest(self, chunk: bytes | str | None) -> None:
        if self._closed:
            log.debug("Ignoring data after end of stream", source=self.source)
            return

        if chunk is None:
            self._finish()
            return

        text = self._decoder.decode(chunk) if isinstance(chunk, bytes) else chunk
        self._feed(text)

    def _feed(self, text: str) -> None:
        if not text:
            return
        self._buffer += text.replace("\r", "\n")
        *complete, self._buffer = self._buffer.split("\n")
        for line in complete:
            self._emit(line)

    def _finish(self) -> None:
        self._feed(self._decoder.decode(b"", final=True))
        if self._buffer:
            self._emit(self._buffer)
            self._buffer = ""
        self._closed = True
        log.debug("Line buffer flushed", source=self.source, lines_emitted=self.lines_emitted)

    def _emit(self, line: str) -> None:
        self.lines_emitted += 1
        self._on_line(line, self.source)

# 🔼⚙️
