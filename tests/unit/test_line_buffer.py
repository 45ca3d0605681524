#
# tests/unit/test_line_buffer.py
#
"""
Tests for reassembling lines from arbitrarily split chunks.
"""

import pytest

from suitewatch.parsing import LineBuffer


def collect(source: str = "stdout") -> tuple[LineBuffer, list[tuple[str, str]]]:
    lines: list[tuple[str, str]] = []
    buffer = LineBuffer(lambda line, src: lines.append((line, src)), source=source)
    return buffer, lines


class TestLineBuffer:
    """Line reassembly and end-of-stream flushing."""

    def test_emits_complete_lines_only(self) -> None:
        buffer, lines = collect()
        buffer.ingest(b"PASS a.test.js\nFAIL b")
        assert lines == [("PASS a.test.js", "stdout")]

        buffer.ingest(b".test.js\n")
        assert lines == [("PASS a.test.js", "stdout"), ("FAIL b.test.js", "stdout")]

    def test_flush_emits_remaining_partial_once(self) -> None:
        buffer, lines = collect()
        buffer.ingest(b"first\nsecond")
        buffer.ingest(None)
        buffer.ingest(None)
        assert [line for line, _ in lines] == ["first", "second"]

    def test_flush_with_empty_remainder_emits_nothing(self) -> None:
        buffer, lines = collect()
        buffer.ingest(b"only\n")
        buffer.ingest(None)
        assert [line for line, _ in lines] == ["only"]

    def test_carriage_returns_are_line_breaks(self) -> None:
        buffer, lines = collect()
        buffer.ingest(b"progress 1\rprogress 2\r\ndone\n")
        assert [line for line, _ in lines] == ["progress 1", "progress 2", "", "done"]

    def test_source_tag_is_attached(self) -> None:
        buffer, lines = collect(source="stderr")
        buffer.ingest("warning\n")
        assert lines == [("warning", "stderr")]

    def test_multibyte_character_split_across_chunks(self) -> None:
        buffer, lines = collect()
        payload = "  ● renders correctly\n".encode()
        bullet_at = payload.index("●".encode())
        buffer.ingest(payload[: bullet_at + 1])
        buffer.ingest(payload[bullet_at + 1 :])
        assert lines == [("  ● renders correctly", "stdout")]

    def test_data_after_end_is_ignored(self) -> None:
        buffer, lines = collect()
        buffer.ingest(None)
        buffer.ingest(b"late\n")
        assert lines == []

    @pytest.mark.parametrize("chunk_size", [1, 2, 3, 7, 64])
    def test_any_split_reproduces_the_input(self, chunk_size: int) -> None:
        text = "PASS suites/a.test.js (1.2 s)\r\nFAIL suites/b.test.js\n  ● ünïcödé test\nno newline at end"
        data = text.encode()
        buffer, lines = collect()

        for offset in range(0, len(data), chunk_size):
            buffer.ingest(data[offset : offset + chunk_size])
        buffer.ingest(None)

        emitted = [line for line, _ in lines]
        assert "\n".join(emitted) == text.replace("\r", "\n")
        assert buffer.lines_emitted == len(emitted)
