# tests/unit/test_logging.py

"""Tests for the structlog processors and logging setup."""

import json
import logging
from pathlib import Path

import structlog

from suitewatch.telemetry import setup_logging
from suitewatch.telemetry.logger.processors import (
    LOG_EMOJIS,
    add_emoji_processor,
    remove_extra_keys_processor,
)


def test_emoji_from_key():
    event = add_emoji_processor(None, "info", {"event": "Spawning test runner", "emoji_key": "spawn"})
    assert event["event"] == f"{LOG_EMOJIS['spawn']} Spawning test runner"


def test_emoji_falls_back_to_level():
    event = add_emoji_processor(None, "warning", {"event": "careful", "level": "warning"})
    assert event["event"].startswith(LOG_EMOJIS[logging.WARNING])


def test_unknown_key_uses_level_emoji():
    event = add_emoji_processor(None, "error", {"event": "boom", "level": "error", "emoji_key": "nope"})
    assert event["event"] == f"{LOG_EMOJIS[logging.ERROR]} boom"


def test_internal_keys_are_removed():
    event = remove_extra_keys_processor(None, "info", {"event": "x", "emoji_key": "suite", "suite": "a.test.js"})
    assert event == {"event": "x", "suite": "a.test.js"}


def test_file_logging_writes_json(tmp_path: Path):
    log_file = tmp_path / "suitewatch.log"
    setup_logging(level=logging.INFO, log_file=str(log_file), file_only=True)

    structlog.get_logger("tests.logging").info("Suite result", suite="a.test.js", emoji_key="suite")
    for handler in logging.getLogger().handlers:
        handler.flush()

    records = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    suite_record = next(r for r in records if r.get("suite") == "a.test.js")
    assert suite_record["level"] == "info"
    assert "emoji_key" not in suite_record
    assert suite_record["event"].endswith("Suite result")
