"""Tests for the loguru logging setup."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from loguru import logger

from crategate.kernel import logging as crategate_logging
from crategate.kernel.logging import configure_logging, get_logger


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    configure_logging(force_reconfigure=True)


def test_configure_is_idempotent() -> None:
    configure_logging(level="INFO", format="console", force_reconfigure=True)
    handlers = list(crategate_logging._HANDLER_IDS)
    configure_logging(level="INFO", format="console")
    assert crategate_logging._HANDLER_IDS == handlers


def test_file_sink_writes_json_with_module(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "crategate.jsonl"
    configure_logging(level="DEBUG", format="console", output_file=log_file)

    get_logger("crategate.tests").info("Querying {name}", name="serde")

    record = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
    assert record["record"]["message"] == "Querying serde"
    assert record["record"]["extra"]["module"] == "crategate.tests"


def test_get_logger_is_cached() -> None:
    assert get_logger("crategate.a") is get_logger("crategate.a")


@pytest.mark.parametrize(
    ("variable", "value", "key", "fallback"),
    [
        ("CRATEGATE_LOG_LEVEL", "verbose", "level", "WARNING"),
        ("CRATEGATE_LOG_FORMAT", "xml", "format", "structured"),
    ],
)
def test_invalid_env_values_fall_back_to_defaults(
    monkeypatch: pytest.MonkeyPatch, variable: str, value: str, key: str, fallback: str
) -> None:
    monkeypatch.setattr(crategate_logging, "_CURRENT_CONFIG", None)
    monkeypatch.setenv(variable, value)
    messages: list[str] = []
    sink_id = logger.add(messages.append, level="WARNING", format="{message}")
    try:
        crategate_logging._ensure_configured()
    finally:
        logger.remove(sink_id)

    assert crategate_logging._CURRENT_CONFIG is not None
    assert crategate_logging._CURRENT_CONFIG[key] == fallback
    assert any(variable in message for message in messages)
