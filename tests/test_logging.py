"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging

import pytest
import structlog

from frameguide.core.logging import setup_logging


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_json_format_goes_to_stderr(monkeypatch, capsys):
    monkeypatch.setenv("FRAMEGUIDE_LOG_FORMAT", "json")
    monkeypatch.setenv("FRAMEGUIDE_LOG_LEVEL", "debug")
    setup_logging()

    structlog.get_logger("frameguide.test").info("resources.ensured", cloned=2)

    out, err = capsys.readouterr()
    assert out == ""
    record = json.loads(err.strip().splitlines()[-1])
    assert record["event"] == "resources.ensured"
    assert record["cloned"] == 2
    assert record["level"] == "info"
    assert record["logger"] == "frameguide.test"


def test_level_filters(monkeypatch, capsys):
    monkeypatch.setenv("FRAMEGUIDE_LOG_FORMAT", "json")
    monkeypatch.setenv("FRAMEGUIDE_LOG_LEVEL", "warning")
    setup_logging()

    log = structlog.get_logger("frameguide.test")
    log.info("consult.done")
    log.warning("consult.failed", kind="timeout")

    err = capsys.readouterr().err
    assert "consult.done" not in err
    assert "consult.failed" in err


def test_arguments_override_environment(monkeypatch, capsys):
    monkeypatch.setenv("FRAMEGUIDE_LOG_FORMAT", "console")
    monkeypatch.setenv("FRAMEGUIDE_LOG_LEVEL", "error")
    setup_logging(level="info", fmt="json")

    structlog.get_logger("frameguide.test").info("resolver.done", resolved=3)

    record = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert record["resolved"] == 3
