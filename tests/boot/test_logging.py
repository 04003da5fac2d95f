from __future__ import annotations

import logging

import pytest

from sajuengine.boot import configure_logging


@pytest.fixture(autouse=True)
def _restore_root_level():
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)


def test_explicit_level_wins(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "ERROR")
    assert configure_logging(level="debug", fallback="WARNING") == logging.DEBUG
    assert logging.getLogger().level == logging.DEBUG


def test_environment_beats_fallback(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "ERROR")
    assert configure_logging(fallback="DEBUG") == logging.ERROR


def test_fallback_and_defaults():
    assert configure_logging(fallback="WARNING") == logging.WARNING
    assert configure_logging() == logging.INFO
    assert configure_logging(level="not-a-level") == logging.INFO
    assert configure_logging(level="15") == 15
