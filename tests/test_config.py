"""Tests for configuration helpers."""

from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:  # pragma: no cover
    sys.path.insert(0, str(ROOT))

from ecs_logger import config  # noqa: E402
from ecs_logger.levels import Level  # noqa: E402
from ecs_logger.logger import Builder  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    monkeypatch.delenv(config.FILTER_ENV_VAR, raising=False)
    monkeypatch.delenv(config.WRITER_ENV_VAR, raising=False)
    config.get_settings.cache_clear()
    yield
    config.get_settings.cache_clear()


def test_defaults_when_environment_is_empty():
    settings = config.get_settings()

    assert settings.log_filter is None
    assert settings.writer == "stderr"


def test_get_settings_parses_expected_fields(monkeypatch):
    monkeypatch.setenv("ECS_LOG", " info,app=debug ")
    monkeypatch.setenv("ECS_LOG_WRITER", "STDOUT")

    settings = config.get_settings()

    assert settings.log_filter == "info,app=debug"
    assert settings.writer == "stdout"


def test_blank_filter_is_treated_as_unset(monkeypatch):
    monkeypatch.setenv("ECS_LOG", "   ")

    assert config.get_settings().log_filter is None


def test_invalid_writer_raises_runtime_error(monkeypatch):
    monkeypatch.setenv("ECS_LOG_WRITER", "syslog")

    with pytest.raises(RuntimeError) as err:
        config.get_settings()

    assert "ECS_LOG_WRITER" in str(err.value)


def test_settings_are_cached(monkeypatch):
    first = config.get_settings()
    monkeypatch.setenv("ECS_LOG", "trace")

    assert config.get_settings() is first


def test_builder_from_settings_applies_filter_and_writer(monkeypatch, capsys):
    monkeypatch.setenv("ECS_LOG", "info")
    monkeypatch.setenv("ECS_LOG_WRITER", "stdout")

    logger = Builder.from_settings(config.get_settings()).build()

    assert logger.filter.min_level is Level.INFO

    logger.log(Level.INFO, "app", "hello")
    captured = capsys.readouterr()
    assert '"message":"hello"' in captured.out
    assert captured.err == ""
