"""Tests for engine settings and logging setup.

Exit Criteria:
- Defaults match the documented engine behaviour
- SOCRATIC_-prefixed environment variables override defaults
- Out-of-range values are rejected
"""

import logging

import pytest
from pydantic import ValidationError

from core.config import LOG_FORMAT, EngineSettings, configure_logging


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way the test found it."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


class TestEngineSettings:
    """Tests for EngineSettings."""

    def test_defaults(self) -> None:
        settings = EngineSettings(_env_file=None)
        assert settings.cross_check_enabled is False
        assert settings.cross_check_timeout_seconds == 3.0
        assert settings.history_window == 5
        assert settings.escalate_window == 3
        assert settings.escalate_threshold == 85
        assert settings.deescalate_threshold == 55
        assert settings.initial_hardness == "medium"
        assert settings.generate_challenges is True
        assert settings.time_limit_seconds is None

    def test_env_override(self, monkeypatch) -> None:
        monkeypatch.setenv("SOCRATIC_CROSS_CHECK_ENABLED", "true")
        monkeypatch.setenv("SOCRATIC_ESCALATE_THRESHOLD", "90")
        monkeypatch.setenv("SOCRATIC_LLM_BASE_URL", "https://api.deepseek.com")

        settings = EngineSettings(_env_file=None)

        assert settings.cross_check_enabled is True
        assert settings.escalate_threshold == 90
        assert settings.llm_base_url == "https://api.deepseek.com"

    def test_unprefixed_env_ignored(self, monkeypatch) -> None:
        monkeypatch.setenv("ESCALATE_THRESHOLD", "10")
        assert EngineSettings(_env_file=None).escalate_threshold == 85

    def test_env_file(self, tmp_path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("SOCRATIC_TIME_LIMIT_SECONDS=600\n", encoding="utf-8")
        assert EngineSettings(_env_file=env_file).time_limit_seconds == 600

    @pytest.mark.parametrize(
        "field, value",
        [
            ("cross_check_timeout_seconds", 0),
            ("escalate_threshold", 101),
            ("deescalate_threshold", -1),
            ("history_window", 0),
        ],
    )
    def test_out_of_range_rejected(self, field: str, value) -> None:
        with pytest.raises(ValidationError):
            EngineSettings(_env_file=None, **{field: value})

    def test_unknown_hardness_rejected(self, monkeypatch) -> None:
        monkeypatch.setenv("SOCRATIC_INITIAL_HARDNESS", "extreme")
        with pytest.raises(ValidationError, match="initial_hardness"):
            EngineSettings(_env_file=None)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"history_window": 2},
            {"history_window": 4, "escalate_window": 5},
            {"history_window": 5, "deescalate_window": 6},
        ],
    )
    def test_history_shorter_than_window_rejected(self, overrides: dict) -> None:
        with pytest.raises(ValidationError, match="history_window"):
            EngineSettings(_env_file=None, **overrides)

    def test_history_equal_to_window_accepted(self) -> None:
        settings = EngineSettings(
            _env_file=None, history_window=4, escalate_window=4, deescalate_window=2
        )
        assert settings.history_window == 4


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_sets_level_and_format(self, restore_root_logger) -> None:
        configure_logging("debug")

        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert root.handlers[0].formatter._fmt == LOG_FORMAT

    def test_numeric_level(self, restore_root_logger) -> None:
        configure_logging(logging.WARNING)
        assert restore_root_logger.level == logging.WARNING
