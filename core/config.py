"""Engine settings and logging setup.

Settings come from environment variables prefixed with SOCRATIC_ (or a .env
file). Scoring weights and band thresholds are not configurable; they live as
constants in core.scoring.irac_rubric and the scorer modules.
"""

import logging
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class EngineSettings(BaseSettings):
    """Runtime configuration for evaluation, difficulty and the AI cross-check."""

    # Optional AI rule cross-check
    cross_check_enabled: bool = False
    cross_check_timeout_seconds: float = Field(default=3.0, gt=0)
    llm_model: str = "deepseek-chat"
    llm_base_url: str | None = None
    llm_api_key: str | None = None

    # Difficulty adaptation
    history_window: int = Field(default=5, ge=1)
    escalate_window: int = Field(default=3, ge=1)
    escalate_threshold: int = Field(default=85, ge=0, le=100)
    deescalate_window: int = Field(default=3, ge=1)
    deescalate_threshold: int = Field(default=55, ge=0, le=100)
    initial_hardness: Literal["easy", "medium", "hard"] = "medium"

    # Session behaviour
    generate_challenges: bool = True
    time_limit_seconds: float | None = None

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="SOCRATIC_", env_file=".env", extra="ignore"
    )

    @model_validator(mode="after")
    def history_covers_windows(self) -> "EngineSettings":
        """The totals history must hold a full escalation and de-escalation window."""
        needed = max(self.escalate_window, self.deescalate_window)
        if self.history_window < needed:
            raise ValueError(
                f"history_window ({self.history_window}) must be at least {needed} "
                "to hold the escalation and de-escalation windows"
            )
        return self


def configure_logging(level: str | int = "INFO") -> None:
    """Install a single stream handler on the root logger.

    Args:
        level: Logging level name or number
    """
    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
