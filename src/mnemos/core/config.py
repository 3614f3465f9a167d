"""Tunable parameters for the scheduler and settings for the host application."""

import logging
import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

MIN_EASE_FACTOR = 1.3
MAX_EASE_FACTOR = 2.5
INITIAL_EASE_FACTOR = 2.5
MASTERY_INCREMENT = 20  # Points at stake on a single review
PASS_THRESHOLD = 3  # Quality at or above this counts as a successful recall
GRADUATING_INTERVALS = (1, 6)  # First and second intervals in days

DEFAULT_AVAILABLE_MINUTES = 20
DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Ease factor adjustments per quality rating (SM-2 family)
EASE_DELTAS = {
    5: 0.15,
    4: 0.10,
    3: 0.05,
    2: -0.15,
    1: -0.25,
    0: -0.30,
}


class SchedulerConfig(BaseModel):
    """Jitter parameters for next-review dates.

    The ease bounds and the pass threshold are fixed constants above: they
    are part of the card invariants, not tunables.
    """

    model_config = ConfigDict(frozen=True)

    jitter_ratio: float = Field(default=0.1, ge=0.0, le=1.0)
    max_jitter_days: int = Field(default=1, ge=0)

    @classmethod
    def without_jitter(cls) -> "SchedulerConfig":
        return cls(jitter_ratio=0.0, max_jitter_days=0)


class AppSettings(BaseModel):
    """Host settings resolved from the environment."""

    deck_path: Path
    jitter: bool = True
    available_minutes: int = DEFAULT_AVAILABLE_MINUTES
    log_level: str = DEFAULT_LOG_LEVEL

    @field_validator("available_minutes", mode="before")
    @classmethod
    def _parse_minutes(cls, value):
        """Fall back to the default for non-numeric or negative values."""
        try:
            minutes = int(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid available minutes %r", value)
            return DEFAULT_AVAILABLE_MINUTES
        if minutes < 0:
            logger.warning("Ignoring negative available minutes %r", value)
            return DEFAULT_AVAILABLE_MINUTES
        return minutes

    @field_validator("log_level", mode="before")
    @classmethod
    def _parse_log_level(cls, value):
        level = str(value).strip().upper()
        if level not in LOG_LEVELS:
            logger.warning("Unknown log level %r, using %s", value, DEFAULT_LOG_LEVEL)
            return DEFAULT_LOG_LEVEL
        return level

    @property
    def scheduler_config(self) -> SchedulerConfig:
        return SchedulerConfig() if self.jitter else SchedulerConfig.without_jitter()

    @classmethod
    def from_env(cls) -> "AppSettings":
        """Build settings from MNEMOS_* environment variables."""
        return cls(
            deck_path=Path(os.environ.get("MNEMOS_DECK_PATH", Path.cwd() / "deck.json")),
            jitter=os.environ.get("MNEMOS_JITTER", "1").lower() not in ("0", "false", "no"),
            available_minutes=os.environ.get("MNEMOS_AVAILABLE_MINUTES", "20"),
            log_level=os.environ.get("MNEMOS_LOG_LEVEL", DEFAULT_LOG_LEVEL),
        )
