"""Tests for mnemos models and configuration."""

from datetime import UTC, datetime
from unittest.mock import patch

import pytest
from mnemos.core.config import AppSettings, SchedulerConfig
from mnemos.core.models import Card, Difficulty, SchedulingUpdate


class TestCard:
    """Tests for Card."""

    def test_create_minimal(self):
        card = Card(word="sonder")
        assert card.id is not None
        assert card.difficulty == Difficulty.BEGINNER
        assert card.interval == 1
        assert card.ease_factor == 2.5
        assert card.review_count == 0
        assert card.mastery_score == 0
        assert card.last_reviewed_at is None
        assert card.is_fresh

    def test_naive_timestamps_become_utc(self):
        card = Card(next_review_at=datetime(2024, 1, 1, 9, 0))
        assert card.next_review_at.tzinfo == UTC

    def test_difficulty_from_string(self):
        card = Card.model_validate({"word": "x", "difficulty": "master"})
        assert card.difficulty == Difficulty.MASTER

    def test_mastery_range_not_enforced_by_model(self):
        """Range checks happen at review time."""
        assert Card(mastery_score=150).mastery_score == 150


class TestSchedulingUpdate:
    def test_apply_returns_new_card(self):
        now = datetime(2024, 3, 1, tzinfo=UTC)
        card = Card(word="apply", tags=["t"])
        update = SchedulingUpdate(
            interval=6,
            ease_factor=2.4,
            review_count=2,
            mastery_score=37,
            next_review_at=now,
            last_reviewed_at=now,
        )
        updated = update.apply(card)

        assert updated is not card
        assert updated.interval == 6
        assert updated.mastery_score == 37
        assert updated.tags == ["t"]
        assert card.interval == 1
        assert not updated.is_fresh


class TestConfig:
    def test_defaults(self):
        config = SchedulerConfig()
        assert config.jitter_ratio == 0.1
        assert config.max_jitter_days == 1

    def test_without_jitter(self):
        config = SchedulerConfig.without_jitter()
        assert config.jitter_ratio == 0.0

    def test_settings_from_env(self, tmp_path):
        env = {
            "MNEMOS_DECK_PATH": str(tmp_path / "words.json"),
            "MNEMOS_JITTER": "0",
            "MNEMOS_AVAILABLE_MINUTES": "45",
            "MNEMOS_LOG_LEVEL": "debug",
        }
        with patch.dict("os.environ", env):
            settings = AppSettings.from_env()

        assert settings.deck_path == tmp_path / "words.json"
        assert settings.jitter is False
        assert settings.scheduler_config.jitter_ratio == 0.0
        assert settings.available_minutes == 45
        assert settings.log_level == "DEBUG"

    def test_settings_defaults(self, tmp_path):
        with patch.dict("os.environ", {}, clear=True):
            settings = AppSettings.from_env()

        assert settings.deck_path.name == "deck.json"
        assert settings.jitter is True
        assert settings.scheduler_config.jitter_ratio == 0.1
        assert settings.available_minutes == 20
        assert settings.log_level == "WARNING"

    @pytest.mark.parametrize("minutes", ["abc", "", "-5", "4.5"])
    def test_bad_available_minutes_falls_back(self, tmp_path, minutes):
        env = {"MNEMOS_DECK_PATH": str(tmp_path / "d.json"), "MNEMOS_AVAILABLE_MINUTES": minutes}
        with patch.dict("os.environ", env):
            settings = AppSettings.from_env()
        assert settings.available_minutes == 20

    @pytest.mark.parametrize("level", ["verbose", "", "10"])
    def test_unknown_log_level_falls_back(self, tmp_path, level):
        env = {"MNEMOS_DECK_PATH": str(tmp_path / "d.json"), "MNEMOS_LOG_LEVEL": level}
        with patch.dict("os.environ", env):
            settings = AppSettings.from_env()
        assert settings.log_level == "WARNING"
