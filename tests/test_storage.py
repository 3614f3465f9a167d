"""Tests for the JSON deck storage."""

import tempfile
from datetime import UTC, datetime
from pathlib import Path

import pytest
from mnemos.core.models import Card, Difficulty
from mnemos.core.storage import DeckStorage, DeckStorageError


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def storage(temp_dir):
    return DeckStorage(temp_dir / "decks" / "deck.json")


class TestDeckStorage:
    def test_missing_file_is_empty_deck(self, storage):
        assert storage.list_cards() == []

    def test_save_and_load_preserves_scheduling_fields(self, storage):
        reviewed = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)
        card = Card(
            word="quixotic",
            definition="exceedingly idealistic",
            difficulty=Difficulty.ADVANCED,
            interval=15,
            ease_factor=2.36,
            review_count=3,
            mastery_score=52,
            next_review_at=datetime(2024, 3, 16, 12, 0, tzinfo=UTC),
            last_reviewed_at=reviewed,
        )
        storage.save_card(card)

        loaded = storage.load_card(card.id)
        assert loaded == card

    def test_save_card_replaces_existing(self, storage):
        card = Card(word="first")
        other = Card(word="second")
        storage.save_card(card)
        storage.save_card(other)
        storage.save_card(card.model_copy(update={"mastery_score": 30}))

        cards = storage.list_cards()
        assert [c.word for c in cards] == ["first", "second"]
        assert cards[0].mastery_score == 30

    def test_delete(self, storage):
        card = Card(word="gone")
        storage.save_card(card)

        assert storage.delete_card(card.id) is True
        assert storage.delete_card(card.id) is False
        assert storage.list_cards() == []

    def test_find_by_prefix(self, storage):
        card = Card(id="abc12345", word="prefix")
        storage.save_card(card)
        storage.save_card(Card(id="xyz98765", word="other"))

        assert [c.word for c in storage.find_cards("abc")] == ["prefix"]
        assert storage.find_cards("nope") == []

    def test_corrupt_file(self, storage):
        storage.path.parent.mkdir(parents=True)
        storage.path.write_text("{not json")

        with pytest.raises(DeckStorageError, match="Corrupt deck file"):
            storage.list_cards()

    def test_wrong_shape(self, storage):
        storage.path.parent.mkdir(parents=True)
        storage.path.write_text('{"cards": []}')

        with pytest.raises(DeckStorageError, match="must contain a list"):
            storage.list_cards()

    def test_invalid_card(self, storage):
        storage.path.parent.mkdir(parents=True)
        storage.path.write_text('[{"interval": -3}]')

        with pytest.raises(DeckStorageError, match="Invalid card"):
            storage.list_cards()
