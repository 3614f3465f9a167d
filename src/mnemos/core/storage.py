"""JSON deck storage used by the command-line host."""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from mnemos.core.models import Card

logger = logging.getLogger(__name__)


class DeckStorageError(Exception):
    """Raised when the deck file cannot be read."""


class DeckStorage:
    """Stores a deck of cards as a single JSON file.

    Writes happen after every change; callers review one card at a time.
    """

    def __init__(self, path: Path):
        self.path = path

    def list_cards(self) -> list[Card]:
        """Load all cards, or an empty list when the deck does not exist yet."""
        if not self.path.exists():
            return []

        try:
            with open(self.path) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise DeckStorageError(f"Corrupt deck file {self.path}: {e}") from e

        if not isinstance(data, list):
            raise DeckStorageError(f"Deck file {self.path} must contain a list of cards")

        try:
            return [Card.model_validate(item) for item in data]
        except ValidationError as e:
            raise DeckStorageError(f"Invalid card in {self.path}: {e}") from e

    def save_cards(self, cards: list[Card]) -> Path:
        """Replace the deck contents."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump([c.model_dump(mode="json") for c in cards], f, indent=2)
        logger.debug("Saved %d card(s) to %s", len(cards), self.path)
        return self.path

    def load_card(self, card_id: str) -> Card | None:
        for card in self.list_cards():
            if card.id == card_id:
                return card
        return None

    def save_card(self, card: Card) -> Path:
        """Insert or replace a card, keeping deck order."""
        cards = self.list_cards()
        for i, existing in enumerate(cards):
            if existing.id == card.id:
                cards[i] = card
                break
        else:
            cards.append(card)
        return self.save_cards(cards)

    def delete_card(self, card_id: str) -> bool:
        cards = self.list_cards()
        remaining = [c for c in cards if c.id != card_id]
        if len(remaining) == len(cards):
            return False
        self.save_cards(remaining)
        return True

    def find_cards(self, card_id: str) -> list[Card]:
        """Cards whose ID equals or starts with ``card_id``."""
        cards = self.list_cards()
        exact = [c for c in cards if c.id == card_id]
        if exact:
            return exact
        return [c for c in cards if c.id.startswith(card_id)]
