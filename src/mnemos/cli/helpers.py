"""Shared CLI helpers."""

from rich import print as rprint
from rich.console import Console

from mnemos.core.config import AppSettings
from mnemos.core.models import Card
from mnemos.core.scheduler import ReviewScheduler
from mnemos.core.storage import DeckStorage

console = Console()

# Global storage instance (initialized lazily)
_storage: DeckStorage | None = None


def get_settings() -> AppSettings:
    return AppSettings.from_env()


def get_storage() -> DeckStorage:
    """Get or create the storage instance."""
    global _storage
    if _storage is None:
        _storage = DeckStorage(get_settings().deck_path)
    return _storage


def get_scheduler() -> ReviewScheduler:
    return ReviewScheduler(get_settings().scheduler_config)


def find_card(storage: DeckStorage, card_id: str) -> Card | None:
    """Find a card by full or partial ID."""
    matches = storage.find_cards(card_id)

    if len(matches) == 1:
        return matches[0]
    elif len(matches) > 1:
        rprint(f"[yellow]Multiple cards match '{card_id}':[/yellow]")
        for c in matches:
            rprint(f"  {c.id[:8]}: {c.word[:40]}")

    return None
