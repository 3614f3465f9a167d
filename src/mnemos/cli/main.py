"""Main CLI entry point for mnemos."""

import logging
import sys

import typer
from dotenv import load_dotenv
from rich import print as rprint
from rich.panel import Panel
from rich.table import Table

from mnemos.cli.helpers import console, find_card, get_scheduler, get_settings, get_storage
from mnemos.core.metrics import (
    calculate_daily_goal,
    deck_statistics,
    estimate_time_to_mastery,
    mastery_level,
    study_recommendation,
)
from mnemos.core.models import Card, Difficulty
from mnemos.core.queue import build_review_queue, get_due_cards_summary, review_priority
from mnemos.core.scheduler import InvalidInputError
from mnemos.core.storage import DeckStorage, DeckStorageError

load_dotenv()

logging.basicConfig(
    level=get_settings().log_level,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

app = typer.Typer(
    name="mnemos",
    help="Spaced-repetition vocabulary scheduling.",
    no_args_is_help=True,
)


def _require_card(storage: DeckStorage, card_id: str) -> Card:
    """Find a card by ID or exit with an error."""
    try:
        card = find_card(storage, card_id)
    except DeckStorageError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(1)
    if card is None:
        rprint(f"[red]Card not found: {card_id}[/red]")
        raise typer.Exit(1)
    return card


def _load_cards(storage: DeckStorage) -> list[Card]:
    try:
        return storage.list_cards()
    except DeckStorageError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(1)


# ============================================================================
# ADD command
# ============================================================================


@app.command()
def add(
    word: str = typer.Argument(..., help="Word or phrase to learn"),
    definition: str = typer.Argument(..., help="Definition shown on the back"),
    difficulty: Difficulty = typer.Option(
        Difficulty.BEGINNER,
        "--difficulty",
        "-d",
        help="Difficulty label",
    ),
    translation: str | None = typer.Option(None, "--translation", help="Translation"),
    category: str | None = typer.Option(None, "--category", "-c", help="Category"),
    tags: list[str] = typer.Option([], "--tag", "-t", help="Tag (repeatable)"),
) -> None:
    """Add a new card, due for review immediately."""
    storage = get_storage()
    _load_cards(storage)

    card = get_scheduler().initialize_card(
        word=word,
        definition=definition,
        difficulty=difficulty,
        translation=translation,
        category=category,
        tags=tags,
    )
    path = storage.save_card(card)
    rprint("[green]Card saved![/green]")
    rprint(f"  ID: {card.id}")
    rprint(f"  Path: {path}")


# ============================================================================
# LIST / SHOW commands
# ============================================================================


@app.command("list")
def list_cards(
    difficulty: Difficulty | None = typer.Option(
        None,
        "--difficulty",
        "-d",
        help="Filter by difficulty",
    ),
    tag: str | None = typer.Option(None, "--tag", help="Filter by tag"),
) -> None:
    """List all cards with optional filters."""
    cards = _load_cards(get_storage())
    if difficulty:
        cards = [c for c in cards if c.difficulty == difficulty]
    if tag:
        cards = [c for c in cards if tag in c.tags]

    if not cards:
        rprint("[dim]No cards found.[/dim]")
        return

    table = Table(title=f"Cards ({len(cards)} total)")
    table.add_column("ID", style="dim", max_width=8)
    table.add_column("Word", style="cyan")
    table.add_column("Difficulty")
    table.add_column("Mastery", justify="right")
    table.add_column("Interval", justify="right")
    table.add_column("Next Review")

    for card in cards:
        table.add_row(
            card.id[:8],
            card.word,
            card.difficulty.value,
            f"{card.mastery_score:.0f}",
            f"{card.interval}d",
            card.next_review_at.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)


@app.command()
def show(
    card_id: str = typer.Argument(..., help="Card ID (or partial ID)"),
) -> None:
    """Show a card and its scheduling state."""
    card = _require_card(get_storage(), card_id)
    last = card.last_reviewed_at.strftime("%Y-%m-%d %H:%M") if card.last_reviewed_at else "never"

    lines = [
        f"[bold]{card.word}[/bold]",
        card.definition,
    ]
    if card.translation:
        lines.append(f"[dim]Translation: {card.translation}[/dim]")
    lines += [
        "",
        f"Difficulty: {card.difficulty.value}",
        f"Mastery: {card.mastery_score:.0f} ({mastery_level(card.mastery_score).value})",
        f"Interval: {card.interval} day(s)",
        f"Ease factor: {card.ease_factor:.2f}",
        f"Reviews since reset: {card.review_count}",
        f"Next review: {card.next_review_at.strftime('%Y-%m-%d %H:%M')}",
        f"Last reviewed: {last}",
        f"Priority: {review_priority(card):.2f}",
    ]
    console.print(Panel("\n".join(lines), title=card.id[:8], border_style="blue"))


# ============================================================================
# DUE command
# ============================================================================


@app.command()
def due(
    limit: int = typer.Option(10, "--limit", "-l", help="Rows of the priority queue to show"),
) -> None:
    """Summarize due cards and show the most urgent ones."""
    summary = get_due_cards_summary(_load_cards(get_storage()))

    rprint(f"Due now: [bold]{summary.due_now}[/bold]")
    rprint(f"Due today: {summary.due_today}")
    rprint(f"Due this week: {summary.due_this_week}")

    if not summary.priority_queue:
        return

    table = Table(title="Priority Queue")
    table.add_column("ID", style="dim", max_width=8)
    table.add_column("Word", style="cyan")
    table.add_column("Priority", justify="right")
    table.add_column("Next Review")
    for card in summary.priority_queue[:limit]:
        table.add_row(
            card.id[:8],
            card.word,
            f"{review_priority(card):.2f}",
            card.next_review_at.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


# ============================================================================
# REVIEW commands
# ============================================================================


@app.command()
def review(
    limit: int = typer.Option(20, "--limit", "-l", help="Maximum cards to review"),
) -> None:
    """Start an interactive review session over due cards."""
    storage = get_storage()
    scheduler = get_scheduler()
    queue = build_review_queue(_load_cards(storage), limit=limit)

    if not queue:
        rprint("[green]No cards due for review![/green]")
        return

    rprint(f"\n[bold]Review Session[/bold]: {len(queue)} card(s)\n")

    reviewed = 0
    for i, card in enumerate(queue, 1):
        console.print(Panel(card.word, title=f"Card {i}/{len(queue)}", border_style="blue"))
        typer.prompt("\n[Press Enter to reveal answer]", default="", show_default=False)
        console.print(Panel(card.definition, title="Answer", border_style="green"))

        quality = _prompt_quality()
        if quality is None:
            rprint("\n[yellow]Session ended early.[/yellow]")
            break

        try:
            updated = scheduler.review(card, quality)
        except InvalidInputError as e:
            rprint(f"[red]Skipping {card.word}: {e}[/red]\n")
            continue
        storage.save_card(updated)
        rprint(
            f"[dim]Next review: {updated.next_review_at.strftime('%Y-%m-%d')}"
            f" (mastery {updated.mastery_score:.0f})[/dim]\n"
        )
        reviewed += 1

    rprint("\n[bold green]Session complete![/bold green]")
    rprint(f"Reviewed {reviewed} card(s).")


def _prompt_quality() -> int | None:
    """Prompt user for a 0-5 recall quality."""
    rprint("\n[bold]How well did you recall it?[/bold]")
    rprint(
        "  [red]0[/red] Blackout  [red]1[/red] Wrong  [yellow]2[/yellow] Almost  "
        "[green]3[/green] Hard  [green]4[/green] Good  [cyan]5[/cyan] Perfect  "
        "[dim]q[/dim] Quit"
    )

    while True:
        choice = typer.prompt("Quality", default="4")
        if choice.lower() == "q":
            return None
        try:
            quality = int(choice)
            if 0 <= quality <= 5:
                return quality
        except ValueError:
            pass
        rprint("[red]Invalid choice. Enter 0-5 or q to quit.[/red]")


@app.command()
def grade(
    card_id: str = typer.Argument(..., help="Card ID (or partial ID)"),
    quality: int = typer.Argument(..., help="Recall quality 0-5"),
) -> None:
    """Record a single review without the interactive session."""
    storage = get_storage()
    card = _require_card(storage, card_id)

    try:
        updated = get_scheduler().review(card, quality)
    except InvalidInputError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(1)

    storage.save_card(updated)
    rprint(
        f"[green]Reviewed {updated.word}[/green]: interval {updated.interval}d, "
        f"ease {updated.ease_factor:.2f}, mastery {updated.mastery_score:.0f}"
    )
    rprint(f"[dim]Next review: {updated.next_review_at.strftime('%Y-%m-%d')}[/dim]")


# ============================================================================
# RESET / DELETE commands
# ============================================================================


@app.command()
def reset(
    card_id: str = typer.Argument(..., help="Card ID (or partial ID)"),
) -> None:
    """Reset a card's review progress, keeping its content."""
    storage = get_storage()
    card = _require_card(storage, card_id)
    storage.save_card(get_scheduler().reset_card_progress(card))
    rprint(f"[green]Progress reset for {card.word}[/green]")


@app.command()
def delete(
    card_id: str = typer.Argument(..., help="Card ID (or partial ID)"),
) -> None:
    """Delete a card from the deck."""
    storage = get_storage()
    card = _require_card(storage, card_id)
    storage.delete_card(card.id)
    rprint(f"[green]Deleted {card.word}[/green]")


# ============================================================================
# STATS commands
# ============================================================================


@app.command()
def stats(
    accuracy: float = typer.Option(80.0, "--accuracy", "-a", help="Recent accuracy (0-100)"),
    seconds_per_card: float = typer.Option(
        30.0,
        "--seconds-per-card",
        help="Average study time per card in seconds",
    ),
    available_minutes: int | None = typer.Option(
        None,
        "--minutes",
        "-m",
        help="Study time available today (defaults to MNEMOS_AVAILABLE_MINUTES)",
    ),
    goal: int | None = typer.Option(None, "--goal", "-g", help="Your own daily goal"),
) -> None:
    """Show deck statistics and a recommended daily goal."""
    cards = _load_cards(get_storage())
    deck = deck_statistics(cards)
    minutes = available_minutes if available_minutes is not None else get_settings().available_minutes

    recommended = calculate_daily_goal(
        deck.total, deck.due_for_review, seconds_per_card, minutes, accuracy
    )
    daily_goal = goal if goal is not None else recommended

    table = Table(title="Deck Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Total Cards", str(deck.total))
    table.add_row("Mastered", str(deck.mastered))
    table.add_row("Due For Review", str(deck.due_for_review))
    table.add_row("Average Mastery", str(deck.average_mastery))

    table.add_row("", "")
    table.add_row("[bold]By Difficulty[/bold]", "")
    for difficulty, count in deck.by_difficulty.items():
        table.add_row(f"  {difficulty.value}", str(count))

    if deck.upcoming_reviews:
        table.add_row("", "")
        table.add_row("[bold]Upcoming[/bold]", "")
        for day, count in deck.upcoming_reviews:
            table.add_row(f"  {day.isoformat()}", str(count))

    table.add_row("", "")
    table.add_row("Daily Goal", str(daily_goal))
    if goal is not None and goal != recommended:
        table.add_row("  Recommended", str(recommended))

    console.print(table)

    advice = study_recommendation(cards, daily_goal)
    rprint(f"\n[bold]{advice.action}[/bold]: {advice.message}")


@app.command()
def estimate(
    card_id: str = typer.Argument(..., help="Card ID (or partial ID)"),
    accuracy: float = typer.Option(80.0, "--accuracy", "-a", help="Recent accuracy (0-100)"),
    per_day: float = typer.Option(1.0, "--per-day", help="Reviews of this card per day"),
) -> None:
    """Estimate how long until a card is mastered."""
    card = _require_card(get_storage(), card_id)

    try:
        result = estimate_time_to_mastery(card.mastery_score, accuracy, per_day)
    except InvalidInputError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if result.reviews == 0:
        rprint(f"[green]{card.word} is already mastered.[/green]")
        return
    rprint(f"{card.word}: about {result.reviews} review(s) over {result.days} day(s)")


# ============================================================================
# Main entry point
# ============================================================================


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
