"""
Portal Engine CLI: run the adaptive learning engine over JSON snapshots.

The engine itself has no I/O. This CLI is a thin serving layer: it loads the
data the persistence layer would supply, calls the engine and prints results.

Commands:
- portal-engine due cards.json                  -> cards due for review, queue order
- portal-engine rate cards.json CARD 4 --write  -> apply a rating, save snapshot
- portal-engine next-item pool.json --history h.json
- portal-engine analyze mistakes.json --json
"""
from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import NoReturn, Optional

import typer
from dateutil import parser as date_parser
from loguru import logger
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from config import get_settings
from portal_engine.adaptive.ability_estimator import estimate
from portal_engine.adaptive.item_selector import select_next
from portal_engine.analysis.mistakes import analyze as analyze_mistakes
from portal_engine.cli.schemas import (
    CardModel,
    ItemModel,
    MistakeModel,
    ResponseModel,
    dump_cards,
    ensure_aware,
    load_list,
)
from portal_engine.review.card_store import InMemoryCardStore, rate_card
from portal_engine.review.due import due_set
from portal_engine.review.scheduler import InvalidRatingError

app = typer.Typer(
    help="Adaptive learning engine: ability estimation, SM-2 review scheduling, mistake reports",
    no_args_is_help=True,
)

console = Console()

INPUT_ERRORS = (OSError, json.JSONDecodeError, ValidationError, InvalidRatingError, KeyError)


def _parse_now(raw: Optional[str]) -> datetime:
    """Parse a --now value; default to the current UTC time."""
    if raw is None:
        return datetime.now(timezone.utc)
    try:
        return ensure_aware(date_parser.parse(raw))
    except (ValueError, OverflowError) as e:
        _fail(f"Cannot parse time {raw!r}: {e}")


def _fail(message: str) -> NoReturn:
    console.print(f"[red]✗ {escape(message)}[/red]")
    raise typer.Exit(code=1)


# =============================================================================
# Flashcards
# =============================================================================


@app.command("due")
def due_command(
    cards_file: Path = typer.Argument(..., help="JSON array of card review states"),
    now: Optional[str] = typer.Option(None, "--now", help="Reference time (default: now, UTC)"),
):
    """
    List the cards due for review, in queue order.
    """
    reference = _parse_now(now)
    try:
        cards = [m.to_card() for m in load_list(cards_file, CardModel)]
    except INPUT_ERRORS as e:
        _fail(f"Could not load cards: {e}")

    due = due_set(cards, reference)
    if not due:
        console.print("[green]No cards due. You've completed all due flashcards![/green]")
        return

    table = Table(title=f"{len(due)} of {len(cards)} cards due", box=box.SIMPLE)
    table.add_column("ID")
    table.add_column("Due")
    table.add_column("Ease", justify="right")
    table.add_column("Interval", justify="right")
    table.add_column("Reviews", justify="right")
    for card in due:
        table.add_row(
            card.id,
            card.due_at.isoformat(),
            f"{card.ease_factor:.2f}",
            f"{card.interval}d",
            str(card.review_count),
        )
    console.print(table)


@app.command("rate")
def rate_command(
    cards_file: Path = typer.Argument(..., help="JSON array of card review states"),
    card_id: str = typer.Argument(..., help="Card to rate"),
    rating: int = typer.Argument(..., help="Recall quality 1 (blackout) to 5 (perfect)"),
    now: Optional[str] = typer.Option(None, "--now", help="Reference time (default: now, UTC)"),
    write: bool = typer.Option(False, "--write", "-w", help="Write the updated snapshot back"),
):
    """
    Apply one rating to a card and show its next review.
    """
    reference = _parse_now(now)
    try:
        cards = [m.to_card() for m in load_list(cards_file, CardModel)]
        store = InMemoryCardStore(cards)
        updated = rate_card(store, card_id, rating, now=reference)
    except INPUT_ERRORS as e:
        _fail(f"Could not rate card {card_id}: {e}")

    console.print(
        f"[cyan]{updated.id}[/cyan] ease [bold]{updated.ease_factor:.2f}[/bold] "
        f"interval [bold]{updated.interval}d[/bold] next review {updated.due_at.isoformat()}"
    )

    if write:
        # Keep the snapshot's original order
        dump_cards(cards_file, [store.get(card.id) for card in cards])
        console.print(f"[dim]Saved {cards_file}[/dim]")


# =============================================================================
# Adaptive Tests
# =============================================================================


@app.command("next-item")
def next_item_command(
    pool_file: Path = typer.Argument(..., help="JSON array of items {id, difficulty, ...}"),
    history_file: Optional[Path] = typer.Option(
        None, "--history", help="JSON array of answers {item_id, difficulty, correct}"
    ),
):
    """
    Estimate ability from the answer history and pick the next item.
    """
    settings = get_settings()
    try:
        pool = [m.to_item() for m in load_list(pool_file, ItemModel)]
        history = load_list(history_file, ResponseModel) if history_file else []
    except INPUT_ERRORS as e:
        _fail(f"Could not load session data: {e}")

    ability = estimate(r.to_observation() for r in history)
    answered = [r.item_id for r in history if r.item_id]
    console.print(f"Ability estimate: [bold]{ability:.2f}[/bold] after {len(history)} answers")

    if len(history) >= settings.session_max_items:
        console.print(f"[yellow]Session cap of {settings.session_max_items} items reached[/yellow]")
        return

    item = select_next(ability, pool, answered)
    if item is None:
        console.print("[yellow]Item pool exhausted; session complete[/yellow]")
        return
    console.print(f"Next item: [cyan]{item.id}[/cyan] (difficulty {item.difficulty:g})")


# =============================================================================
# Mistake Analysis
# =============================================================================


@app.command("analyze")
def analyze_command(
    mistakes_file: Path = typer.Argument(..., help="JSON array of mistakes {category, grammar_point}"),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON"),
):
    """
    Report weak areas from historical mistakes.
    """
    settings = get_settings()
    try:
        records = [m.to_record() for m in load_list(mistakes_file, MistakeModel)]
    except INPUT_ERRORS as e:
        _fail(f"Could not load mistakes: {e}")

    report = analyze_mistakes(records, focus_size=settings.mistake_focus_size)

    if as_json:
        typer.echo(json.dumps(report.to_dict(), indent=2))
        return

    console.print(f"Total mistakes: [bold]{report.total_mistakes}[/bold]")
    if report.most_common_mistake:
        console.print(
            f"Most common: [red]{report.most_common_mistake.key}[/red] "
            f"({report.most_common_mistake.count})"
        )

    for title, counts in (
        ("Categories", report.category_counts),
        ("Grammar points", report.grammar_point_counts),
    ):
        if not counts:
            continue
        table = Table(title=title, box=box.SIMPLE)
        table.add_column("Key")
        table.add_column("Count", justify="right")
        for entry in counts:
            table.add_row(entry.key, str(entry.count))
        console.print(table)

    if report.recommended_focus:
        console.print("Recommended focus: " + ", ".join(report.recommended_focus))


# =============================================================================
# Entry Point
# =============================================================================

def main() -> None:
    """CLI entry point."""
    # Configure logging
    logger.remove()
    logger.add(
        sys.stderr,
        level=get_settings().log_level,
        format="<level>{message}</level>",
    )

    app()


if __name__ == "__main__":
    main()
