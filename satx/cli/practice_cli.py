"""
satx: Adaptive Practice CLI.

A Rich terminal interface over the adaptive engine.

Commands:
- satx practice SUBJECT   - Run an adaptive practice session
- satx next SUBJECT       - Show the next selected quiz
- satx feed SUBJECT       - Preview a session feed
- satx dashboard          - Show mastery by topic
- satx reset              - Clear the learner model
- satx export PATH        - Write the learner model to a JSON file
- satx import PATH        - Replace the learner model from a JSON file
"""
from __future__ import annotations

import json
import string
import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from config import get_settings
from satx.adaptive.catalog import MAX_CHOICES, Item, ItemCatalog
from satx.adaptive.dashboard import Dashboard, TopicReport
from satx.adaptive.engine import AdaptiveEngine
from satx.adaptive.mastery import fixed_difficulty
from satx.exceptions import CatalogError, ModelImportError

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="satx",
    help="satx: adaptive practice in the terminal",
    no_args_is_help=True,
)
console = Console()


# =============================================================================
# Styling
# =============================================================================

STYLES = {
    "correct": "bold green",
    "incorrect": "bold red",
    "info": "bold cyan",
    "warning": "bold yellow",
    "dim": "dim",
    "level": {
        "Bronze": "dark_orange3",
        "Silver": "grey70",
        "Gold": "gold1",
        "Platinum": "bright_cyan",
    },
}

CHOICE_LETTERS = string.ascii_uppercase[:MAX_CHOICES]


def style_level(level: str) -> str:
    """Get styled level string."""
    color = STYLES["level"].get(level, "white")
    return f"[{color}]{level}[/{color}]"


# =============================================================================
# Shared Helpers
# =============================================================================

def catalog_option():
    """Shared --catalog option."""
    return typer.Option(
        None,
        "--catalog", "-c",
        help="JSON catalog of lessons and quizzes (defaults to the bundled sample)",
    )


def _load_catalog(path: Optional[Path]) -> ItemCatalog:
    """Load the requested catalog, exiting with a message on failure."""
    path = path or get_settings().catalog_path
    try:
        return ItemCatalog.from_file(path) if path else ItemCatalog.bundled()
    except CatalogError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


def _check_subject(catalog: ItemCatalog, subject: str) -> None:
    if not catalog.quizzes(subject):
        console.print(f"[red]No quizzes for subject '{subject}'.[/red]")
        console.print(f"Available: {', '.join(catalog.subjects) or 'none'}")
        raise typer.Exit(1)


# =============================================================================
# Display Helpers
# =============================================================================


def display_lesson(item: Item) -> None:
    """Display an intro or summary lesson."""
    console.print(Panel(
        item.caption or "",
        title=f"[bold]{item.title or item.id}[/bold]",
        title_align="left",
        border_style="magenta",
        padding=(1, 2),
    ))


def display_quiz(item: Item, index: int, total: int) -> None:
    """Display the question side of a quiz."""
    header = f"Question {index}/{total}  |  {item.topic or 'general'}"

    content = ""
    if item.passage:
        content += f"[dim]{item.passage}[/dim]\n\n"
    content += item.prompt or ""

    if item.choices:
        content += "\n\n"
        for i, choice in enumerate(item.choices):
            content += f"  {CHOICE_LETTERS[i]}. {choice}\n"

    console.print(Panel(
        content.rstrip(),
        title=header,
        title_align="left",
        border_style="cyan",
        padding=(1, 2),
    ))


def display_feedback(item: Item, is_correct: bool) -> None:
    """Show the result and explanation."""
    style = STYLES["correct"] if is_correct else STYLES["incorrect"]
    icon = "[green]✓ Correct[/green]" if is_correct else "[red]✗ Incorrect[/red]"

    content = icon
    if not is_correct and item.answer_index is not None and item.answer_index < len(item.choices):
        content += f"\nAnswer: {CHOICE_LETTERS[item.answer_index]}. {item.choices[item.answer_index]}"
    if item.explanation:
        content += f"\n\n[dim]{item.explanation}[/dim]"

    console.print(Panel(content, border_style=style, padding=(1, 2)))


def _topic_table(title: str, topics: list[TopicReport]) -> Table:
    table = Table(title=title, title_justify="left")
    table.add_column("Subject")
    table.add_column("Topic")
    table.add_column("Rating", justify="right")
    table.add_column("Level")
    table.add_column("Seen", justify="right")
    table.add_column("Accuracy", justify="right")
    table.add_column("Last practiced")

    for t in topics:
        table.add_row(
            t.subject,
            t.topic,
            str(t.rating),
            style_level(t.level),
            str(t.seen),
            f"{t.accuracy}%" if t.accuracy is not None else "-",
            t.last.strftime("%Y-%m-%d %H:%M") if t.last else "never",
        )
    return table


def display_dashboard(dashboard: Dashboard) -> None:
    console.print(
        f"\n[bold cyan]Overall[/bold cyan]  {dashboard.overall.rating}  "
        f"{style_level(dashboard.overall.level)}\n"
    )
    if not dashboard.topics:
        console.print("[dim]No topics yet.[/dim]")
        return

    console.print(_topic_table("Topics", dashboard.topics))
    console.print(_topic_table("Weaknesses", dashboard.weaknesses))
    console.print(_topic_table("Strengths", dashboard.strengths))


# =============================================================================
# Commands
# =============================================================================


@app.command()
def practice(
    subject: str = typer.Argument(..., help="Subject to practice (e.g. math)"),
    count: Optional[int] = typer.Option(
        None,
        "--count", "-n",
        min=1,
        help="Number of quizzes (defaults to SATX_FEED_COUNT)",
    ),
    fresh: bool = typer.Option(
        False,
        "--fresh",
        help="Skip quizzes already answered correctly",
    ),
    catalog_path: Optional[Path] = catalog_option(),
) -> None:
    """
    Start an interactive practice session.

    Builds an adaptive feed for the subject and records every answer
    against the local learner model.
    """
    catalog = _load_catalog(catalog_path)
    _check_subject(catalog, subject)

    engine = AdaptiveEngine.from_settings()
    before = engine.get_dashboard(catalog).overall

    completed = None
    if fresh:
        completed = {item_id for item_id, state in engine.model.items.items() if state.correct > 0}

    feed = engine.build_adaptive_feed(
        subject,
        catalog,
        count=count or get_settings().feed_count,
        completed_ids=completed,
    )
    quizzes = [item for item in feed if item.is_quiz]

    if not quizzes:
        console.print("\n[green]Nothing left to practice here.[/green]")
        raise typer.Exit(0)

    console.print(f"\n[bold cyan]satx[/bold cyan] - {subject} ({len(quizzes)} questions)")
    console.print("=" * 40)

    answered = 0
    correct = 0
    index = 0

    try:
        for item in feed:
            if item.is_lesson:
                display_lesson(item)
                continue

            index += 1
            display_quiz(item, index, len(quizzes))

            letters = CHOICE_LETTERS[: len(item.choices)]
            if not letters:
                logger.warning(f"Quiz {item.id} has no choices, skipping")
                continue

            answer = Prompt.ask(
                "Your answer",
                choices=list(letters) + list(letters.lower()),
                show_choices=False,
            ).upper()
            is_correct = item.is_correct_choice(letters.index(answer))

            engine.record_result(item, is_correct)
            answered += 1
            correct += int(is_correct)
            display_feedback(item, is_correct)

    except KeyboardInterrupt:
        console.print("\n\n[yellow]Session interrupted.[/yellow]")

    after = engine.get_dashboard(catalog).overall
    _display_session_summary(answered, correct, before.rating, after.rating, after.level)


def _display_session_summary(
    answered: int, correct: int, before: int, after: int, level: str
) -> None:
    """Display end-of-session summary."""
    accuracy = (correct / answered * 100) if answered else 0.0
    delta = after - before
    console.print("\n")
    console.print(Panel(
        f"[bold]Session Complete![/bold]\n\n"
        f"Questions answered: {answered}\n"
        f"Accuracy: {accuracy:.1f}%\n"
        f"Overall rating: {before} -> {after} ({delta:+d})  {style_level(level)}",
        title="Summary",
        border_style="green",
    ))


@app.command("next")
def next_item(
    subject: str = typer.Argument(..., help="Subject to pick from"),
    catalog_path: Optional[Path] = catalog_option(),
) -> None:
    """Show the quiz the engine would serve next."""
    catalog = _load_catalog(catalog_path)
    _check_subject(catalog, subject)

    engine = AdaptiveEngine.from_settings()
    item = engine.next_item(subject, catalog)
    console.print(f"[bold]{item.id}[/bold]  ({item.topic or 'general'})")
    display_quiz(item, 1, 1)


@app.command()
def feed(
    subject: str = typer.Argument(..., help="Subject to preview"),
    count: Optional[int] = typer.Option(None, "--count", "-n", min=1, help="Number of quizzes"),
    catalog_path: Optional[Path] = catalog_option(),
) -> None:
    """Preview an adaptive session feed without recording anything."""
    catalog = _load_catalog(catalog_path)
    engine = AdaptiveEngine.from_settings()

    items = engine.build_adaptive_feed(subject, catalog, count=count or get_settings().feed_count)

    table = Table(title=f"Feed: {subject}", title_justify="left")
    table.add_column("#", justify="right")
    table.add_column("ID")
    table.add_column("Type")
    table.add_column("Topic")
    table.add_column("Difficulty", justify="right")

    for i, item in enumerate(items, 1):
        if item.is_quiz:
            difficulty = fixed_difficulty(item, engine.mastery.config)
            if difficulty is None:
                # jittered around the topic rating at selection time
                state = engine.model.topics.get(item.topic_key)
                shown = f"~{state.rating if state else engine.mastery.config.initial_rating}"
            else:
                shown = str(difficulty)
            table.add_row(str(i), item.id, "[green]quiz[/green]", item.topic or "general", shown)
        else:
            table.add_row(str(i), item.id, "[magenta]lesson[/magenta]", "", "")

    console.print(table)


@app.command()
def dashboard(
    as_json: bool = typer.Option(False, "--json", help="Print the dashboard as JSON"),
    catalog_path: Optional[Path] = catalog_option(),
) -> None:
    """Show mastery by topic, strengths and weaknesses."""
    catalog = _load_catalog(catalog_path)
    engine = AdaptiveEngine.from_settings()
    report = engine.get_dashboard(catalog)

    if as_json:
        console.print_json(json.dumps(report.to_dict()))
        return

    display_dashboard(report)


@app.command()
def reset(
    confirm: bool = typer.Option(
        False,
        "--yes", "-y",
        help="Skip confirmation",
    ),
) -> None:
    """Clear the learner model for a fresh start."""
    if not confirm and not Confirm.ask("Reset ALL mastery progress? This cannot be undone!", default=False):
        raise typer.Exit(0)

    AdaptiveEngine.from_settings().reset_model()
    console.print("[green]Mastery progress has been reset.[/green]")


@app.command("export")
def export_model(
    path: Path = typer.Argument(..., help="Destination JSON file"),
) -> None:
    """Write the learner model to a JSON file."""
    data = AdaptiveEngine.from_settings().export_model()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
    except OSError as e:
        console.print(f"[red]Cannot write {path}: {e}[/red]")
        raise typer.Exit(1)

    console.print(
        f"[green]Exported {len(data['topics'])} topics and "
        f"{len(data['history'])} results to {path}[/green]"
    )


@app.command("import")
def import_model(
    path: Path = typer.Argument(..., help="JSON file produced by export"),
    confirm: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Replace the learner model with an exported one."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Cannot read {path}: {e}[/red]")
        raise typer.Exit(1)

    if not confirm and not Confirm.ask("Replace current mastery progress?", default=False):
        raise typer.Exit(0)

    try:
        model = AdaptiveEngine.from_settings().import_model(data)
    except ModelImportError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Imported {len(model.topics)} topics from {path}[/green]")


# =============================================================================
# Entry Point
# =============================================================================

def configure_logging() -> None:
    """Route loguru to stderr (and optionally a file) at the configured level."""
    settings = get_settings()
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<level>{message}</level>",
    )
    if settings.log_file:
        logger.add(settings.log_file, level="DEBUG", rotation="1 MB", retention=5)


def main() -> None:
    """CLI entry point."""
    configure_logging()
    app()


if __name__ == "__main__":
    main()
