"""leetsrs CLI: card, queue, stats, settings and data commands."""

import json
import logging
import sys
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import ValidationError as PydanticValidationError

from leetsrs.application.config import AppConfig, resolve_config
from leetsrs.application.factory import Services, build_services
from leetsrs.domain.cards.models import Card, Difficulty, Grade
from leetsrs.domain.constants import DEFAULT_FORECAST_DAYS, DEFAULT_HISTORY_DAYS
from leetsrs.domain.errors import LeetSrsError
from leetsrs.domain.stats.models import DailyStats

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="leetsrs: Spaced repetition for coding problems.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Subgroups
# ---------------------------------------------------------------------------

note_app = typer.Typer(help="Notes attached to cards.", no_args_is_help=True)
app.add_typer(note_app, name="note")

stats_app = typer.Typer(help="Review statistics.", no_args_is_help=True)
app.add_typer(stats_app, name="stats")

settings_app = typer.Typer(help="Review settings.", no_args_is_help=True)
app.add_typer(settings_app, name="settings")

config_app = typer.Typer(help="Manage leetsrs configuration.")
app.add_typer(config_app, name="config")


class GradeChoice(str, Enum):
    again = "again"
    hard = "hard"
    good = "good"
    easy = "easy"

    def to_grade(self) -> Grade:
        return Grade[self.value.capitalize()]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _config(ctx: typer.Context) -> AppConfig:
    if "config" not in ctx.obj:
        try:
            ctx.obj["config"] = resolve_config(ctx.obj.get("overrides"))
        except PydanticValidationError as e:
            typer.secho(f"Error: Invalid configuration: {e}", fg="red", err=True)
            raise typer.Exit(1) from e
    return ctx.obj["config"]


def _services(ctx: typer.Context) -> Services:
    if "services" not in ctx.obj:
        ctx.obj["services"] = build_services(_config(ctx))
    return ctx.obj["services"]


def _local_due(ctx: typer.Context, card: Card) -> str:
    return f"{card.memory.due.astimezone(_config(ctx).tzinfo):%Y-%m-%d %H:%M}"


@contextmanager
def _errors_to_exit():
    try:
        yield
    except LeetSrsError as e:
        typer.secho(f"Error: {e}", fg="red", err=True)
        raise typer.Exit(1) from e


def _card_dict(card: Card) -> dict[str, Any]:
    return {
        "id": card.id,
        "slug": card.slug,
        "name": card.name,
        "external_id": card.external_id,
        "difficulty": card.difficulty.value,
        "state": card.memory.state.name,
        "due": card.memory.due.isoformat(),
        "reps": card.memory.reps,
        "lapses": card.memory.lapses,
        "paused": card.paused,
    }


def _stats_dict(day: DailyStats) -> dict[str, Any]:
    return {
        "date": day.date,
        "total_reviews": day.total_reviews,
        "grade_breakdown": {g.name: n for g, n in day.grade_breakdown.items()},
        "new_cards": day.new_cards,
        "reviewed_cards": day.reviewed_cards,
        "streak": day.streak,
    }


def _echo_json(value: Any) -> None:
    typer.echo(json.dumps(value, indent=2))


def _echo_cards(ctx: typer.Context, cards: list[Card], json_output: bool) -> None:
    if json_output:
        _echo_json([_card_dict(c) for c in cards])
        return
    if not cards:
        typer.secho("No cards.", fg="yellow")
        return
    for card in cards:
        flag = " (paused)" if card.paused else ""
        typer.echo(
            f"{card.slug:<40} {card.difficulty.value:<6} {card.memory.state.name:<10} "
            f"{_local_due(ctx, card)}{flag}"
        )


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    data_dir: Annotated[
        Path | None, typer.Option(help="Directory holding leetsrs data.")
    ] = None,
    timezone: Annotated[
        str | None, typer.Option(help="IANA timezone for day boundaries. Defaults to system.")
    ] = None,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for leetsrs."""
    ctx.ensure_object(dict)
    ctx.obj["overrides"] = {"data_dir": data_dir, "timezone": timezone, "verbose": verbose}
    if verbose:
        level = logging.DEBUG if verbose > 1 else logging.INFO
        logging.getLogger("leetsrs").setLevel(level)


# ---------------------------------------------------------------------------
# Card commands
# ---------------------------------------------------------------------------


@app.command()
def add(
    ctx: typer.Context,
    slug: Annotated[str, typer.Argument(help="Problem slug, e.g. two-sum.")],
    name: Annotated[str | None, typer.Option(help="Display name. Defaults to the slug.")] = None,
    external_id: Annotated[str, typer.Option("--id", help="Problem number.")] = "",
    difficulty: Annotated[Difficulty, typer.Option(help="Problem difficulty.")] = Difficulty.Medium,
):
    """[bold green]Track[/bold green] a problem. Does nothing if it is already tracked."""
    card = _services(ctx).cards.add_card(slug, name or slug, external_id, difficulty)
    typer.echo(f"Tracking {card.slug} ({card.memory.state.name})")


@app.command("list")
def list_cards(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List every tracked card, earliest due first."""
    cards = sorted(_services(ctx).cards.get_all_cards(), key=lambda c: (c.memory.due, c.slug))
    _echo_cards(ctx, cards, json_output)


@app.command()
def remove(
    ctx: typer.Context,
    slug: Annotated[str, typer.Argument(help="Problem slug.")],
):
    """Stop tracking a problem and delete its note."""
    _services(ctx).cards.remove_card(slug)
    typer.echo(f"Removed {slug}")


@app.command()
def delay(
    ctx: typer.Context,
    slug: Annotated[str, typer.Argument(help="Problem slug.")],
    days: Annotated[int, typer.Argument(help="Calendar days to add to the due date.")],
):
    """Postpone a card."""
    with _errors_to_exit():
        card = _services(ctx).cards.delay_card(slug, days)
    typer.echo(f"{card.slug} now due {_local_due(ctx, card)}")


@app.command()
def pause(
    ctx: typer.Context,
    slug: Annotated[str, typer.Argument(help="Problem slug.")],
):
    """Exclude a card from the queue and forecasts."""
    with _errors_to_exit():
        _services(ctx).cards.set_pause_status(slug, True)
    typer.echo(f"Paused {slug}")


@app.command()
def resume(
    ctx: typer.Context,
    slug: Annotated[str, typer.Argument(help="Problem slug.")],
):
    """Put a paused card back into rotation."""
    with _errors_to_exit():
        _services(ctx).cards.set_pause_status(slug, False)
    typer.echo(f"Resumed {slug}")


@app.command()
def rate(
    ctx: typer.Context,
    slug: Annotated[str, typer.Argument(help="Problem slug.")],
    grade: Annotated[GradeChoice, typer.Argument(help="How the attempt went.")],
    name: Annotated[str | None, typer.Option(help="Display name if not yet tracked.")] = None,
    external_id: Annotated[str, typer.Option("--id", help="Problem number.")] = "",
    difficulty: Annotated[Difficulty, typer.Option(help="Problem difficulty.")] = Difficulty.Medium,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """[bold green]Grade[/bold green] a review and reschedule the card."""
    result = _services(ctx).cards.rate_card(
        slug, name or slug, grade.to_grade(), external_id, difficulty
    )
    if json_output:
        _echo_json({"card": _card_dict(result.card), "should_requeue": result.should_requeue})
        return
    card = result.card
    typer.echo(
        f"{card.slug}: {card.memory.state.name}, next review "
        f"{_local_due(ctx, card)}"
    )
    if result.should_requeue:
        typer.secho("Still due today, it will come back this session.", fg="yellow")


@app.command()
def queue(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show today's review queue."""
    _echo_cards(ctx, _services(ctx).cards.get_review_queue(), json_output)


# ---------------------------------------------------------------------------
# Note subgroup
# ---------------------------------------------------------------------------


def _card_id_for(services: Services, slug: str) -> str:
    card = services.cards.get_card(slug)
    if card is None:
        typer.secho(f'Error: Card with slug "{slug}" not found', fg="red", err=True)
        raise typer.Exit(1)
    return card.id


@note_app.command("show")
def note_show(ctx: typer.Context, slug: Annotated[str, typer.Argument(help="Problem slug.")]):
    """Print the note of a card."""
    services = _services(ctx)
    note = services.notes.get_note(_card_id_for(services, slug))
    if note is None:
        typer.secho("No note.", fg="yellow")
        return
    typer.echo(note.text)


@note_app.command("save")
def note_save(
    ctx: typer.Context,
    slug: Annotated[str, typer.Argument(help="Problem slug.")],
    text: Annotated[str, typer.Argument(help="Note text. Empty text deletes the note.")],
):
    """Replace the note of a card."""
    services = _services(ctx)
    with _errors_to_exit():
        services.notes.save_note(_card_id_for(services, slug), text)
    typer.echo(f"Saved note for {slug}")


@note_app.command("delete")
def note_delete(ctx: typer.Context, slug: Annotated[str, typer.Argument(help="Problem slug.")]):
    """Delete the note of a card."""
    services = _services(ctx)
    services.notes.delete_note(_card_id_for(services, slug))
    typer.echo(f"Deleted note for {slug}")


# ---------------------------------------------------------------------------
# Stats subgroup
# ---------------------------------------------------------------------------


@stats_app.command("today")
def stats_today(ctx: typer.Context):
    """Counters for today, plus the current streak."""
    services = _services(ctx)
    today = services.stats.get_today_stats()
    _echo_json(
        {
            "today": _stats_dict(today) if today else None,
            "streak": services.stats.get_current_streak(),
        }
    )


@stats_app.command("history")
def stats_history(
    ctx: typer.Context,
    days: Annotated[int, typer.Option(help="Number of days ending today.")] = DEFAULT_HISTORY_DAYS,
):
    """Per-day counters, oldest first, zero-filled."""
    _echo_json([_stats_dict(d) for d in _services(ctx).stats.get_last_n_days_stats(days)])


@stats_app.command("forecast")
def stats_forecast(
    ctx: typer.Context,
    days: Annotated[
        int, typer.Option(help="Number of days starting today.")
    ] = DEFAULT_FORECAST_DAYS,
):
    """Cards coming due on each upcoming day."""
    upcoming = _services(ctx).stats.get_next_n_days_stats(days)
    _echo_json([{"date": u.date, "count": u.count} for u in upcoming])


@stats_app.command("states")
def stats_states(ctx: typer.Context):
    """Number of cards in each learning state."""
    histogram = _services(ctx).stats.get_card_state_stats()
    _echo_json({state.name: count for state, count in histogram.items()})


@stats_app.command("all")
def stats_all(ctx: typer.Context):
    """Every recorded day, newest first."""
    _echo_json([_stats_dict(d) for d in _services(ctx).stats.get_all_stats()])


# ---------------------------------------------------------------------------
# Settings subgroup
# ---------------------------------------------------------------------------


@settings_app.command("show")
def settings_show(ctx: typer.Context):
    """Display current review settings."""
    settings = _services(ctx).settings
    _echo_json(
        {
            "max_new_cards_per_day": settings.get_max_new_cards_per_day(),
            "day_start_hour": settings.get_day_start_hour(),
            "animations_enabled": settings.get_animations_enabled(),
            "theme": settings.get_theme(),
        }
    )


@settings_app.command("set-max-new")
def settings_set_max_new(
    ctx: typer.Context, value: Annotated[int, typer.Argument(help="New cards per day.")]
):
    """Set the daily allowance of new cards."""
    with _errors_to_exit():
        _services(ctx).settings.set_max_new_cards_per_day(value)
    typer.echo(f"max_new_cards_per_day = {value}")


@settings_app.command("set-day-start")
def settings_set_day_start(
    ctx: typer.Context, value: Annotated[int, typer.Argument(help="Hour (0-23) a day starts.")]
):
    """Set the hour at which a new review day begins."""
    with _errors_to_exit():
        _services(ctx).settings.set_day_start_hour(value)
    typer.echo(f"day_start_hour = {value}")


@settings_app.command("set-theme")
def settings_set_theme(
    ctx: typer.Context, value: Annotated[str, typer.Argument(help="light or dark.")]
):
    """Set the theme stored for the extension UI."""
    with _errors_to_exit():
        _services(ctx).settings.set_theme(value)
    typer.echo(f"theme = {value}")


@settings_app.command("set-animations")
def settings_set_animations(
    ctx: typer.Context,
    enabled: Annotated[bool, typer.Option("--on/--off", help="Enable UI animations.")] = True,
):
    """Toggle the animations flag stored for the extension UI."""
    _services(ctx).settings.set_animations_enabled(enabled)
    typer.echo(f"animations_enabled = {str(enabled).lower()}")


# ---------------------------------------------------------------------------
# Data commands
# ---------------------------------------------------------------------------


@app.command("export")
def export_cmd(
    ctx: typer.Context,
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write to file instead of stdout.")
    ] = None,
):
    """Export cards, stats, notes and settings as JSON."""
    document = _services(ctx).transfer.export_data()
    if output is None:
        typer.echo(document)
        return
    output.write_text(document, encoding="utf-8")
    typer.secho(f"Exported to {output}", fg="green")


@app.command("import")
def import_cmd(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="Export file to restore.", exists=True)],
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Bypass confirmation for destructive actions.")
    ] = False,
):
    """Replace all data with the contents of an export file."""
    if not force:
        typer.confirm("This replaces all existing data. Continue?", abort=True)
    with _errors_to_exit():
        _services(ctx).transfer.import_data(path.read_text(encoding="utf-8"))
    typer.secho(f"Imported {path}", fg="green")


@app.command()
def reset(
    ctx: typer.Context,
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Bypass confirmation for destructive actions.")
    ] = False,
):
    """Delete all cards, stats, notes and settings."""
    if not force:
        typer.confirm("This deletes all data. Continue?", abort=True)
    _services(ctx).transfer.reset_all_data()
    typer.secho("All data removed.", fg="green")


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _config(ctx)
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))


def main() -> None:
    app()
