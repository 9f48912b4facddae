"""Command-line entry point for daybrief - wiring and display only."""

import asyncio
import json
import os
import random
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from .clock import SystemClock
from .config import Config
from .defaults import config_dir, ensure_config
from .fetchers import create_fetchers
from .generator import BriefGenerator
from .models import Brief, BriefMode, EngagementAction
from .modes import select_mode
from .observability import EventLog
from .storage import Storage

# Load environment variables from ~/.config/daybrief/.env
config_home = os.getenv("XDG_CONFIG_HOME", str(Path.home() / ".config"))
dotenv_path = Path(config_home) / "daybrief" / ".env"
if dotenv_path.exists():
    load_dotenv(dotenv_path)

console = Console()
app = typer.Typer(
    name="daybrief",
    help="daybrief - a personalized, time-budgeted daily brief",
    add_completion=False,
)


def load_config() -> Config:
    try:
        return Config.from_file()
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]❌ {e}[/bold red]")
        sys.exit(1)


def build_generator(
    config: Config,
    storage: Storage,
    with_sources: bool = True,
    event_log: Optional[EventLog] = None,
) -> BriefGenerator:
    """Wire a generator from configuration and the local store."""
    event_log = event_log or EventLog()
    rng = (
        random.Random(config.exploration_seed)
        if config.exploration_seed is not None
        else None
    )
    return BriefGenerator(
        sources=create_fetchers(config, event_log) if with_sources else [],
        profile=storage.load_profile(config.user_id, config.retention_days),
        rng=rng,
        lookback_hours=config.lookback_hours,
        fetch_timeout_seconds=config.fetch_timeout_seconds,
        storage=storage,
        user_id=config.user_id,
        console=console,
        event_log=event_log,
    )


def render_brief(brief: Brief) -> None:
    """Print a brief as a rich table."""
    console.print(
        f"\n[bold]{brief.mode.display_name}[/bold] · "
        f"{len(brief.items)} items · ~{brief.read_time_minutes} min · "
        f"[dim]{brief.generated_at.strftime('%Y-%m-%d %H:%M')} · {brief.id}[/dim]"
    )
    if not brief.items:
        console.print("[yellow]Nothing new to brief you on.[/yellow]")
        return

    table = Table(show_lines=True)
    table.add_column("#", justify="right")
    table.add_column("Section")
    table.add_column("Item")
    table.add_column("Why")
    for item in brief.items:
        body = f"[bold]{item.content.title}[/bold]\n{item.summary}"
        if item.context:
            body += f"\n[dim]{item.context}[/dim]"
        body += f"\n[dim]item {item.id}[/dim]"
        table.add_row(
            str(item.priority + 1),
            item.category.display_name,
            body,
            item.reason.explanation,
        )
    console.print(table)


@app.command()
def init() -> None:
    """Create the default configuration file."""
    path = ensure_config()
    console.print(f"[green]✅ Config ready at {path}[/green]")


@app.command()
def mode(
    at: Optional[str] = typer.Option(
        None, "--at", help="ISO timestamp to evaluate instead of now"
    ),
) -> None:
    """Show which brief mode applies right now (or at --at)."""
    now = datetime.fromisoformat(at) if at else SystemClock().now()
    selected = select_mode(now)
    console.print(
        f"{selected.display_name} ({selected.name}): up to {selected.max_items} items, "
        f"~{selected.target_read_time_seconds // 60} min"
    )


@app.command()
def generate(
    mode_name: Optional[str] = typer.Option(
        None, "--mode", help="rush, standard, leisurely, commute or weekend"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the brief as JSON"),
) -> None:
    """Fetch sources and generate a new brief."""
    config = load_config()
    try:
        brief_mode = BriefMode.from_name(mode_name) if mode_name else None
    except ValueError as e:
        console.print(f"[bold red]❌ {e}[/bold red]")
        sys.exit(1)

    event_log = EventLog()
    with Storage() as storage:
        generator = build_generator(config, storage, event_log=event_log)
        if as_json:
            generator.console = None
        brief = asyncio.run(generator.generate_brief(brief_mode))
        event_log.prune(config.retention_days)

        if as_json:
            print(json.dumps(brief.to_dict(), indent=2))
        else:
            render_brief(brief)
            stats = generator.last_stats
            if stats.get("sources_failed"):
                console.print(
                    f"[yellow]{stats['sources_failed']} source(s) failed; "
                    "brief built from the rest[/yellow]"
                )


@app.command()
def show(
    brief_id: Optional[str] = typer.Argument(None, help="Brief id (latest if omitted)"),
) -> None:
    """Show a stored brief."""
    config = load_config()
    with Storage() as storage:
        brief = (
            storage.get_brief(brief_id)
            if brief_id
            else storage.get_latest_brief(config.user_id)
        )
    if brief is None:
        console.print("[yellow]No brief found. Run 'daybrief generate' first.[/yellow]")
        raise typer.Exit(1)
    render_brief(brief)


@app.command()
def record(
    brief_item_id: str = typer.Argument(..., help="Id of the brief item"),
    content_item_id: str = typer.Argument(..., help="Id of the underlying content"),
    action: EngagementAction = typer.Option(
        EngagementAction.VIEWED, "--action", help="What the user did"
    ),
    dwell: float = typer.Option(0.0, "--dwell", help="Seconds spent on the item"),
) -> None:
    """Record engagement with an item of the latest brief."""
    config = load_config()
    with Storage() as storage:
        generator = build_generator(config, storage, with_sources=False)
        generator.current_brief = storage.get_latest_brief(config.user_id)
        event = generator.record_engagement(brief_item_id, content_item_id, dwell, action)

    if event.source_id is None:
        console.print(
            "[yellow]Item not in the latest brief; saved to history only.[/yellow]"
        )
    else:
        console.print(f"[green]✅ Recorded {event.action.value}[/green]")


@app.command()
def profile() -> None:
    """Show learned category weights."""
    config = load_config()
    with Storage() as storage:
        user_profile = storage.load_profile(config.user_id, config.retention_days)

    table = Table(title=f"Profile: {config.user_id}")
    table.add_column("Section")
    table.add_column("Weight", justify="right")
    for category, weight in sorted(
        user_profile.category_preference.items(), key=lambda kv: kv[1], reverse=True
    ):
        table.add_row(category.display_name, f"{weight:.2f}")
    console.print(table)
    console.print(
        f"{len(user_profile.engagement_history)} engagement events in history "
        f"[dim](config: {config_dir() / 'config.toml'})[/dim]"
    )


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
