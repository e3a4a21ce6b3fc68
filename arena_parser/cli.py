#!/usr/bin/env python3
"""
Command-line interface for the arena match parser.
"""

import json
import logging
from pathlib import Path
from datetime import datetime

import click
from rich.console import Console
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, BarColumn, TextColumn, TimeRemainingColumn
from rich.logging import RichHandler

from .parser.parser import ArenaLogParser
from .parser.tokenizer import LineTokenizer, TimestampError, TokenizeError
from .parser.events import MatchEndedEvent, MatchStartedEvent
from .config.settings import get_settings
from .config.wow_data import get_arena_name
from .config.loader import load_and_apply_config


# Set up rich console for pretty output
console = Console()

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    root = logging.getLogger()
    if not any(isinstance(handler, RichHandler) for handler in root.handlers):
        root.addHandler(RichHandler(console=console, rich_tracebacks=True, show_path=False))
    root.setLevel(logging.DEBUG if verbose else logging.INFO)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def cli(verbose):
    """Arena Match Parser - rated arena detection for WoW combat logs"""
    _configure_logging(verbose)

    try:
        get_settings().validate()
    except ValueError as e:
        raise click.ClickException(str(e))


@cli.command()
@click.argument("log_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", help="Output file for results")
@click.option("--format", type=click.Choice(["json", "summary"]), default="summary")
@click.option(
    "--max-buffered-lines",
    default=None,
    type=click.IntRange(min=1),
    help="Lines kept per match while identifying the recording player",
)
@click.option("--config", "config_path", default=None, help="YAML file with arena/spec overrides")
def parse(log_file, output, format, max_buffered_lines, config_path):
    """Replay a combat log file and report the arena matches in it."""
    load_and_apply_config(config_path or get_settings().config_path)

    log_path = Path(log_file)
    console.print(f"[bold green]Parsing combat log:[/bold green] {log_path.name}")

    parser = ArenaLogParser(max_buffered_lines=max_buffered_lines)
    events = []
    start_time = datetime.now()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        TimeRemainingColumn(),
        console=console,
        transient=True,
    ) as progress:
        file_size = log_path.stat().st_size
        task = progress.add_task("[cyan]Processing...", total=file_size)

        with open(log_path, "rb") as f:
            for raw in f:
                progress.advance(task, len(raw))
                line = raw.decode("utf-8", errors="ignore")
                event = parser.parse_line(line)
                if event is not None:
                    events.append(event)

    elapsed = (datetime.now() - start_time).total_seconds()
    stats = parser.get_stats()
    console.print(
        f"[cyan]Processed {stats['lines_processed']:,} lines in {elapsed:.2f}s, "
        f"{stats['events_emitted']} events[/cyan]"
    )

    if format == "json":
        payload = json.dumps([event.to_dict() for event in events], indent=2)
        if output:
            Path(output).write_text(payload, encoding="utf-8")
            console.print(f"[green]Results written to {output}[/green]")
        else:
            click.echo(payload)
        return

    _display_summary(events)

    if output:
        ended = [event.to_dict() for event in events if isinstance(event, MatchEndedEvent)]
        Path(output).write_text(json.dumps(ended, indent=2), encoding="utf-8")
        console.print(f"[green]Match metadata written to {output}[/green]")


def _match_result(event: MatchEndedEvent) -> str:
    metadata = event.metadata
    player = metadata.get_player(metadata.player_id) if metadata.player_id else None

    if metadata.shuffle_rounds is not None:
        if player is not None and player.wins is not None:
            return f"{player.wins}-{player.losses}"
        return "-"

    if player is None or metadata.winning_team_id is None:
        return "-"
    return "Win" if player.team_id == metadata.winning_team_id else "Loss"


def _display_summary(events) -> None:
    """Display a table of the matches found."""
    starts = sum(1 for event in events if isinstance(event, MatchStartedEvent))
    ended = [event for event in events if isinstance(event, MatchEndedEvent)]

    if not ended:
        console.print(f"[yellow]No completed arena matches found ({starts} started)[/yellow]")
        return

    table = Table(title="Arena Matches")
    table.add_column("Start", style="cyan")
    table.add_column("Bracket", style="magenta")
    table.add_column("Arena", no_wrap=True)
    table.add_column("Duration", justify="right")
    table.add_column("Result", style="green")
    table.add_column("Rounds", justify="right")

    for event in ended:
        metadata = event.metadata
        duration = metadata.match_duration
        table.add_row(
            metadata.timestamp.strftime("%m-%d %H:%M"),
            metadata.bracket,
            get_arena_name(metadata.zone_id),
            f"{duration // 60}:{duration % 60:02d}" if duration is not None else "-",
            _match_result(event),
            str(len(metadata.shuffle_rounds)) if metadata.shuffle_rounds else "-",
        )

    console.print(table)
    console.print(f"[bold]{len(ended)}[/bold] completed of {starts} started matches")


@cli.command()
@click.argument("line")
def tokenize(line):
    """Show the timestamp and fields of a single combat log line."""
    tokenizer = LineTokenizer()
    try:
        parsed = tokenizer.tokenize(line)
    except TimestampError as e:
        raise click.ClickException(f"Bad timestamp: {e}")
    except TokenizeError as e:
        raise click.ClickException(f"Malformed line: {e}")

    console.print(f"[cyan]Timestamp:[/cyan] {parsed.timestamp.isoformat()}")
    console.print(f"[cyan]Event:[/cyan] {parsed.event_type}")

    table = Table(title="Fields")
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Value")
    for index, value in enumerate(parsed.fields):
        table.add_row(str(index), json.dumps(value))
    console.print(table)


if __name__ == "__main__":
    cli()
