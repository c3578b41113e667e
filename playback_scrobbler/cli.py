"""Command-line interface for Playback Scrobbler."""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .config.settings import LastFmConfig, Settings, default_config_path
from .errors import ScrobblerError
from .sinks import build_sinks
from .sinks.lastfm import create_session
from .utils.logger import setup_logger

app = typer.Typer(help="A simple, cross-platform music scrobbler daemon")
console = Console()

DEFAULT_HISTORY_DAYS = 14


def get_settings(config_path: Optional[Path] = None) -> Settings:
    """Load settings from file or defaults."""
    return Settings.from_file_or_default(config_path)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.astimezone(timezone.utc)
    return value


def _json_logs(ctx: typer.Context) -> bool:
    return bool(ctx.obj and ctx.obj.get("json_logs"))


@app.callback()
def main(
    ctx: typer.Context,
    json_logs: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Print log messages in JSON format"
    )
):
    """A simple, cross-platform music scrobbler daemon."""
    ctx.obj = {"json_logs": json_logs}


@app.command()
def run(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file"
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Print debug log messages"
    )
):
    """Watch sources and send scrobbles to configured sinks."""
    console.print("[cyan]Starting Playback Scrobbler...[/cyan]")

    # Import here to avoid circular dependency
    from .service import ScrobblerService

    try:
        service = ScrobblerService(config_path=config, debug=debug, json_logs=_json_logs(ctx))
        service.start()
    except KeyboardInterrupt:
        console.print("\n[yellow]Service stopped by user[/yellow]")
    except Exception as e:
        console.print(f"[red]Service error: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def scrobbles(
    ctx: typer.Context,
    sink: str = typer.Argument(..., help="Sink name (see list-sinks)"),
    limit: int = typer.Option(
        10,
        "--limit",
        "-l",
        help="Maximum number of scrobbles to display"
    ),
    time_from: Optional[datetime] = typer.Option(
        None,
        "--from",
        "-f",
        help=f"Only display scrobbles after this time [default: now minus {DEFAULT_HISTORY_DAYS} days]"
    ),
    time_to: Optional[datetime] = typer.Option(
        None,
        "--to",
        "-t",
        help="Only display scrobbles before this time [default: now]"
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file"
    )
):
    """Print scrobbles recorded by the given sink."""
    settings = get_settings(config)
    logger = setup_logger(log_file=None, level="WARNING", console=True, json_format=_json_logs(ctx))

    now = datetime.now(timezone.utc)
    time_to = _as_utc(time_to) if time_to else now
    time_from = _as_utc(time_from) if time_from else now - timedelta(days=DEFAULT_HISTORY_DAYS)

    selected = next((s for s in build_sinks(settings, logger) if s.name == sink), None)
    if selected is None:
        console.print("[red]Invalid sink name.[/red] Run 'list-sinks' to list all configured sinks.")
        raise typer.Exit(1)

    try:
        recorded = selected.get_scrobbles(limit, time_from, time_to)
    except ScrobblerError as e:
        console.print(f"[red]Error fetching scrobbles: {e}[/red]")
        raise typer.Exit(1)

    if not recorded:
        console.print("[yellow]No scrobbles in this time range[/yellow]")
        return

    table = Table(title=f"Scrobbles ({selected.name})")
    table.add_column("Artists", style="cyan")
    table.add_column("Track", style="green")
    table.add_column("Album")
    table.add_column("Duration", justify="right")
    table.add_column("Timestamp")

    for entry in recorded:
        table.add_row(
            entry.join_artists(),
            entry.track,
            entry.album,
            str(entry.duration) if entry.duration else "-",
            entry.timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S") if entry.timestamp else "-"
        )

    console.print(table)


@app.command(name="list-sinks")
def list_sinks(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file"
    )
):
    """Print names of all configured sinks."""
    settings = get_settings(config)
    logger = setup_logger(log_file=None, level="WARNING", console=True, json_format=_json_logs(ctx))

    for sink in build_sinks(settings, logger):
        console.print(sink.name)


@app.command(name="lastfm-auth")
def lastfm_auth(
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file"
    )
):
    """Authenticate with last.fm and save the session key and username."""
    config_path = config or default_config_path()
    settings = get_settings(config_path)
    lastfm: Optional[LastFmConfig] = settings.sinks.lastfm

    if lastfm is None or not lastfm.key or not lastfm.secret:
        console.print("[red]Error: last.fm sink is not configured (set sinks.lastfm.key and secret)[/red]")
        raise typer.Exit(1)

    if lastfm.session_key and lastfm.username:
        console.print(f"[green]last.fm is already authenticated as {lastfm.username}[/green]")
        return

    def confirm(url: str) -> bool:
        console.print("Please open the following URL in your browser and authorize the application:")
        console.print(url)
        typer.launch(url)
        return typer.confirm("Finished authorization?", default=True)

    try:
        session = create_session(lastfm.key, lastfm.secret, confirm)
    except ScrobblerError as e:
        console.print(f"[red]Error fetching session key from last.fm: {e}[/red]")
        raise typer.Exit(1)

    if session is None:
        console.print("[yellow]Cancelled[/yellow]")
        return

    lastfm.session_key, lastfm.username = session
    settings.save(config_path)

    console.print(f"[green]Logged in as {lastfm.username}[/green]")
    console.print(f"Session saved to {config_path}")


@app.command()
def init_config(
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output path for config file"
    )
):
    """Initialize a configuration file with defaults."""
    if output is None:
        output = default_config_path()

    if output.exists():
        overwrite = typer.confirm(
            f"Config file already exists at {output}. Overwrite?",
            default=False
        )
        if not overwrite:
            console.print("[yellow]Cancelled[/yellow]")
            return

    # Create default settings and save
    settings = Settings()
    settings.save(output)

    console.print(f"[green]Configuration file created: {output}[/green]")
    console.print("\nEdit this file to add sinks and customize your settings")


if __name__ == "__main__":
    app()
