"""
Command-line interface for spot-sweeper.

This module implements the CLI using Click, with rich-click for colored help.
Each subcommand resolves playlist names and invokes one SweepSession operation.

Commands:
    sweep run                               Clean configured playlists, log recent plays
    sweep clean <name> [--against history]  Remove tracks already heard
    sweep dedup <name>                      Remove repeated artist + title
    sweep trim <name> [--cap N]             Cap a playlist's size from the tail
    sweep log-recent                        Log recent plays into the history playlist
    sweep collect <name>                    Add recent plays not already present
    sweep diff <a> <b>                      List tracks of <a> not matching <b>
    sweep playlists                         List playlists (uri and name)

Options:
    --config <path>     Path to config.yaml (default: ./config.yaml)
    --quiet             On failure print a single line and exit 1
    --verbose           Show matched tracks and snapshot tokens

Error Handling:
    Without --quiet, failures are logged and re-raised with full detail.
    With --quiet, any failure is reduced to one line on stderr and exit code 1.
"""

import sys
from pathlib import Path
from typing import Callable, Optional

import rich_click as click

click.rich_click.USE_RICH_MARKUP = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.MAX_WIDTH = 100

from spot_sweeper import __version__
from spot_sweeper.core import (
    SpotSweeperError,
    get_logger,
    load_config,
    setup_logging,
    shutdown_logging,
)
from spot_sweeper.spotify import SpotifyClient
from spot_sweeper.sweeper.session import (
    AGAINST_HISTORY,
    AGAINST_RECENT,
    SweepSession,
    format_summary,
    format_tracks,
)

logger = get_logger(__name__)


@click.group()
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="<config.yaml>",
    help="Configuration file (default: ./config.yaml)"
)
@click.option(
    "--quiet",
    is_flag=True,
    help="On failure, print one line and exit with code 1"
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Show matched tracks and snapshot tokens"
)
@click.version_option(__version__, prog_name="spot-sweeper")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], quiet: bool, verbose: bool) -> None:
    """
    spot-sweeper: Keep Spotify playlists free of tracks you have already heard.

    \b
    BASIC USAGE:
        sweep run                          # Clean configured playlists
        sweep clean "Drive Mix"            # Remove recently played tracks
        sweep dedup "Weekly Playlist"      # Remove duplicates
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["quiet"] = quiet
    ctx.obj["verbose"] = verbose


def _execute(options: dict, action: Callable[[SweepSession], None]) -> None:
    """
    Set up configuration, logging and the Spotify client, then run `action`.

    Args:
        options: CLI options from the click context.
        action: Operation to run against the session.

    Raises:
        SystemExit: Exit code 1 on failure in quiet mode, 130 on Ctrl-C.
        Exception: Any failure, re-raised when not in quiet mode.
    """
    quiet = options["quiet"]
    try:
        config = load_config(options["config_path"])
        setup_logging(config.output.log_directory, verbose=options["verbose"])

        client = SpotifyClient.from_config(config.spotify)
        session = SweepSession(client, config.sweeper)
        action(session)

    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)

    except Exception as e:
        if not quiet:
            if isinstance(e, SpotSweeperError):
                logger.error(f"{type(e).__name__}: {e.message}")
                if e.details:
                    logger.debug(f"Details: {e.details}")
            raise
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    finally:
        shutdown_logging()


@cli.command()
@click.pass_obj
def run(options: dict) -> None:
    """Clean configured playlists against recent plays and log them."""
    def action(session: SweepSession) -> None:
        summary = session.run()
        click.echo(format_summary(summary))

    _execute(options, action)


@cli.command()
@click.argument("name")
@click.option(
    "--against",
    type=click.Choice([AGAINST_RECENT, AGAINST_HISTORY]),
    default=AGAINST_RECENT,
    show_default=True,
    help="Reference set: last 50 plays, or the whole history playlist"
)
@click.pass_obj
def clean(options: dict, name: str, against: str) -> None:
    """Remove tracks already heard from playlist NAME."""
    def action(session: SweepSession) -> None:
        removed = session.clean(session.playlist_by_name(name), against)
        click.echo(f"{name}: removed {len(removed)} tracks")

    _execute(options, action)


@cli.command()
@click.argument("name")
@click.pass_obj
def dedup(options: dict, name: str) -> None:
    """Remove repeated artist + title from playlist NAME, keeping the first."""
    def action(session: SweepSession) -> None:
        removed = session.dedup(session.playlist_by_name(name))
        click.echo(f"{name}: removed {len(removed)} duplicates")

    _execute(options, action)


@cli.command()
@click.argument("name")
@click.option(
    "--cap",
    type=click.IntRange(min=0),
    default=None,
    help="Maximum size (default: sweeper.history_cap)"
)
@click.pass_obj
def trim(options: dict, name: str, cap: Optional[int]) -> None:
    """Remove tracks past the cap from the end of playlist NAME."""
    def action(session: SweepSession) -> None:
        batches = session.trim(session.playlist_by_name(name), cap)
        click.echo(f"{name}: trimmed {sum(len(b) for b in batches)} tracks")

    _execute(options, action)


@cli.command("log-recent")
@click.pass_obj
def log_recent(options: dict) -> None:
    """Move recent plays to the top of the history playlist."""
    def action(session: SweepSession) -> None:
        logged = session.log_recent()
        click.echo(f"{session.settings.history_playlist}: logged {len(logged)} plays")

    _execute(options, action)


@cli.command()
@click.argument("name")
@click.pass_obj
def collect(options: dict, name: str) -> None:
    """Add recent plays to playlist NAME, skipping tracks it already has."""
    def action(session: SweepSession) -> None:
        added = session.collect(session.playlist_by_name(name))
        click.echo(f"{name}: added {len(added)} tracks")

    _execute(options, action)


@cli.command()
@click.argument("a")
@click.argument("b")
@click.pass_obj
def diff(options: dict, a: str, b: str) -> None:
    """List tracks of playlist A that match nothing in playlist B."""
    def action(session: SweepSession) -> None:
        for line in format_tracks(session.diff(session.playlist_by_name(a), session.playlist_by_name(b))):
            click.echo(line)

    _execute(options, action)


@cli.command()
@click.pass_obj
def playlists(options: dict) -> None:
    """List your playlists as 'uri name'."""
    def action(session: SweepSession) -> None:
        for playlist in session.playlists():
            click.echo(f"{playlist.uri} {playlist.name}")

    _execute(options, action)


def main() -> None:
    """Entry point for the `sweep` console script."""
    cli()


if __name__ == "__main__":
    main()
