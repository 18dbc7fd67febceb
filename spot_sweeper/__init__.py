"""
spot-sweeper: Keep Spotify playlists free of tracks you have already heard.

Architecture:
    core/       - Configuration, logging, exceptions
    spotify/    - spotipy-backed client and immutable models
    sweeper/    - Reconciliation engine: pagination, fuzzy identity,
                  batched positional removal, trimming, deduplication
    cli.py      - Command-line interface

Usage:
    Command Line:
        sweep run                         # Clean configured playlists, log plays
        sweep clean "Drive Mix"           # Remove recently heard tracks
        sweep clean "Drive Mix" --against history
        sweep dedup "Weekly Playlist"     # Remove repeated artist + title
        sweep trim "Recently Played" --cap 2000

    Python API:
        from spot_sweeper.core import load_config, setup_logging
        from spot_sweeper.spotify import SpotifyClient
        from spot_sweeper.sweeper import SweepSession

        config = load_config()
        setup_logging(config.output.log_directory)
        session = SweepSession(SpotifyClient.from_config(config.spotify), config.sweeper)
        session.run()

Dependencies:
    - spotipy: Spotify API client
    - rich-click: CLI framework with colored help
    - pyyaml: Configuration file parsing
    - python-dotenv: Credentials from .env
    - colorama, tqdm: Console logging
"""

__version__ = "0.1.0"
__author__ = "spot-sweeper"
__license__ = "MIT"

from spot_sweeper.core import (
    Config,
    ConcurrencyConflict,
    ConfigError,
    NotFound,
    SpotifyError,
    SpotSweeperError,
    TransportFailure,
    Unauthorized,
    get_logger,
    load_config,
    setup_logging,
)
from spot_sweeper.spotify import Collection, SpotifyClient, Track

__all__ = [
    "__version__",
    "Config",
    "load_config",
    "setup_logging",
    "get_logger",
    "SpotSweeperError",
    "ConfigError",
    "SpotifyError",
    "TransportFailure",
    "ConcurrencyConflict",
    "NotFound",
    "Unauthorized",
    "SpotifyClient",
    "Track",
    "Collection",
]
