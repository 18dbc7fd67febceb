"""
Configuration management for spot-sweeper.

This module handles loading, validating, and providing access to the
application configuration stored in config.yaml.

The configuration file contains:
    - Spotify API credentials and OAuth settings
    - The playlists to clean and the history playlist to keep bounded
    - Tuning constants for batching, pagination and playback handling
    - Log output directory

Spotify credentials may also come from the environment (SPOTIFY_CLIENT_ID,
SPOTIFY_CLIENT_SECRET, SPOTIFY_REDIRECT_URI), optionally via a .env file.
Environment values take precedence over config.yaml.

Example config.yaml:
    spotify:
      client_id: "your_client_id_here"
      client_secret: "your_client_secret_here"
      redirect_uri: "http://127.0.0.1:8888/callback"
      token_cache: ".spotify_token"
      requests_timeout: 10

    sweeper:
      playlists: ["Drive Mix", "Weekly Playlist", "Home Mix"]
      history_playlist: "Recently Played"
      history_cap: 2000
      batch_size: 100
      page_size: 100
      playing_window: 11
      no_title_match_artists: []

    output:
      log_directory: "~/.spot-sweeper/logs"
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from spot_sweeper.core.exceptions import ConfigError


# Default configuration file name (looked up in current working directory)
CONFIG_FILENAME = "config.yaml"

DEFAULT_REDIRECT_URI = "http://127.0.0.1:8888/callback"
DEFAULT_TOKEN_CACHE = ".spotify_token"
DEFAULT_HISTORY_PLAYLIST = "Recently Played"
DEFAULT_LOG_DIRECTORY = "~/.spot-sweeper/logs"

# Spotify accepts at most 100 items per playlist mutation and per page
MAX_BATCH_SIZE = 100
MAX_PAGE_SIZE = 100

ENV_OVERRIDES = {
    "client_id": "SPOTIFY_CLIENT_ID",
    "client_secret": "SPOTIFY_CLIENT_SECRET",
    "redirect_uri": "SPOTIFY_REDIRECT_URI",
}


@dataclass(frozen=True)
class SpotifyConfig:
    """
    Spotify API credentials configuration.

    Attributes:
        client_id: The Spotify application client ID.
        client_secret: The Spotify application client secret.
        redirect_uri: OAuth redirect URI registered for the application.
        token_cache: Path of the file spotipy uses to cache the OAuth token.
        requests_timeout: Seconds before an HTTP request is abandoned.
    """
    client_id: str
    client_secret: str
    redirect_uri: str
    token_cache: Path
    requests_timeout: float


@dataclass(frozen=True)
class SweeperConfig:
    """
    Sweeping behavior configuration.

    Attributes:
        playlists: Names of the playlists cleaned by `sweep run`.
        history_playlist: Name of the playlist that logs recent plays.
                          Created on first use if missing.
        history_cap: Maximum size of the history playlist. Older entries
                     beyond this position are trimmed.
        batch_size: Maximum number of positions per removal request.
        page_size: Number of tracks requested per page when fetching.
        playing_window: How many leading tracks of a currently playing
                        playlist are checked when removing matches.
        no_title_match_artists: Artist ids whose tracks are never matched
                                by artist+title alone.
    """
    playlists: tuple[str, ...]
    history_playlist: str
    history_cap: int
    batch_size: int
    page_size: int
    playing_window: int
    no_title_match_artists: frozenset[str]


@dataclass(frozen=True)
class OutputConfig:
    """
    Output configuration.

    Attributes:
        log_directory: Directory where per-run log files are written.
    """
    log_directory: Path


@dataclass(frozen=True)
class Config:
    """
    Complete application configuration.

    Created by load_config() and treated as immutable (frozen dataclass).

    Attributes:
        spotify: Spotify API credentials.
        sweeper: Sweeping behavior settings.
        output: Output settings.
    """
    spotify: SpotifyConfig
    sweeper: SweeperConfig
    output: OutputConfig


def load_config(config_path: Path | None = None) -> Config:
    """
    Load and validate configuration from config.yaml.

    Args:
        config_path: Optional explicit path to config file.
                     If None, looks for config.yaml in current working directory.

    Returns:
        Config: A frozen dataclass containing all configuration values.

    Raises:
        ConfigError: If the config file is not found, has invalid YAML syntax,
                     is missing required fields, or contains invalid values.

    Behavior:
        1. Load .env into the process environment (existing variables win)
        2. Locate and parse the YAML file
        3. Validate sections and apply defaults
        4. Apply environment overrides for Spotify credentials
        5. Return frozen Config object
    """
    load_dotenv()

    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME

    if not config_path.exists():
        raise ConfigError(
            f"Configuration file not found: {config_path}",
            details={"file_path": str(config_path)}
        )

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            content = f.read()
    except IOError as e:
        raise ConfigError(
            f"Failed to read configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    try:
        raw_config = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    if raw_config is None:
        raw_config = {}

    if not isinstance(raw_config, dict):
        raise ConfigError(
            "Configuration file must contain a YAML dictionary",
            details={"file_path": str(config_path)}
        )

    for section in ("spotify", "sweeper", "output"):
        if raw_config.get(section) is not None and not isinstance(raw_config[section], dict):
            raise ConfigError(
                f"Section '{section}' must be a dictionary",
                details={"section": section}
            )

    return Config(
        spotify=_parse_spotify_config(raw_config.get("spotify") or {}),
        sweeper=_parse_sweeper_config(raw_config.get("sweeper") or {}),
        output=_parse_output_config(raw_config.get("output") or {})
    )


def _parse_spotify_config(spotify_section: dict[str, Any]) -> SpotifyConfig:
    """
    Parse the Spotify section, letting environment variables override it.

    Raises:
        ConfigError: If client_id or client_secret is missing from both sources.
    """
    values: dict[str, str] = {}
    for field_name, env_var in ENV_OVERRIDES.items():
        value = os.getenv(env_var) or spotify_section.get(field_name) or ""
        if not isinstance(value, str):
            raise ConfigError(
                f"'spotify.{field_name}' must be a string",
                details={"field": f"spotify.{field_name}"}
            )
        values[field_name] = value.strip()

    for required in ("client_id", "client_secret"):
        if not values[required]:
            raise ConfigError(
                f"'spotify.{required}' must be set in config.yaml "
                f"or via {ENV_OVERRIDES[required]}",
                details={"field": f"spotify.{required}"}
            )

    token_cache = spotify_section.get("token_cache", DEFAULT_TOKEN_CACHE)
    if not isinstance(token_cache, str) or not token_cache.strip():
        raise ConfigError(
            "'spotify.token_cache' must be a non-empty string",
            details={"field": "spotify.token_cache"}
        )

    timeout = spotify_section.get("requests_timeout", 10)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ConfigError(
            "'spotify.requests_timeout' must be a positive number",
            details={"field": "spotify.requests_timeout", "value": timeout}
        )

    return SpotifyConfig(
        client_id=values["client_id"],
        client_secret=values["client_secret"],
        redirect_uri=values["redirect_uri"] or DEFAULT_REDIRECT_URI,
        token_cache=Path(token_cache.strip()).expanduser(),
        requests_timeout=float(timeout)
    )


def _parse_sweeper_config(sweeper_section: dict[str, Any]) -> SweeperConfig:
    """
    Parse and validate the sweeper section, applying defaults.

    Raises:
        ConfigError: If a list field is not a list of strings or a numeric
                     field is out of range.
    """
    playlists = _string_list(sweeper_section, "playlists")
    artists = _string_list(sweeper_section, "no_title_match_artists")

    history_playlist = sweeper_section.get("history_playlist", DEFAULT_HISTORY_PLAYLIST)
    if not isinstance(history_playlist, str) or not history_playlist.strip():
        raise ConfigError(
            "'sweeper.history_playlist' must be a non-empty string",
            details={"field": "sweeper.history_playlist"}
        )

    return SweeperConfig(
        playlists=tuple(playlists),
        history_playlist=history_playlist.strip(),
        history_cap=_positive_int(sweeper_section, "history_cap", 2000),
        batch_size=_positive_int(sweeper_section, "batch_size", MAX_BATCH_SIZE, MAX_BATCH_SIZE),
        page_size=_positive_int(sweeper_section, "page_size", MAX_PAGE_SIZE, MAX_PAGE_SIZE),
        playing_window=_positive_int(sweeper_section, "playing_window", 11),
        no_title_match_artists=frozenset(artists)
    )


def _parse_output_config(output_section: dict[str, Any]) -> OutputConfig:
    """Parse the output section. Expands ~ and makes the path absolute."""
    directory = output_section.get("log_directory", DEFAULT_LOG_DIRECTORY)

    if not isinstance(directory, str) or not directory.strip():
        raise ConfigError(
            "'output.log_directory' must be a non-empty string",
            details={"field": "output.log_directory"}
        )

    return OutputConfig(log_directory=Path(directory.strip()).expanduser().resolve())


def _string_list(section: dict[str, Any], name: str) -> list[str]:
    raw = section.get(name)
    if raw is None:
        return []
    if not isinstance(raw, list) or not all(isinstance(v, str) and v.strip() for v in raw):
        raise ConfigError(
            f"'sweeper.{name}' must be a list of non-empty strings",
            details={"field": f"sweeper.{name}"}
        )
    return [v.strip() for v in raw]


def _positive_int(
    section: dict[str, Any],
    name: str,
    default: int,
    maximum: int | None = None
) -> int:
    raw = section.get(name)
    if raw is None:
        return default
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 1:
        raise ConfigError(
            f"'sweeper.{name}' must be a positive integer",
            details={"field": f"sweeper.{name}", "value": raw}
        )
    if maximum is not None and raw > maximum:
        raise ConfigError(
            f"'sweeper.{name}' cannot exceed {maximum}",
            details={"field": f"sweeper.{name}", "value": raw}
        )
    return raw
