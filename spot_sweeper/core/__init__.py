"""
Core module for spot-sweeper.

This module provides the foundational components used throughout the application:
    - exceptions: Custom exception classes for error handling
    - config: Configuration loading and validation
    - logger: Logging system with console and file outputs

Usage:
    from spot_sweeper.core import (
        Config, load_config,
        setup_logging, get_logger,
        SpotSweeperError, ConfigError, SpotifyError
    )
"""

from spot_sweeper.core.config import (
    Config,
    OutputConfig,
    SpotifyConfig,
    SweeperConfig,
    load_config,
)
from spot_sweeper.core.exceptions import (
    ConcurrencyConflict,
    ConfigError,
    NotFound,
    SpotifyError,
    SpotSweeperError,
    TransportFailure,
    Unauthorized,
)
from spot_sweeper.core.logger import (
    get_logger,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    # Config
    "Config",
    "SpotifyConfig",
    "SweeperConfig",
    "OutputConfig",
    "load_config",
    # Exceptions
    "SpotSweeperError",
    "ConfigError",
    "SpotifyError",
    "TransportFailure",
    "ConcurrencyConflict",
    "NotFound",
    "Unauthorized",
    # Logger
    "setup_logging",
    "get_logger",
    "shutdown_logging",
]
