"""
Exception classes for spot-sweeper.

This module defines all custom exceptions used throughout the application.
The sweeping engine performs no local recovery: every failure below is raised
where it happens and surfaces to the CLI, which decides how to report it.

Exception Hierarchy:
    SpotSweeperError (base)
        ConfigError - Configuration file issues
        SpotifyError - Spotify API issues
            TransportFailure - Network or remote-side failure
            ConcurrencyConflict - Stale snapshot token on a mutating call
            NotFound - Named playlist absent
            Unauthorized - Mutating a playlist the user does not own
"""


class SpotSweeperError(Exception):
    """
    Base exception for all spot-sweeper errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g., playlist id,
                 snapshot token, HTTP status).

    Example:
        try:
            session.run()
        except SpotSweeperError as e:
            logger.error(f"Sweep failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description that will be shown to the user.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'playlist_id': Spotify playlist ID involved in the error
                     - 'snapshot_id': Snapshot token sent with a mutating call
                     - 'original_error': The underlying exception if wrapping another error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(SpotSweeperError):
    """
    Raised when there's an issue with the configuration file.

    This is a CRITICAL error that should stop program execution.

    Common causes:
        - config.yaml not found
        - config.yaml has invalid YAML syntax
        - Spotify credentials missing from both config.yaml and the environment
        - Invalid field values (e.g., non-positive batch size)

    Example:
        raise ConfigError(
            "'sweeper.batch_size' must be a positive integer",
            details={'field': 'sweeper.batch_size', 'value': 0}
        )
    """
    pass


class SpotifyError(SpotSweeperError):
    """
    Raised when there's an issue with the Spotify API.

    Attributes:
        is_auth_error: True if this is an authentication error (CRITICAL).
        is_rate_limit: True if Spotify answered 429. Never retried here;
                       the caller sees the failure.

    Example:
        raise SpotifyError(
            "Failed to fetch playlist items: bad request",
            details={'playlist_id': playlist_id, 'http_status': 400}
        )
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        is_auth_error: bool = False,
        is_rate_limit: bool = False
    ) -> None:
        """
        Initialize Spotify error with additional flags.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context.
            is_auth_error: Set to True if this is an authentication failure.
            is_rate_limit: Set to True if this is a rate limit error.
        """
        super().__init__(message, details)
        self.is_auth_error = is_auth_error
        self.is_rate_limit = is_rate_limit


class TransportFailure(SpotifyError):
    """
    Raised when a request could not complete: connection refused, timeout,
    or a 5xx from Spotify.

    Not retried. Pagination in progress is abandoned and the error propagates.
    """
    pass


class ConcurrencyConflict(SpotifyError):
    """
    Raised when a mutating call was sent with a stale snapshot token.

    Every successful mutation invalidates the playlist's snapshot id.
    The run fails rather than silently re-fetching and re-attempting,
    since the positions computed against the old snapshot may no longer
    point at the intended tracks.

    Example:
        raise ConcurrencyConflict(
            "Snapshot token is stale for playlist 'Drive Mix'",
            details={'playlist_id': '37i9...', 'snapshot_id': 'MTAsZD...'}
        )
    """
    pass


class NotFound(SpotifyError):
    """
    Raised when a named playlist (or other remote entity) does not exist.
    """
    pass


class Unauthorized(SpotifyError):
    """
    Raised before removing tracks from a playlist the current user does not own.

    This is a precondition check performed locally, not an HTTP error mapping,
    so that no partial mutation is ever attempted.
    """
    pass
