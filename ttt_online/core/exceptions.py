"""Custom exceptions. Every layer raises a subclass of GameError so callers can catch one top-level type."""


class GameError(Exception):
    """Top-level exception for anything this package raises on purpose."""


class UnauthenticatedError(GameError):
    """No caller identity was supplied."""


class PermissionDeniedError(GameError):
    """Caller is known but not allowed to perform the action (self-join, full game, non-host reset)."""


class InvalidMoveError(GameError):
    """Out of turn, occupied cell, finished game or out-of-range coordinates."""


class GameStateError(GameError):
    """Stored state cannot be turned into a valid game."""


class InvalidRequestError(GameError):
    """Request payload failed validation."""


class RepositoryError(GameError):
    """Persistence layer could not do what was asked."""


class GameNotFoundError(RepositoryError):
    """No record for the requested game id."""


class StaleStateError(RepositoryError):
    """Conditional write lost against a concurrent writer."""
