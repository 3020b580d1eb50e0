"""Error types shared across the game and leaderboard layers."""


class PopcornError(Exception):
    """Base class for all game errors."""


class StoreUnavailable(PopcornError):
    """The remote document store could not be read or written."""


class RaceLost(PopcornError):
    """A leaderboard write could not be verified after all attempts.

    Another client kept overwriting the shared document between our
    write and the verification read.
    """


class ValidationError(PopcornError):
    """Player input is not good enough to start a session."""
