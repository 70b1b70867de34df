"""Errors raised by the game engines."""
from typing import Optional


class GameError(Exception):
    """Base class for game engine errors."""


class NotFoundError(GameError):
    """No active cursor, unknown word or unknown list."""


class EmptyListError(GameError):
    """The requested list has no words to play."""

    def __init__(self, list_id: int):
        super().__init__(f"List {list_id} has no words")
        self.list_id = list_id


class InvalidInputError(GameError):
    """Malformed guess or answer."""


class ConflictError(GameError):
    """A concurrent request changed the same cursor or game first."""

    def __init__(self, message: str, player_id: Optional[int] = None):
        super().__init__(message)
        self.player_id = player_id
