"""Resumable word-sequence sessions shared by every play mode."""
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Type

from sqlalchemy.orm import Session

from spellclash import monitoring
from spellclash.config import GameSettings, settings
from spellclash.exceptions import EmptyListError, NotFoundError
from spellclash.models.base import utcnow
from spellclash.models.game_models import GameMode, WordSnapshot
from spellclash.models.models import CursorMixin
from spellclash.services.session_store import SessionStore
from spellclash.services.word_selector import WordSelector
from spellclash.services.word_source import DatabaseWordSource, WordSource

logger = logging.getLogger(__name__)


class WordSequenceEngine(ABC):
    """A session that walks a fixed, persisted word order one word at a time.

    Each operation loads the player's cursor from the store, applies the mode's
    transition and persists the result in a single transaction, so no request
    depends on state kept in process memory.
    """

    mode: GameMode
    cursor_model: Type[CursorMixin]

    def __init__(
        self,
        db: Session,
        word_source: Optional[WordSource] = None,
        selector: Optional[WordSelector] = None,
        game_settings: Optional[GameSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the engine with a database session and optional collaborators."""
        self.db = db
        self.store = SessionStore(db)
        self.word_source = word_source or DatabaseWordSource(db)
        self.game_settings = game_settings or settings.game
        self.selector = selector or WordSelector(unattempted_weight=self.game_settings.unattempted_word_weight)
        self.clock = clock or utcnow

    # Mode hooks

    @abstractmethod
    def _create_session(self, player_id: int, list_id: int, words: List[WordSnapshot], now: datetime) -> Any:
        """Build the aggregate session row for a new play-through."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def _finalize_session(self, cursor: CursorMixin, now: datetime) -> Any:
        """Write the session's final aggregate fields once and return the session."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def _summarize(self, session: Any) -> Any:
        """Build the summary returned when the session is completed."""
        raise NotImplementedError("Subclasses must implement this method")

    def _select_words(self, player_id: int, words: List[WordSnapshot]) -> List[WordSnapshot]:
        """Choose and order the words of a new session."""
        return self.selector.select(words)

    def _initial_cursor_fields(self, now: datetime) -> Dict[str, Any]:
        return {}

    def _on_start(self, cursor: CursorMixin, now: datetime) -> None:
        """Called once the new cursor is stored."""

    def _on_cleanup(self, cursor: CursorMixin) -> None:
        """Called before a cursor is replaced or deleted."""

    # Shared operations

    def start(self, player_id: int, list_id: int) -> int:
        """Start a new session over a list, replacing any live one."""
        logger.info(f"Starting {self.mode.value} session for player {player_id} on list {list_id}")
        words = self.word_source.get_words(list_id)
        if not words:
            monitoring.error_count.labels(error_type="empty_list").inc()
            logger.warning(f"List {list_id} has no words, cannot start {self.mode.value}")
            raise EmptyListError(list_id)

        selected = self._select_words(player_id, words)
        now = self.clock()
        with self.store.transaction(player_id):
            previous = self.store.get_cursor(self.cursor_model, player_id)
            if previous is not None:
                self._on_cleanup(previous)

            session = self._create_session(player_id, list_id, selected, now)
            self.db.add(session)
            self.db.flush()
            session_id = session.id

            cursor = self.store.upsert_cursor(
                self.cursor_model,
                player_id,
                session_id,
                selected,
                now,
                **self._initial_cursor_fields(now),
            )
            self._on_start(cursor, now)

        monitoring.sessions_started.labels(mode=self.mode.value).inc()
        logger.info(f"Started {self.mode.value} session {session_id} with {len(selected)} words")
        return session_id

    def complete(self, player_id: int) -> Optional[Any]:
        """Finalize the live session, drop its cursor and return the summary.

        Returns None when the player has no live session.
        """
        now = self.clock()
        with self.store.transaction(player_id):
            cursor = self.store.get_cursor(self.cursor_model, player_id)
            if cursor is None:
                logger.debug(f"No live {self.mode.value} session for player {player_id}, nothing to complete")
                return None

            session = self._finalize_session(cursor, now)
            self._on_cleanup(cursor)
            self.store.delete_cursor(self.cursor_model, player_id)
            summary = self._summarize(session)

        logger.info(f"Completed {self.mode.value} session {summary.session_id} for player {player_id}")
        return summary

    def exit(self, player_id: int) -> None:
        """Leave the game early, keeping everything earned so far."""
        self.complete(player_id)

    def has_active_session(self, player_id: int) -> bool:
        """Check whether the player has a live cursor for this mode."""
        return self.store.get_cursor(self.cursor_model, player_id) is not None

    def _load_cursor(self, player_id: int) -> CursorMixin:
        cursor = self.store.get_cursor(self.cursor_model, player_id)
        if cursor is None:
            raise self._not_found(player_id)
        return cursor

    def _not_found(self, player_id: int) -> NotFoundError:
        monitoring.error_count.labels(error_type="not_found").inc()
        logger.info(f"No active {self.mode.value} session for player {player_id}")
        return NotFoundError(f"No active {self.mode.value} session for player {player_id}")
