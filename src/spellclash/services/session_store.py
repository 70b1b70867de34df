"""Durable per-player cursors and practice word timings."""
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional, Sequence, Type

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from spellclash import monitoring
from spellclash.exceptions import ConflictError
from spellclash.models.base import as_utc
from spellclash.models.game_models import WordSnapshot
from spellclash.models.models import CursorMixin, PracticeState, WordTiming

logger = logging.getLogger(__name__)


class SessionStore:
    """Keyed storage for the single live cursor each player has per mode.

    Cursor and game rows are versioned, so every write is a compare-and-swap:
    a request that loaded a row before a concurrent request changed it fails
    with ``ConflictError`` instead of overwriting the newer state.
    """

    def __init__(self, db: Session):
        """Initialize the store with a database session."""
        self.db = db

    @contextmanager
    def transaction(self, player_id: Optional[int] = None) -> Iterator[None]:
        """Commit the block as one unit of work, rolling back on any error."""
        try:
            yield
            self.db.commit()
        except (StaleDataError, IntegrityError) as e:
            self.db.rollback()
            monitoring.cursor_conflicts.inc()
            logger.warning(f"Concurrent update rejected for player {player_id}: {e}")
            raise ConflictError(f"Game state for player {player_id} changed concurrently", player_id) from e
        except Exception:
            self.db.rollback()
            raise

    def get_cursor(self, model: Type[CursorMixin], player_id: int) -> Optional[CursorMixin]:
        """Get the player's live cursor for a mode."""
        return self.db.get(model, player_id)

    def upsert_cursor(
        self,
        model: Type[CursorMixin],
        player_id: int,
        session_id: int,
        words: List[WordSnapshot],
        now: datetime,
        **fields,
    ) -> CursorMixin:
        """Point the player's cursor at a new session, replacing any previous one."""
        cursor = self.get_cursor(model, player_id)
        if cursor is None:
            cursor = model(player_id=player_id)
            self.db.add(cursor)
        else:
            logger.info(
                f"Replacing {model.__tablename__} cursor of player {player_id} "
                f"(session {cursor.session_id} -> {session_id})"
            )

        cursor.session_id = session_id
        cursor.words = words
        cursor.current_index = 0
        cursor.points_so_far = 0
        cursor.updated_at = now
        for key, value in fields.items():
            setattr(cursor, key, value)

        self.db.flush()
        return cursor

    def delete_cursor(self, model: Type[CursorMixin], player_id: int) -> bool:
        """Delete the player's cursor for a mode."""
        cursor = self.get_cursor(model, player_id)
        if cursor is None:
            return False
        self.db.delete(cursor)
        self.db.flush()
        return True

    def get_word_timing(self, player_id: int, session_id: int, word_index: int) -> Optional[datetime]:
        """Get when a practice word was first presented."""
        timing = (
            self.db.query(WordTiming)
            .filter(
                WordTiming.player_id == player_id,
                WordTiming.session_id == session_id,
                WordTiming.word_index == word_index,
            )
            .first()
        )
        return as_utc(timing.started_at) if timing else None

    def ensure_word_timing(self, player_id: int, session_id: int, word_index: int, now: datetime) -> datetime:
        """Record the presentation time of a word unless one is already stored."""
        started_at = self.get_word_timing(player_id, session_id, word_index)
        if started_at is not None:
            return started_at

        self.db.add(
            WordTiming(
                player_id=player_id,
                session_id=session_id,
                word_index=word_index,
                started_at=now,
            )
        )
        self.db.flush()
        return now

    def delete_word_timings(self, player_id: int, session_id: int) -> int:
        """Delete all word timings of a practice session."""
        return (
            self.db.query(WordTiming)
            .filter(
                WordTiming.player_id == player_id,
                WordTiming.session_id == session_id,
            )
            .delete(synchronize_session=False)
        )

    def sweep_stale_cursors(self, models: Sequence[Type[CursorMixin]], older_than: datetime) -> int:
        """Delete cursors that have not moved since ``older_than``.

        Aggregate session rows are kept as history.
        """
        deleted = 0
        with self.transaction():
            for model in models:
                stale = self.db.query(model).filter(model.updated_at < older_than).all()
                for cursor in stale:
                    if model is PracticeState:
                        self.delete_word_timings(cursor.player_id, cursor.session_id)
                    self.db.delete(cursor)
                deleted += len(stale)
        logger.info(f"Swept {deleted} stale cursors older than {older_than.isoformat()}")
        return deleted
