"""Read-only statistics over finished and running sessions."""
import logging
from typing import List, Tuple

from sqlalchemy import and_, case, func
from sqlalchemy.orm import Session

from spellclash.exceptions import NotFoundError
from spellclash.models.game_models import PlayerStats, StrugglingWord
from spellclash.models.models import (
    HangmanSession,
    MissingLetterSession,
    PracticeSession,
    Word,
    WordAttempt,
)

logger = logging.getLogger(__name__)


class StatsService:
    """Service for player progress statistics."""

    def __init__(self, db: Session):
        """Initialize the service with a database session."""
        self.db = db

    def get_session_results(self, session_id: int) -> Tuple[PracticeSession, List[WordAttempt]]:
        """Get a practice session with its attempts."""
        session = self.db.get(PracticeSession, session_id)
        if session is None:
            raise NotFoundError(f"Practice session {session_id} not found")

        attempts = (
            self.db.query(WordAttempt)
            .filter(WordAttempt.session_id == session_id)
            .order_by(WordAttempt.id)
            .all()
        )
        return session, attempts

    def get_recent_sessions(self, player_id: int, limit: int = 10) -> List[PracticeSession]:
        """Get the player's most recent practice sessions."""
        return (
            self.db.query(PracticeSession)
            .filter(PracticeSession.player_id == player_id)
            .order_by(PracticeSession.started_at.desc(), PracticeSession.id.desc())
            .limit(limit)
            .all()
        )

    def get_total_points(self, player_id: int) -> int:
        """Get the points earned in the player's completed practice sessions."""
        total = (
            self.db.query(func.coalesce(func.sum(PracticeSession.points_earned), 0))
            .filter(
                and_(
                    PracticeSession.player_id == player_id,
                    PracticeSession.completed_at.isnot(None),
                )
            )
            .scalar()
        )
        return int(total or 0)

    def get_total_sessions_count(self, player_id: int) -> int:
        """Count the player's sessions across all modes."""
        total = 0
        for model in (PracticeSession, HangmanSession, MissingLetterSession):
            total += self.db.query(model).filter(model.player_id == player_id).count()
        return total

    def get_struggling_words(
        self,
        player_id: int,
        max_success_rate: float = 0.6,
        min_attempts: int = 3,
    ) -> List[StrugglingWord]:
        """Get practiced words the player gets right less often than ``max_success_rate``."""
        correct = func.sum(case((WordAttempt.is_correct == True, 1), else_=0))
        rows = (
            self.db.query(
                WordAttempt.word_id,
                Word.text,
                func.count(WordAttempt.id),
                correct,
            )
            .join(PracticeSession, PracticeSession.id == WordAttempt.session_id)
            .outerjoin(Word, Word.id == WordAttempt.word_id)
            .filter(PracticeSession.player_id == player_id)
            .group_by(WordAttempt.word_id, Word.text)
            .having(func.count(WordAttempt.id) >= min_attempts)
            .all()
        )

        words = [
            StrugglingWord(word_id=word_id, text=text or "", attempts=attempts, correct=int(correct or 0))
            for word_id, text, attempts, correct in rows
        ]
        struggling = [word for word in words if word.success_rate < max_success_rate]
        struggling.sort(key=lambda word: (word.success_rate, -word.attempts))
        logger.debug(f"Player {player_id} struggles with {len(struggling)} words")
        return struggling

    def get_player_stats(self, player_id: int) -> PlayerStats:
        """Get overall practice statistics for a player."""
        attempts, correct, unique_words = (
            self.db.query(
                func.count(WordAttempt.id),
                func.sum(case((WordAttempt.is_correct == True, 1), else_=0)),
                func.count(func.distinct(WordAttempt.word_id)),
            )
            .join(PracticeSession, PracticeSession.id == WordAttempt.session_id)
            .filter(PracticeSession.player_id == player_id)
            .one()
        )
        sessions = self.db.query(PracticeSession).filter(PracticeSession.player_id == player_id).count()

        return PlayerStats(
            total_sessions=sessions,
            total_words_practiced=attempts or 0,
            total_correct=int(correct or 0),
            total_points=self.get_total_points(player_id),
            unique_words_attempted=unique_words or 0,
        )
