"""Read access to list words and per-player word history."""
import logging
from typing import Dict, List, Protocol, Sequence

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from spellclash.models.game_models import WordPerformance, WordSnapshot
from spellclash.models.models import PracticeSession, Word, WordAttempt

logger = logging.getLogger(__name__)


class WordSource(Protocol):
    """What the engines need from list storage."""

    def get_words(self, list_id: int) -> List[WordSnapshot]:
        ...

    def get_word_performance(self, player_id: int, word_ids: Sequence[int]) -> Dict[int, WordPerformance]:
        ...


class DatabaseWordSource:
    """Word source backed by the ``words`` and ``word_attempts`` tables."""

    def __init__(self, db: Session):
        """Initialize the source with a database session."""
        self.db = db

    def get_words(self, list_id: int) -> List[WordSnapshot]:
        """Get the words of a list ordered by position."""
        words = (
            self.db.query(Word)
            .filter(Word.list_id == list_id)
            .order_by(Word.position, Word.id)
            .all()
        )
        return [WordSnapshot.from_word(word) for word in words]

    def get_word_performance(self, player_id: int, word_ids: Sequence[int]) -> Dict[int, WordPerformance]:
        """Get attempt and correct counts for the player's practice history."""
        if not word_ids:
            return {}

        rows = (
            self.db.query(
                WordAttempt.word_id,
                func.count(WordAttempt.id),
                func.sum(case((WordAttempt.is_correct == True, 1), else_=0)),
            )
            .join(PracticeSession, PracticeSession.id == WordAttempt.session_id)
            .filter(
                PracticeSession.player_id == player_id,
                WordAttempt.word_id.in_(list(word_ids)),
            )
            .group_by(WordAttempt.word_id)
            .all()
        )
        return {
            word_id: WordPerformance(attempts=attempts, correct=int(correct or 0))
            for word_id, attempts, correct in rows
        }
