"""Practice mode: type each word of the list from its audio."""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from spellclash import monitoring
from spellclash.exceptions import ConflictError, InvalidInputError
from spellclash.models.base import as_utc
from spellclash.models.game_models import (
    AnswerResult,
    GameMode,
    PracticeSummary,
    PracticeWordView,
    WordSnapshot,
)
from spellclash.models.models import PracticeSession, PracticeState, WordAttempt
from spellclash.services.scoring import practice_score
from spellclash.services.word_sequence import WordSequenceEngine

logger = logging.getLogger(__name__)


class PracticeEngine(WordSequenceEngine):
    """Engine for timed spelling practice."""

    mode = GameMode.PRACTICE
    cursor_model = PracticeState

    def _select_words(self, player_id: int, words: List[WordSnapshot]) -> List[WordSnapshot]:
        """Use every word of a short list, a weighted sample of a long one."""
        if len(words) <= self.game_settings.weighted_selection_threshold:
            return self.selector.select(words)

        performance = self.word_source.get_word_performance(player_id, [word.id for word in words])
        logger.info(
            f"List has {len(words)} words, drawing {self.game_settings.practice_word_count} "
            f"weighted by history of player {player_id}"
        )
        return self.selector.select(
            words,
            count=self.game_settings.practice_word_count,
            performance=performance,
        )

    def _create_session(self, player_id: int, list_id: int, words: List[WordSnapshot], now: datetime) -> PracticeSession:
        return PracticeSession(
            player_id=player_id,
            list_id=list_id,
            started_at=now,
            total_words=len(words),
            correct_words=0,
            points_earned=0,
        )

    def _initial_cursor_fields(self, now: datetime) -> Dict[str, Any]:
        return {"correct_count": 0, "start_time": now}

    def _on_start(self, cursor: PracticeState, now: datetime) -> None:
        self.store.ensure_word_timing(cursor.player_id, cursor.session_id, 0, now)

    def _on_cleanup(self, cursor: PracticeState) -> None:
        removed = self.store.delete_word_timings(cursor.player_id, cursor.session_id)
        logger.debug(f"Removed {removed} word timings of practice session {cursor.session_id}")

    def _finalize_session(self, cursor: PracticeState, now: datetime) -> PracticeSession:
        """Write the session totals from its attempt rows, once."""
        session = self.db.get(PracticeSession, cursor.session_id)
        if session.completed_at is not None:
            return session

        attempts = self._get_attempts(session.id)
        session.correct_words = sum(1 for attempt in attempts if attempt.is_correct)
        session.points_earned = sum(attempt.points_earned for attempt in attempts)
        session.completed_at = now
        monitoring.sessions_completed.labels(mode=self.mode.value).inc()
        logger.info(
            f"Practice session {session.id} finished: {session.correct_words}/{session.total_words} correct, "
            f"{session.points_earned} points"
        )
        return session

    def _summarize(self, session: PracticeSession) -> PracticeSummary:
        accuracy = 0.0
        if session.total_words > 0:
            accuracy = session.correct_words / session.total_words * 100
        return PracticeSummary(
            session_id=session.id,
            total_words=session.total_words,
            correct_words=session.correct_words,
            points_earned=session.points_earned,
            accuracy=accuracy,
            attempts=self._get_attempts(session.id),
        )

    def _get_attempts(self, session_id: int) -> List[WordAttempt]:
        return (
            self.db.query(WordAttempt)
            .filter(WordAttempt.session_id == session_id)
            .order_by(WordAttempt.id)
            .all()
        )

    def get_current(self, player_id: int) -> PracticeWordView:
        """Get the word to present, recording when it was first shown."""
        now = self.clock()
        with self.store.transaction(player_id):
            cursor = self._load_cursor(player_id)
            if cursor.is_finished:
                raise self._not_found(player_id)

            presented_at = self.store.ensure_word_timing(player_id, cursor.session_id, cursor.current_index, now)
            return PracticeWordView(
                session_id=cursor.session_id,
                word=cursor.words[cursor.current_index],
                index=cursor.current_index,
                total=cursor.total_words,
                correct_so_far=cursor.correct_count,
                points_so_far=cursor.points_so_far,
                presented_at=presented_at,
            )

    def submit_answer(self, player_id: int, answer: str, word_index: Optional[int] = None) -> AnswerResult:
        """Check an answer for the current word and move on.

        ``word_index`` is the index the player was shown; a submission for a
        word the cursor has already left is rejected with ``ConflictError``.
        """
        if not isinstance(answer, str):
            monitoring.error_count.labels(error_type="invalid_input").inc()
            raise InvalidInputError("Answer must be text")

        now = self.clock()
        with self.store.transaction(player_id):
            cursor = self._load_cursor(player_id)
            if cursor.is_finished:
                raise self._not_found(player_id)
            if word_index is not None and word_index != cursor.current_index:
                monitoring.error_count.labels(error_type="stale_answer").inc()
                logger.warning(
                    f"Player {player_id} answered word {word_index} but practice is at {cursor.current_index}"
                )
                raise ConflictError(f"Word {word_index} was already answered", player_id)

            word = cursor.words[cursor.current_index]
            started_at = self.store.get_word_timing(player_id, cursor.session_id, cursor.current_index)
            if started_at is None:
                started_at = as_utc(cursor.updated_at)
            time_taken_ms = max(int((now - started_at).total_seconds() * 1000), 0)

            is_correct = answer.strip().lower() == word.text.strip().lower()
            points = practice_score(word.difficulty_level, time_taken_ms) if is_correct else 0

            self.db.add(
                WordAttempt(
                    session_id=cursor.session_id,
                    word_id=word.id,
                    attempt_text=answer.strip(),
                    is_correct=is_correct,
                    time_taken_ms=time_taken_ms,
                    points_earned=points,
                    attempted_at=now,
                )
            )

            cursor.current_index += 1
            if is_correct:
                cursor.correct_count += 1
            cursor.points_so_far += points
            cursor.updated_at = now

            if cursor.is_finished:
                self.db.flush()
                self._finalize_session(cursor, now)
            else:
                self.store.ensure_word_timing(player_id, cursor.session_id, cursor.current_index, now)

            result = AnswerResult(
                is_correct=is_correct,
                points=points,
                correct_word=word.text,
                time_taken_ms=time_taken_ms,
                current_index=cursor.current_index,
                total_words=cursor.total_words,
                correct_so_far=cursor.correct_count,
                points_so_far=cursor.points_so_far,
                session_complete=cursor.is_finished,
            )

        monitoring.answers.labels(mode=self.mode.value, result="correct" if is_correct else "wrong").inc()
        monitoring.answer_duration.observe(time_taken_ms / 1000)
        if points:
            monitoring.points_awarded.labels(mode=self.mode.value).inc(points)
        logger.info(
            f"Player {player_id} answered word {word.id}: correct={is_correct}, "
            f"{points} points in {time_taken_ms} ms"
        )
        return result

    def submit(self, player_id: int, value: str) -> AnswerResult:
        return self.submit_answer(player_id, value)

    def advance(self, player_id: int, from_index: Optional[int] = None) -> int:
        """Skip the current word, recording it as a wrong answer.

        A stale ``from_index`` leaves the session where it is.
        """
        cursor = self._load_cursor(player_id)
        if from_index is not None and from_index != cursor.current_index:
            logger.info(f"Ignoring repeated skip of word {from_index} for player {player_id}")
            return cursor.current_index
        if cursor.is_finished:
            return cursor.current_index
        return self.submit_answer(player_id, "", word_index=cursor.current_index).current_index
