"""Per-word games (hangman, missing letter) played over a word sequence."""
import logging
from abc import abstractmethod
from datetime import datetime
from typing import Any, List, Optional, Type

from spellclash import monitoring
from spellclash.models.game_models import GameSessionSummary, WordSnapshot
from spellclash.models.models import CursorMixin, GameSessionMixin, WordGameMixin
from spellclash.services.word_sequence import WordSequenceEngine

logger = logging.getLogger(__name__)


class WordGameEngine(WordSequenceEngine):
    """Engine where every word is its own small game that is won or lost.

    The game row for a word is keyed by ``(session_id, word_index)``, so
    re-fetching the current word always returns the same game.
    """

    session_model: Type[GameSessionMixin]
    game_model: Type[WordGameMixin]

    @abstractmethod
    def _new_game(self, cursor: CursorMixin, word: WordSnapshot, now: datetime) -> WordGameMixin:
        """Build the game row for the current word."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def _apply_guess(self, game: WordGameMixin, value: str) -> Optional[int]:
        """Apply one guess to an unfinished game.

        Returns the points awarded by this guess, or None when the guess
        leaves the game untouched.
        """
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def _build_view(self, cursor: CursorMixin, game: Optional[WordGameMixin]) -> Any:
        """Build the player-facing view; ``game`` is None once the list is exhausted."""
        raise NotImplementedError("Subclasses must implement this method")

    def _create_session(self, player_id: int, list_id: int, words: List[WordSnapshot], now: datetime) -> GameSessionMixin:
        return self.session_model(
            player_id=player_id,
            list_id=list_id,
            started_at=now,
            total_games=len(words),
            games_won=0,
            total_points=0,
        )

    def _finalize_session(self, cursor: CursorMixin, now: datetime) -> GameSessionMixin:
        session = self.db.get(self.session_model, cursor.session_id)
        if session.completed_at is None:
            session.completed_at = now
            monitoring.sessions_completed.labels(mode=self.mode.value).inc()
        return session

    def _summarize(self, session: GameSessionMixin) -> GameSessionSummary:
        return GameSessionSummary(
            session_id=session.id,
            mode=self.mode,
            total_games=session.total_games,
            games_won=session.games_won,
            total_points=session.total_points,
            completed_at=session.completed_at,
        )

    def _current_game(self, cursor: CursorMixin) -> Optional[WordGameMixin]:
        return (
            self.db.query(self.game_model)
            .filter(
                self.game_model.session_id == cursor.session_id,
                self.game_model.word_index == cursor.current_index,
            )
            .first()
        )

    def _get_or_create_game(self, cursor: CursorMixin, now: datetime) -> WordGameMixin:
        game = self._current_game(cursor)
        if game is None:
            word = cursor.words[cursor.current_index]
            game = self._new_game(cursor, word, now)
            self.db.add(game)
            self.db.flush()
            logger.debug(f"Created {self.mode.value} game {game.id} for word {word.id} at index {cursor.current_index}")
        return game

    def get_current(self, player_id: int) -> Any:
        """Get the current word's game, creating it on first view.

        Once the word list is exhausted the session is finalized and the
        returned view is flagged ``session_complete``.
        """
        now = self.clock()
        with self.store.transaction(player_id):
            cursor = self._load_cursor(player_id)
            if cursor.is_finished:
                self._finalize_session(cursor, now)
                return self._build_view(cursor, None)

            game = self._get_or_create_game(cursor, now)
            return self._build_view(cursor, game)

    def _submit(self, player_id: int, value: str) -> Any:
        now = self.clock()
        with self.store.transaction(player_id):
            cursor = self._load_cursor(player_id)
            if cursor.is_finished:
                raise self._not_found(player_id)

            game = self._get_or_create_game(cursor, now)
            if game.is_complete:
                logger.info(f"Game {game.id} is already finished, ignoring guess from player {player_id}")
                return self._build_view(cursor, game)

            points = self._apply_guess(game, value)
            if points is None:
                return self._build_view(cursor, game)

            session = self.db.get(self.session_model, cursor.session_id)
            if points:
                game.points_earned += points
                session.total_points += points
                cursor.points_so_far += points
                cursor.updated_at = now
                monitoring.points_awarded.labels(mode=self.mode.value).inc(points)
            if game.is_won:
                session.games_won += 1
            if game.is_complete:
                game.completed_at = now

            result = "won" if game.is_won else "lost" if game.is_lost else "continue"
            monitoring.answers.labels(mode=self.mode.value, result=result).inc()
            logger.info(
                f"Player {player_id} {self.mode.value} guess on game {game.id}: {result}, {points} points"
            )
            return self._build_view(cursor, game)

    def advance(self, player_id: int, from_index: Optional[int] = None) -> int:
        """Move to the next word and return the new index.

        An unfinished game is abandoned as lost with no points. When
        ``from_index`` no longer matches the cursor the request is a repeat
        and nothing moves.
        """
        now = self.clock()
        with self.store.transaction(player_id):
            cursor = self._load_cursor(player_id)
            if from_index is not None and from_index != cursor.current_index:
                logger.info(
                    f"Ignoring repeated advance from word {from_index} for player {player_id}, "
                    f"cursor already at {cursor.current_index}"
                )
                return cursor.current_index
            if cursor.is_finished:
                return cursor.current_index

            game = self._current_game(cursor)
            if game is not None and not game.is_complete:
                logger.info(f"Player {player_id} skipped unfinished {self.mode.value} game {game.id}")
                game.is_lost = True
                game.completed_at = now

            cursor.current_index += 1
            cursor.updated_at = now
            return cursor.current_index
