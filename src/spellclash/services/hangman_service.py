"""Hangman mode: guess the word one letter at a time."""
import logging
from datetime import datetime
from typing import List, Optional

from spellclash import monitoring
from spellclash.exceptions import InvalidInputError
from spellclash.models.game_models import GameMode, HangmanView, WordSnapshot
from spellclash.models.models import HangmanGame, HangmanSession, HangmanState
from spellclash.services.scoring import hangman_score
from spellclash.services.word_game import WordGameEngine

logger = logging.getLogger(__name__)


def masked_word(word: str, guessed_letters: List[str]) -> str:
    """Show guessed letters and ``_`` for the rest, separated by spaces.

    Spaces inside the word are kept as a double space.
    """
    masked = ""
    for char in word.lower():
        if char == " ":
            masked += "  "
        elif char in guessed_letters:
            masked += char + " "
        else:
            masked += "_ "
    return masked.strip()


class HangmanEngine(WordGameEngine):
    """Engine for hangman sessions."""

    mode = GameMode.HANGMAN
    cursor_model = HangmanState
    session_model = HangmanSession
    game_model = HangmanGame

    def _new_game(self, cursor: HangmanState, word: WordSnapshot, now: datetime) -> HangmanGame:
        return HangmanGame(
            session_id=cursor.session_id,
            player_id=cursor.player_id,
            word_id=word.id,
            word_index=cursor.current_index,
            word=word.text,
            guessed_letters=[],
            wrong_guesses=0,
            max_wrong_guesses=self.game_settings.hangman_max_wrong_guesses,
            is_won=False,
            is_lost=False,
            started_at=now,
            points_earned=0,
        )

    def _apply_guess(self, game: HangmanGame, letter: str) -> Optional[int]:
        if letter in game.guessed_letters:
            logger.debug(f"Letter {letter!r} already guessed in game {game.id}")
            return None

        game.guessed_letters = game.guessed_letters + [letter]
        if letter not in game.word.lower():
            game.wrong_guesses += 1

        if "_" not in masked_word(game.word, game.guessed_letters):
            game.is_won = True
            return hangman_score(game.wrong_guesses)
        if game.wrong_guesses >= game.max_wrong_guesses:
            game.is_lost = True
        return 0

    def _build_view(self, cursor: HangmanState, game: Optional[HangmanGame]) -> HangmanView:
        view = HangmanView(
            session_id=cursor.session_id,
            current_index=cursor.current_index,
            total_words=cursor.total_words,
            points_so_far=cursor.points_so_far,
            session_complete=game is None,
        )
        if game is not None:
            view.game_id = game.id
            view.masked_word = masked_word(game.word, game.guessed_letters)
            view.guessed_letters = list(game.guessed_letters)
            view.wrong_guesses = game.wrong_guesses
            view.max_wrong_guesses = game.max_wrong_guesses
            view.is_won = game.is_won
            view.is_lost = game.is_lost
            if game.is_complete:
                view.answer = game.word
        return view

    def guess_letter(self, player_id: int, letter: str) -> HangmanView:
        """Guess one letter of the current word."""
        letter = letter.strip().lower() if isinstance(letter, str) else ""
        if len(letter) != 1:
            monitoring.error_count.labels(error_type="invalid_input").inc()
            raise InvalidInputError("Guess exactly one letter")
        return self._submit(player_id, letter)

    def submit(self, player_id: int, value: str) -> HangmanView:
        return self.guess_letter(player_id, value)
