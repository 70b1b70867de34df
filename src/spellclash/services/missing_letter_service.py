"""Missing letter mode: fill in the letters hidden from a word."""
import logging
import random
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from spellclash import monitoring
from spellclash.exceptions import InvalidInputError
from spellclash.models.game_models import GameMode, GuessResult, MissingLetterView, WordSnapshot
from spellclash.models.models import MissingLetterGame, MissingLetterSession, MissingLetterState
from spellclash.services.scoring import BONUS_WORD_POINTS, missing_letter_score
from spellclash.services.word_game import WordGameEngine

logger = logging.getLogger(__name__)

# Letters to hide per difficulty for words of length <=4, <=6, <=8 and longer
MISSING_LETTER_COUNTS: Dict[int, Tuple[int, int, int, int]] = {
    1: (1, 2, 2, 2),
    2: (1, 2, 3, 3),
    3: (1, 2, 3, 4),
    4: (2, 3, 4, 5),
    5: (2, 3, 5, 6),
}
DEFAULT_MISSING_COUNT = 2
MIN_VALID_WORD_LENGTH = 2


def missing_letter_count(length: int, difficulty: int) -> int:
    """Number of letters to hide, never more than half the word."""
    counts = MISSING_LETTER_COUNTS.get(difficulty)
    if counts is None:
        count = DEFAULT_MISSING_COUNT
    elif length <= 4:
        count = counts[0]
    elif length <= 6:
        count = counts[1]
    elif length <= 8:
        count = counts[2]
    else:
        count = counts[3]
    return min(count, max(1, length // 2))


def hideable_range(length: int, difficulty: int) -> Tuple[int, int]:
    """Half-open range of positions that may be hidden.

    Easy words keep their first and last letters, medium ones their first.
    """
    if difficulty == 1 and length > 3:
        return 1, length - 1
    if difficulty <= 3 and length > 2:
        return 1, length
    return 0, length


def choose_missing_indices(word: str, difficulty: int, rng: Optional[random.Random] = None) -> List[int]:
    """Pick the positions to blank out in ``word``."""
    rng = rng or random.Random()
    start, end = hideable_range(len(word), difficulty)
    available = [idx for idx in range(start, end) if word[idx] != " "]
    rng.shuffle(available)
    return available[:missing_letter_count(len(word), difficulty)]


def missing_letters(word: str, indices: Sequence[int]) -> str:
    """The hidden letters in blank order, lowercased."""
    word = word.lower()
    return "".join(word[idx] for idx in indices if idx < len(word))


def build_word_from_guess(word: str, indices: Sequence[int], guess: str) -> str:
    """Splice the guessed letters into the blanks of the lowercased word."""
    result = list(word.lower())
    for letter, idx in zip(guess, indices):
        if idx < len(result):
            result[idx] = letter
    return "".join(result)


def display_word(word: str, indices: Sequence[int], revealed: bool = False) -> str:
    """The word with ``_`` in place of hidden letters unless revealed."""
    if revealed:
        return word
    hidden = set(indices)
    return "".join("_" if idx in hidden else char for idx, char in enumerate(word))


def is_valid_word(word: str) -> bool:
    """Whether a guess counts as a real word for the bonus.

    Any alphabetic word of two or more letters qualifies until a dictionary
    is plugged in.
    """
    return len(word) >= MIN_VALID_WORD_LENGTH and word.isascii() and word.isalpha()


def is_revealed(game: MissingLetterGame, rule: str = "history") -> bool:
    """Whether the hidden letters may be shown.

    With the ``history`` rule a game is revealed once it is won or once any
    recorded guess equals the hidden letters. With ``win`` only a won game is.
    """
    if game.is_won:
        return True
    if rule != "history":
        return False
    answer = missing_letters(game.word, game.missing_indices)
    return any(guess == answer for guess in game.guessed_letters)


class MissingLetterEngine(WordGameEngine):
    """Engine for missing letter sessions."""

    mode = GameMode.MISSING_LETTER
    cursor_model = MissingLetterState
    session_model = MissingLetterSession
    game_model = MissingLetterGame

    def _new_game(self, cursor: MissingLetterState, word: WordSnapshot, now: datetime) -> MissingLetterGame:
        indices = choose_missing_indices(word.text, word.difficulty_level, self.selector.rng)
        logger.debug(f"Hiding positions {indices} of word {word.id}")
        return MissingLetterGame(
            session_id=cursor.session_id,
            player_id=cursor.player_id,
            word_id=word.id,
            word_index=cursor.current_index,
            word=word.text,
            missing_indices=indices,
            guessed_letters=[],
            attempts=0,
            max_attempts=self.game_settings.missing_letter_max_attempts,
            is_won=False,
            is_lost=False,
            started_at=now,
            points_earned=0,
        )

    def _apply_guess(self, game: MissingLetterGame, guess: str) -> Optional[int]:
        if not guess:
            return None
        if len(guess) != len(game.missing_indices):
            monitoring.error_count.labels(error_type="invalid_input").inc()
            raise InvalidInputError(f"Expected {len(game.missing_indices)} letters, got {len(guess)}")

        candidate = build_word_from_guess(game.word, game.missing_indices, guess)
        game.attempts += 1
        game.guessed_letters = game.guessed_letters + [guess]
        exhausted = game.attempts >= game.max_attempts

        if candidate == game.word.lower():
            game.last_result = GuessResult.CORRECT.value
            game.is_won = True
            return missing_letter_score(game.attempts, len(game.missing_indices))

        if is_valid_word(candidate):
            logger.info(f"Guess {candidate!r} is a real word, awarding bonus in game {game.id}")
            game.last_result = GuessResult.BONUS.value
            game.is_lost = exhausted
            return BONUS_WORD_POINTS

        game.last_result = GuessResult.WRONG.value
        game.is_lost = exhausted
        return 0

    def _build_view(self, cursor: MissingLetterState, game: Optional[MissingLetterGame]) -> MissingLetterView:
        view = MissingLetterView(
            session_id=cursor.session_id,
            current_index=cursor.current_index,
            total_words=cursor.total_words,
            points_so_far=cursor.points_so_far,
            session_complete=game is None,
        )
        if game is not None:
            revealed = is_revealed(game, self.game_settings.missing_letter_reveal_rule)
            view.game_id = game.id
            view.display_word = display_word(game.word, game.missing_indices, revealed)
            view.num_missing = len(game.missing_indices)
            view.guesses = list(game.guessed_letters)
            view.attempts = game.attempts
            view.max_attempts = game.max_attempts
            view.is_won = game.is_won
            view.is_lost = game.is_lost
            view.last_result = GuessResult(game.last_result) if game.last_result else None
            if game.is_complete:
                view.answer = game.word
        return view

    def submit_guess(self, player_id: int, letters: str) -> MissingLetterView:
        """Guess the letters for the blanks of the current word, in order."""
        if not isinstance(letters, str):
            monitoring.error_count.labels(error_type="invalid_input").inc()
            raise InvalidInputError("Guess must be text")
        return self._submit(player_id, letters.strip().lower())

    def submit(self, player_id: int, value: str) -> MissingLetterView:
        return self.submit_guess(player_id, value)
