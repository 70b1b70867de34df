"""Point formulas for the three play modes.

Every formula floors at ``MIN_POINTS`` for a win so a child always gets
something for solving a word.
"""

MIN_POINTS = 10
BONUS_WORD_POINTS = 10

MAX_SPEED_BONUS = 50
PRACTICE_POINTS_PER_LEVEL = 10
HANGMAN_BASE_POINTS = 100
HANGMAN_WRONG_GUESS_PENALTY = 10
MISSING_LETTER_POINTS_PER_BLANK = 50
MISSING_LETTER_RETRY_PENALTY = 15


def practice_score(difficulty: int, time_taken_ms: int) -> int:
    """Points for a correct practice answer.

    ``difficulty * 10`` base points plus a speed bonus that starts at 50 and
    loses one point per 100ms, clamped to ``[0, 50]``.
    """
    base_points = difficulty * PRACTICE_POINTS_PER_LEVEL
    speed_bonus = MAX_SPEED_BONUS - time_taken_ms // 100
    speed_bonus = max(0, min(speed_bonus, MAX_SPEED_BONUS))
    return base_points + speed_bonus


def hangman_score(wrong_guesses: int) -> int:
    """Points for a won hangman word."""
    return max(HANGMAN_BASE_POINTS - wrong_guesses * HANGMAN_WRONG_GUESS_PENALTY, MIN_POINTS)


def missing_letter_score(attempts: int, num_missing: int) -> int:
    """Points for a won missing letter word."""
    points = MISSING_LETTER_POINTS_PER_BLANK * num_missing - (attempts - 1) * MISSING_LETTER_RETRY_PENALTY
    return max(points, MIN_POINTS)
