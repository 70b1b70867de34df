"""Models for game-related data structures."""
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class GameMode(Enum):
    """Available play modes."""
    PRACTICE = "practice"  # Type the whole word
    HANGMAN = "hangman"  # Guess letters one at a time
    MISSING_LETTER = "missing_letter"  # Fill in the hidden letters


class GuessResult(Enum):
    """Outcome of one missing letter guess."""
    CORRECT = "correct"
    BONUS = "bonus"  # A real word, but not the target
    WRONG = "wrong"


@dataclass
class WordSnapshot:
    """Serializable copy of a word taken when a session starts."""
    id: int
    text: str
    difficulty_level: int = 1
    list_id: Optional[int] = None
    position: int = 0
    audio_ref: Optional[str] = None
    definition: Optional[str] = None

    @classmethod
    def from_word(cls, word: Any) -> "WordSnapshot":
        """Create a snapshot from a ``Word`` row or any object with the same attributes."""
        return cls(
            id=word.id,
            text=word.text,
            difficulty_level=word.difficulty_level,
            list_id=getattr(word, "list_id", None),
            position=getattr(word, "position", 0) or 0,
            audio_ref=getattr(word, "audio_ref", None),
            definition=getattr(word, "definition", None),
        )

    def to_data(self) -> Dict[str, Any]:
        """Convert to serializable data for storage."""
        return asdict(self)

    @classmethod
    def from_data(cls, data: Dict[str, Any]) -> "WordSnapshot":
        """Create a snapshot from stored data."""
        return cls(**data)


@dataclass
class WordPerformance:
    """A player's practice history for one word."""
    attempts: int = 0
    correct: int = 0

    @property
    def success_rate(self) -> float:
        if self.attempts == 0:
            return 0.0
        return self.correct / self.attempts


@dataclass
class PracticeWordView:
    """The word currently presented in a practice session."""
    session_id: int
    word: WordSnapshot
    index: int
    total: int
    correct_so_far: int
    points_so_far: int
    presented_at: datetime


@dataclass
class AnswerResult:
    """Result of one practice answer."""
    is_correct: bool
    points: int
    correct_word: str
    time_taken_ms: int
    current_index: int
    total_words: int
    correct_so_far: int
    points_so_far: int
    session_complete: bool


@dataclass
class PracticeSummary:
    """Final practice results."""
    session_id: int
    total_words: int
    correct_words: int
    points_earned: int
    accuracy: float
    attempts: List[Any] = field(default_factory=list)  # WordAttempt rows


@dataclass
class HangmanView:
    """What the player sees for the current hangman word."""
    session_id: int
    current_index: int
    total_words: int
    points_so_far: int
    session_complete: bool = False
    game_id: Optional[int] = None
    masked_word: str = ""
    guessed_letters: List[str] = field(default_factory=list)
    wrong_guesses: int = 0
    max_wrong_guesses: int = 0
    is_won: bool = False
    is_lost: bool = False
    answer: Optional[str] = None  # only filled in once the word is finished

    @property
    def is_complete(self) -> bool:
        return self.is_won or self.is_lost

    @property
    def remaining_words(self) -> int:
        return max(self.total_words - self.current_index - 1, 0)


@dataclass
class MissingLetterView:
    """What the player sees for the current missing letter word."""
    session_id: int
    current_index: int
    total_words: int
    points_so_far: int
    session_complete: bool = False
    game_id: Optional[int] = None
    display_word: str = ""
    num_missing: int = 0
    guesses: List[str] = field(default_factory=list)
    attempts: int = 0
    max_attempts: int = 0
    is_won: bool = False
    is_lost: bool = False
    last_result: Optional[GuessResult] = None
    answer: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return self.is_won or self.is_lost

    @property
    def remaining_words(self) -> int:
        return max(self.total_words - self.current_index - 1, 0)

    @property
    def last_guess_correct(self) -> Optional[bool]:
        if self.last_result is None or self.last_result == GuessResult.BONUS:
            return None
        return self.last_result == GuessResult.CORRECT

    @property
    def last_valid_word_bonus(self) -> bool:
        return self.last_result == GuessResult.BONUS


@dataclass
class GameSessionSummary:
    """Final hangman or missing letter results."""
    session_id: int
    mode: GameMode
    total_games: int
    games_won: int
    total_points: int
    completed_at: Optional[datetime] = None

    @property
    def win_rate(self) -> float:
        if self.total_games == 0:
            return 0.0
        return self.games_won / self.total_games * 100


@dataclass
class StrugglingWord:
    """A word the player keeps getting wrong in practice."""
    word_id: int
    text: str
    attempts: int
    correct: int

    @property
    def success_rate(self) -> float:
        return self.correct / self.attempts if self.attempts else 0.0


@dataclass
class PlayerStats:
    """Overall practice statistics for a player."""
    total_sessions: int = 0
    total_words_practiced: int = 0
    total_correct: int = 0
    total_points: int = 0
    unique_words_attempted: int = 0

    @property
    def overall_accuracy(self) -> float:
        if self.total_words_practiced == 0:
            return 0.0
        return self.total_correct / self.total_words_practiced * 100
