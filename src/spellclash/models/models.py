"""Database models for game sessions."""
import json
from typing import List

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from spellclash.models.base import Base, TimestampMixin, utcnow
from spellclash.models.game_models import WordSnapshot


class SpellingList(Base, TimestampMixin):
    """Spelling list model."""

    __tablename__ = "spelling_lists"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)

    # Relationships
    words = relationship("Word", back_populates="spelling_list", order_by="Word.position")


class Word(Base, TimestampMixin):
    """Word model."""

    __tablename__ = "words"

    id = Column(Integer, primary_key=True)
    list_id = Column(Integer, ForeignKey("spelling_lists.id"), nullable=False, index=True)
    text = Column(String, nullable=False)
    difficulty_level = Column(Integer, nullable=False, default=1)  # 1-5
    audio_ref = Column(String)
    definition = Column(String)
    position = Column(Integer, nullable=False, default=0)

    # Relationships
    spelling_list = relationship("SpellingList", back_populates="words")


class PracticeSession(Base):
    """One practice play-through of a list."""

    __tablename__ = "practice_sessions"

    id = Column(Integer, primary_key=True)
    player_id = Column(Integer, nullable=False, index=True)
    list_id = Column(Integer, nullable=False, index=True)
    started_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    completed_at = Column(DateTime(timezone=True))
    total_words = Column(Integer, nullable=False, default=0)
    correct_words = Column(Integer, nullable=False, default=0)
    points_earned = Column(Integer, nullable=False, default=0)

    # Relationships
    attempts = relationship(
        "WordAttempt",
        back_populates="session",
        order_by="WordAttempt.id",
        cascade="all, delete-orphan",
    )


class WordAttempt(Base):
    """Append-only record of a submitted practice answer."""

    __tablename__ = "word_attempts"

    id = Column(Integer, primary_key=True)
    session_id = Column(Integer, ForeignKey("practice_sessions.id"), nullable=False, index=True)
    word_id = Column(Integer, nullable=False, index=True)
    attempt_text = Column(String, nullable=False)
    is_correct = Column(Boolean, nullable=False, default=False)
    time_taken_ms = Column(Integer, nullable=False)
    points_earned = Column(Integer, nullable=False, default=0)
    attempted_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationships
    session = relationship("PracticeSession", back_populates="attempts")


class WordTiming(Base):
    """When a practice word was first presented."""

    __tablename__ = "practice_word_timings"
    __table_args__ = (UniqueConstraint("player_id", "session_id", "word_index"),)

    id = Column(Integer, primary_key=True)
    player_id = Column(Integer, nullable=False)
    session_id = Column(Integer, ForeignKey("practice_sessions.id"), nullable=False)
    word_index = Column(Integer, nullable=False)
    started_at = Column(DateTime(timezone=True), nullable=False)


class CursorMixin:
    """Columns shared by the per-player resumable cursors.

    One row per player per mode. ``words_json`` holds the ordered word
    snapshots fixed at session start so a resumed session replays the same
    sequence.
    """

    player_id = Column(Integer, primary_key=True, autoincrement=False)
    current_index = Column(Integer, nullable=False, default=0)
    words_json = Column(Text, nullable=False, default="[]")
    points_so_far = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    @property
    def words(self) -> List[WordSnapshot]:
        return [WordSnapshot.from_data(data) for data in json.loads(self.words_json or "[]")]

    @words.setter
    def words(self, words: List[WordSnapshot]) -> None:
        self.words_json = json.dumps([word.to_data() for word in words])

    @property
    def word_order(self) -> List[int]:
        return [word.id for word in self.words]

    @property
    def total_words(self) -> int:
        return len(json.loads(self.words_json or "[]"))

    @property
    def is_finished(self) -> bool:
        return self.current_index >= self.total_words


class PracticeState(Base, CursorMixin):
    """Resumable practice cursor."""

    __tablename__ = "practice_state"

    session_id = Column(Integer, ForeignKey("practice_sessions.id"), nullable=False)
    correct_count = Column(Integer, nullable=False, default=0)
    start_time = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}


class GameSessionMixin:
    """Aggregate columns shared by hangman and missing letter sessions."""

    id = Column(Integer, primary_key=True)
    player_id = Column(Integer, nullable=False, index=True)
    list_id = Column(Integer, nullable=False, index=True)
    started_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    completed_at = Column(DateTime(timezone=True))
    total_games = Column(Integer, nullable=False, default=0)
    games_won = Column(Integer, nullable=False, default=0)
    total_points = Column(Integer, nullable=False, default=0)


class WordGameMixin:
    """Columns shared by the per-word hangman and missing letter games."""

    id = Column(Integer, primary_key=True)
    player_id = Column(Integer, nullable=False, index=True)
    word_id = Column(Integer, nullable=False)
    word_index = Column(Integer, nullable=False)
    word = Column(String, nullable=False)
    guessed_letters = Column(JSON, nullable=False, default=list)
    is_won = Column(Boolean, nullable=False, default=False)
    is_lost = Column(Boolean, nullable=False, default=False)
    started_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    completed_at = Column(DateTime(timezone=True))
    points_earned = Column(Integer, nullable=False, default=0)

    @property
    def is_complete(self) -> bool:
        return bool(self.is_won or self.is_lost)


class HangmanSession(Base, GameSessionMixin):
    """One hangman play-through of a list."""

    __tablename__ = "hangman_sessions"

    # Relationships
    games = relationship("HangmanGame", back_populates="session", order_by="HangmanGame.word_index")


class HangmanGame(Base, WordGameMixin):
    """One word played within a hangman session."""

    __tablename__ = "hangman_games"
    __table_args__ = (UniqueConstraint("session_id", "word_index"),)

    session_id = Column(Integer, ForeignKey("hangman_sessions.id"), nullable=False, index=True)
    wrong_guesses = Column(Integer, nullable=False, default=0)
    max_wrong_guesses = Column(Integer, nullable=False, default=6)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    # Relationships
    session = relationship("HangmanSession", back_populates="games")


class HangmanState(Base, CursorMixin):
    """Resumable hangman cursor."""

    __tablename__ = "hangman_state"

    session_id = Column(Integer, ForeignKey("hangman_sessions.id"), nullable=False)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}


class MissingLetterSession(Base, GameSessionMixin):
    """One missing letter play-through of a list."""

    __tablename__ = "missing_letter_sessions"

    # Relationships
    games = relationship(
        "MissingLetterGame", back_populates="session", order_by="MissingLetterGame.word_index"
    )


class MissingLetterGame(Base, WordGameMixin):
    """One word played within a missing letter session."""

    __tablename__ = "missing_letter_games"
    __table_args__ = (UniqueConstraint("session_id", "word_index"),)

    session_id = Column(Integer, ForeignKey("missing_letter_sessions.id"), nullable=False, index=True)
    missing_indices = Column(JSON, nullable=False, default=list)
    attempts = Column(Integer, nullable=False, default=0)
    max_attempts = Column(Integer, nullable=False, default=3)
    last_result = Column(String)  # correct, bonus or wrong
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    # Relationships
    session = relationship("MissingLetterSession", back_populates="games")


class MissingLetterState(Base, CursorMixin):
    """Resumable missing letter cursor."""

    __tablename__ = "missing_letter_state"

    session_id = Column(Integer, ForeignKey("missing_letter_sessions.id"), nullable=False)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
