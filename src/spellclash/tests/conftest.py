"""Test configuration."""
import os
import random
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Generator, List, Optional

import pytest
from dotenv import load_dotenv
from faker import Faker

# Set test environment before any imports
os.environ["ENV"] = "test"
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_spellclash.db")

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path)

# Import after environment setup
from sqlalchemy.orm import Session

from spellclash.config import GameSettings, ensure_directories
from spellclash.models.base import Base, SessionLocal, engine
from spellclash.models.models import SpellingList, Word
from spellclash.services.word_selector import WordSelector

fake = Faker()


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2024, 1, 15, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Set up test environment before each test."""
    ensure_directories()
    yield


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def selector(rng: random.Random) -> WordSelector:
    return WordSelector(rng=rng)


@pytest.fixture
def game_settings() -> GameSettings:
    return GameSettings(
        practice_word_count=20,
        weighted_selection_threshold=20,
        unattempted_word_weight=0.7,
        hangman_max_wrong_guesses=6,
        missing_letter_max_attempts=3,
        missing_letter_reveal_rule="history",
        stale_cursor_hours=72,
    )


@pytest.fixture
def player_id() -> int:
    return fake.random_int(min=1, max=10000)


@pytest.fixture
def make_list(db: Session):
    """Create a spelling list from words given as text or (text, difficulty) pairs."""

    def _make_list(words: List, name: Optional[str] = None) -> SpellingList:
        spelling_list = SpellingList(name=name or fake.word())
        db.add(spelling_list)
        db.flush()
        for position, entry in enumerate(words):
            text, difficulty = entry if isinstance(entry, tuple) else (entry, 1)
            db.add(
                Word(
                    list_id=spelling_list.id,
                    text=text,
                    difficulty_level=difficulty,
                    audio_ref=f"audio/{text}.mp3",
                    position=position,
                )
            )
        db.commit()
        db.refresh(spelling_list)
        return spelling_list

    return _make_list


@pytest.fixture
def keep_order(mocker, selector: WordSelector) -> WordSelector:
    """Make the selector keep list order so tests know which word comes next."""
    mocker.patch.object(selector, "shuffled", side_effect=lambda words: list(words))
    return selector
