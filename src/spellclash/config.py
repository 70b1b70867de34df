"""Configuration settings for the game engine."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)

DATA_DIR = Path(os.getenv("DATA_DIR", "./data"))

# Game settings
PRACTICE_WORD_COUNT = 20  # words drawn for one practice run of a long list
WEIGHTED_SELECTION_THRESHOLD = 20  # lists longer than this use weighted selection
UNATTEMPTED_WORD_WEIGHT = 0.7
HANGMAN_MAX_WRONG_GUESSES = 6
MISSING_LETTER_MAX_ATTEMPTS = 3
REVEAL_RULES = ("history", "win")


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///spellclash.db")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class GameSettings:
    """Game rules that operators may tune."""
    practice_word_count: int = int(os.getenv("PRACTICE_WORD_COUNT", str(PRACTICE_WORD_COUNT)))
    weighted_selection_threshold: int = int(
        os.getenv("WEIGHTED_SELECTION_THRESHOLD", str(WEIGHTED_SELECTION_THRESHOLD))
    )
    unattempted_word_weight: float = float(
        os.getenv("UNATTEMPTED_WORD_WEIGHT", str(UNATTEMPTED_WORD_WEIGHT))
    )
    hangman_max_wrong_guesses: int = int(
        os.getenv("HANGMAN_MAX_WRONG_GUESSES", str(HANGMAN_MAX_WRONG_GUESSES))
    )
    missing_letter_max_attempts: int = int(
        os.getenv("MISSING_LETTER_MAX_ATTEMPTS", str(MISSING_LETTER_MAX_ATTEMPTS))
    )
    # "history": revealed once any recorded guess matches the hidden letters
    # "win": revealed only when the game is won
    missing_letter_reveal_rule: str = os.getenv("MISSING_LETTER_REVEAL_RULE", "history")
    stale_cursor_hours: int = int(os.getenv("STALE_CURSOR_HOURS", "72"))


@dataclass
class MonitoringSettings:
    """Prometheus exporter settings."""
    enabled: bool = os.getenv("METRICS_ENABLED", "false").lower() == "true"
    port: int = int(os.getenv("METRICS_PORT", "9090"))


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_game_settings() -> GameSettings:
    """Get game settings."""
    return GameSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    game: GameSettings = field(default_factory=get_game_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if not self.database.url:
            raise ValueError("DATABASE_URL is required")

        if self.game.practice_word_count < 1:
            raise ValueError("PRACTICE_WORD_COUNT must be positive")

        if self.game.weighted_selection_threshold < 1:
            raise ValueError("WEIGHTED_SELECTION_THRESHOLD must be positive")

        if not 0 < self.game.unattempted_word_weight <= 1:
            raise ValueError("UNATTEMPTED_WORD_WEIGHT must be in (0, 1]")

        if self.game.hangman_max_wrong_guesses < 1:
            raise ValueError("HANGMAN_MAX_WRONG_GUESSES must be positive")

        if self.game.missing_letter_max_attempts < 1:
            raise ValueError("MISSING_LETTER_MAX_ATTEMPTS must be positive")

        if self.game.missing_letter_reveal_rule not in REVEAL_RULES:
            raise ValueError(f"MISSING_LETTER_REVEAL_RULE must be one of {', '.join(REVEAL_RULES)}")


# Create global settings instance
settings = Settings()
settings.validate()
