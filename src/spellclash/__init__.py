"""Resumable spelling game sessions: practice, hangman and missing letter."""

__version__ = "0.1.0"
