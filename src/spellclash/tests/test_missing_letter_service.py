"""Tests for the missing letter engine."""
import random
from dataclasses import replace

import pytest

from spellclash.exceptions import InvalidInputError
from spellclash.models.game_models import GuessResult
from spellclash.models.models import MissingLetterGame, MissingLetterSession
from spellclash.services.missing_letter_service import (
    MissingLetterEngine,
    build_word_from_guess,
    choose_missing_indices,
    display_word,
    hideable_range,
    is_revealed,
    is_valid_word,
    missing_letter_count,
    missing_letters,
)

CHOOSE_INDICES = "spellclash.services.missing_letter_service.choose_missing_indices"


@pytest.fixture
def engine(db, keep_order, game_settings, clock) -> MissingLetterEngine:
    return MissingLetterEngine(db, selector=keep_order, game_settings=game_settings, clock=clock)


@pytest.mark.parametrize(
    "length,difficulty,expected",
    [
        (4, 1, 1),
        (6, 1, 2),
        (12, 1, 2),
        (7, 2, 3),
        (10, 3, 4),
        (8, 4, 4),
        (10, 5, 5),
        (12, 5, 6),
        (3, 5, 1),
        (10, 9, 2),
        (1, 4, 1),
    ],
)
def test_missing_letter_count(length, difficulty, expected):
    """Test the count table and the half-word cap."""
    assert missing_letter_count(length, difficulty) == expected


def test_hideable_range():
    """Test which positions each difficulty may hide."""
    assert hideable_range(5, 1) == (1, 4)
    assert hideable_range(3, 1) == (1, 3)
    assert hideable_range(5, 3) == (1, 5)
    assert hideable_range(2, 2) == (0, 2)
    assert hideable_range(5, 4) == (0, 5)


def test_easy_words_keep_first_and_last_letter():
    """Test that difficulty 1 never hides the ends of a five letter word."""
    rng = random.Random(3)
    for _ in range(200):
        indices = choose_missing_indices("apple", 1, rng)
        assert len(indices) == 2
        assert 0 not in indices and 4 not in indices


def test_spaces_are_never_hidden():
    """Test that only letters are blanked."""
    rng = random.Random(5)
    for _ in range(100):
        indices = choose_missing_indices("ice cream", 5, rng)
        assert 3 not in indices
        assert len(indices) == 4


def test_word_helpers():
    """Test splicing, display and the word check."""
    assert missing_letters("Cat", [0, 2]) == "ct"
    assert build_word_from_guess("Cat", [0, 2], "bn") == "ban"
    assert display_word("cat", [1]) == "c_t"
    assert display_word("cat", [1], revealed=True) == "cat"
    assert is_valid_word("bat")
    assert not is_valid_word("b4t")
    assert not is_valid_word("a")


def test_reveal_rules():
    """Test both reveal rules against a game whose history holds the answer."""
    game = MissingLetterGame(word="cat", missing_indices=[1], guessed_letters=["o", "a"], is_won=False, is_lost=True)
    assert is_revealed(game, "history")
    assert not is_revealed(game, "win")

    game.guessed_letters = ["o"]
    assert not is_revealed(game, "history")

    game.is_won = True
    assert is_revealed(game, "win")


def test_three_blank_scenario(db, engine, make_list, player_id, mocker):
    """Test winning on the first attempt with three blanks."""
    mocker.patch(CHOOSE_INDICES, return_value=[0, 1, 2])
    session_id = engine.start(player_id, make_list([("cat", 5)]).id)

    view = engine.get_current(player_id)
    assert view.display_word == "___"
    assert view.num_missing == 3

    view = engine.submit_guess(player_id, "cat")

    assert view.is_won
    assert view.last_result == GuessResult.CORRECT
    assert view.last_guess_correct is True
    assert view.display_word == "cat"
    assert view.points_so_far == 150
    assert db.get(MissingLetterSession, session_id).total_points == 150


def test_default_policy_hides_one_letter_of_short_word(engine, make_list, player_id):
    """Test that the half-word cap applies to real games."""
    engine.start(player_id, make_list([("cat", 5)]).id)
    view = engine.get_current(player_id)

    assert view.num_missing == 1
    assert view.display_word.count("_") == 1


def test_bonus_then_win(db, engine, make_list, player_id, mocker):
    """Test that a real but different word earns a bonus without ending the game."""
    mocker.patch(CHOOSE_INDICES, return_value=[0])
    session_id = engine.start(player_id, make_list([("cat", 4)]).id)

    view = engine.submit_guess(player_id, "B")
    assert not view.is_complete
    assert view.last_valid_word_bonus
    assert view.last_guess_correct is None
    assert view.points_so_far == 10

    view = engine.submit_guess(player_id, "c")
    assert view.is_won
    assert view.points_so_far == 10 + 35

    game = db.query(MissingLetterGame).one()
    assert game.points_earned == 45
    assert game.guessed_letters == ["b", "c"]
    session = db.get(MissingLetterSession, session_id)
    assert session.total_points == 45
    assert session.games_won == 1


def test_bonus_on_last_attempt_is_a_loss(db, engine, make_list, player_id, mocker):
    """Test that bonuses are kept when attempts run out."""
    mocker.patch(CHOOSE_INDICES, return_value=[0])
    engine.start(player_id, make_list([("cat", 4)]).id)

    for letter in "bhm":
        view = engine.submit_guess(player_id, letter)

    assert view.is_lost
    assert view.attempts == 3
    assert view.points_so_far == 30
    assert view.answer == "cat"
    assert view.display_word == "_at"
    assert db.get(MissingLetterSession, 1).games_won == 0


def test_wrong_guesses_lose_the_game(engine, make_list, player_id, mocker):
    """Test that non-words count as wrong and end the game at three attempts."""
    mocker.patch(CHOOSE_INDICES, return_value=[1])
    engine.start(player_id, make_list([("cat", 4)]).id)

    for letter in "123":
        view = engine.submit_guess(player_id, letter)

    assert view.is_lost
    assert view.last_result == GuessResult.WRONG
    assert view.last_guess_correct is False
    assert view.points_so_far == 0

    unchanged = engine.submit_guess(player_id, "-")
    assert unchanged.attempts == 3


def test_guess_length_must_match_blanks(engine, make_list, player_id, mocker):
    """Test input validation."""
    mocker.patch(CHOOSE_INDICES, return_value=[1, 2])
    engine.start(player_id, make_list([("cat", 5)]).id)

    with pytest.raises(InvalidInputError):
        engine.submit_guess(player_id, "a")
    with pytest.raises(InvalidInputError):
        engine.submit_guess(player_id, 42)

    view = engine.submit_guess(player_id, "   ")
    assert view.attempts == 0


def test_win_only_reveal_rule(db, keep_order, game_settings, clock, make_list, player_id, mocker):
    """Test the display with the win-only reveal rule."""
    mocker.patch(CHOOSE_INDICES, return_value=[1])
    engine = MissingLetterEngine(
        db,
        selector=keep_order,
        game_settings=replace(game_settings, missing_letter_reveal_rule="win"),
        clock=clock,
    )
    engine.start(player_id, make_list([("cat", 1)]).id)

    for letter in "xyz":
        view = engine.submit_guess(player_id, letter)
    assert view.display_word == "c_t"

    engine.advance(player_id)
    assert engine.get_current(player_id).session_complete


def test_game_is_stable_across_views(db, engine, make_list, player_id):
    """Test that the hidden positions do not change between views."""
    engine.start(player_id, make_list([("elephant", 5)]).id)
    first = engine.get_current(player_id)
    second = engine.get_current(player_id)

    assert first.display_word == second.display_word
    assert db.query(MissingLetterGame).count() == 1
