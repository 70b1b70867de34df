"""Tests for the hangman engine."""
import pytest

from spellclash.exceptions import EmptyListError, InvalidInputError, NotFoundError
from spellclash.models.game_models import GameMode
from spellclash.models.models import HangmanGame, HangmanSession, HangmanState
from spellclash.services.hangman_service import HangmanEngine, masked_word


@pytest.fixture
def engine(db, keep_order, game_settings, clock) -> HangmanEngine:
    return HangmanEngine(db, selector=keep_order, game_settings=game_settings, clock=clock)


@pytest.fixture
def bat_list(make_list):
    return make_list(["bat", "owl"])


def test_masked_word():
    """Test masking with guessed letters and spaces."""
    assert masked_word("bat", []) == "_ _ _"
    assert masked_word("Bat", ["b"]) == "b _ _"
    assert masked_word("ice cream", ["e"]) == "_ _ e   _ _ e _ _"


def test_winning_word(db, engine, bat_list, player_id):
    """Test guessing every letter without a miss."""
    session_id = engine.start(player_id, bat_list.id)

    view = engine.get_current(player_id)
    assert view.masked_word == "_ _ _"
    assert view.max_wrong_guesses == 6
    assert view.answer is None

    engine.guess_letter(player_id, "b")
    engine.guess_letter(player_id, "A")
    view = engine.guess_letter(player_id, "t ")

    assert view.is_won
    assert view.masked_word == "b a t"
    assert view.points_so_far == 100
    assert view.answer == "bat"

    game = db.query(HangmanGame).one()
    assert game.points_earned == 100
    assert game.completed_at is not None
    session = db.get(HangmanSession, session_id)
    assert session.total_points == 100
    assert session.games_won == 1


def test_losing_word(db, engine, bat_list, player_id):
    """Test running out of wrong guesses."""
    engine.start(player_id, bat_list.id)

    for letter in "qwxyzj":
        view = engine.guess_letter(player_id, letter)

    assert view.is_lost
    assert view.wrong_guesses == 6
    assert view.points_so_far == 0
    assert view.answer == "bat"

    unchanged = engine.guess_letter(player_id, "b")
    assert unchanged.guessed_letters == list("qwxyzj")
    assert db.query(HangmanGame).one().points_earned == 0


def test_wrong_guesses_reduce_points(engine, bat_list, player_id):
    """Test that each miss costs ten points."""
    engine.start(player_id, bat_list.id)
    for letter in "xzbat":
        view = engine.guess_letter(player_id, letter)

    assert view.is_won
    assert view.wrong_guesses == 2
    assert view.points_so_far == 80


def test_repeated_letter_changes_nothing(engine, bat_list, player_id):
    """Test that guessing the same letter twice is ignored."""
    engine.start(player_id, bat_list.id)
    first = engine.guess_letter(player_id, "x")
    second = engine.guess_letter(player_id, "x")

    assert first.wrong_guesses == second.wrong_guesses == 1
    assert second.guessed_letters == ["x"]


@pytest.mark.parametrize("letter", ["", "  ", "ab", None])
def test_invalid_letter(engine, bat_list, player_id, letter):
    """Test that anything but one character is rejected."""
    engine.start(player_id, bat_list.id)
    with pytest.raises(InvalidInputError):
        engine.guess_letter(player_id, letter)


def test_get_current_reuses_game(db, engine, bat_list, player_id):
    """Test that viewing the word twice keeps one game row."""
    engine.start(player_id, bat_list.id)
    first = engine.get_current(player_id)
    second = engine.get_current(player_id)

    assert first.game_id == second.game_id
    assert db.query(HangmanGame).count() == 1


def test_advance_abandons_unfinished_game(db, engine, bat_list, player_id):
    """Test that skipping a word counts it as lost."""
    engine.start(player_id, bat_list.id)
    engine.guess_letter(player_id, "b")

    assert engine.advance(player_id, from_index=0) == 1
    assert engine.advance(player_id, from_index=0) == 1

    skipped = db.query(HangmanGame).filter(HangmanGame.word_index == 0).one()
    assert skipped.is_lost
    assert skipped.points_earned == 0
    assert engine.get_current(player_id).masked_word == "_ _ _"


def test_session_completes_after_last_word(db, engine, bat_list, player_id):
    """Test the end of the list and the final summary."""
    session_id = engine.start(player_id, bat_list.id)
    for letter in "bat":
        engine.guess_letter(player_id, letter)
    engine.advance(player_id)
    for letter in "owl":
        engine.guess_letter(player_id, letter)
    engine.advance(player_id)

    view = engine.get_current(player_id)
    assert view.session_complete
    assert view.points_so_far == 200
    assert db.get(HangmanSession, session_id).completed_at is not None

    with pytest.raises(NotFoundError):
        engine.guess_letter(player_id, "a")

    summary = engine.complete(player_id)
    assert summary.mode == GameMode.HANGMAN
    assert summary.total_games == 2
    assert summary.games_won == 2
    assert summary.total_points == 200
    assert summary.win_rate == pytest.approx(100.0)
    assert db.get(HangmanState, player_id) is None
    assert engine.complete(player_id) is None


def test_exit_keeps_points(db, engine, bat_list, player_id):
    """Test leaving mid session keeps what was earned."""
    session_id = engine.start(player_id, bat_list.id)
    for letter in "bat":
        engine.guess_letter(player_id, letter)

    engine.exit(player_id)

    session = db.get(HangmanSession, session_id)
    assert session.completed_at is not None
    assert session.total_points == 100
    with pytest.raises(NotFoundError):
        engine.get_current(player_id)


def test_empty_list(engine, make_list, player_id):
    """Test that an empty list cannot be played."""
    with pytest.raises(EmptyListError):
        engine.start(player_id, make_list([]).id)
