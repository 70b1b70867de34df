"""Tests for word selection."""
import random
from collections import Counter

import pytest

from spellclash.models.game_models import WordPerformance, WordSnapshot
from spellclash.services.word_selector import WordSelector, word_weight


def make_words(count: int):
    return [WordSnapshot(id=idx, text=f"word{idx}") for idx in range(1, count + 1)]


def test_word_weight():
    """Test weights derived from success rate."""
    assert word_weight(None) == pytest.approx(0.7)
    assert word_weight(WordPerformance(attempts=0, correct=0)) == pytest.approx(0.7)
    assert word_weight(WordPerformance(attempts=4, correct=0)) == pytest.approx(1.0)
    assert word_weight(WordPerformance(attempts=4, correct=4)) == pytest.approx(0.1)
    assert word_weight(WordPerformance(attempts=4, correct=2)) == pytest.approx(0.55)


def test_select_all_words_shuffled(selector):
    """Test that without a count every word is kept."""
    words = make_words(10)
    selected = selector.select(words)

    assert sorted(word.id for word in selected) == list(range(1, 11))


def test_weighted_sample_without_replacement(selector):
    """Test that a weighted sample never repeats a word."""
    words = make_words(30)
    selected = selector.weighted_sample(words, {}, 20)

    assert len(selected) == 20
    assert len({word.id for word in selected}) == 20


def test_weighted_sample_small_pool_returns_everything(selector):
    """Test that asking for more words than exist returns them all."""
    words = make_words(5)
    assert selector.weighted_sample(words, {}, 20) == words


def test_weighted_selection_is_proportional_to_weights():
    """Test first-draw frequencies against weights 1.0, 0.1 and 0.7."""
    selector = WordSelector(rng=random.Random(42))
    words = make_words(3)
    performance = {
        1: WordPerformance(attempts=5, correct=0),
        2: WordPerformance(attempts=5, correct=5),
    }

    trials = 20000
    counts = Counter(
        selector.weighted_sample(words, performance, 1)[0].id for _ in range(trials)
    )

    total_weight = 1.0 + 0.1 + 0.7
    assert counts[1] / trials == pytest.approx(1.0 / total_weight, abs=0.02)
    assert counts[2] / trials == pytest.approx(0.1 / total_weight, abs=0.02)
    assert counts[3] / trials == pytest.approx(0.7 / total_weight, abs=0.02)


def test_select_with_count_favours_weak_words():
    """Test that words the player always misses are picked more often."""
    selector = WordSelector(rng=random.Random(7))
    words = make_words(40)
    performance = {word.id: WordPerformance(attempts=3, correct=3) for word in words[:20]}
    performance.update({word.id: WordPerformance(attempts=3, correct=0) for word in words[20:]})

    weak_hits = 0
    runs = 200
    for _ in range(runs):
        selected = selector.select(words, count=20, performance=performance)
        weak_hits += sum(1 for word in selected if word.id > 20)

    assert weak_hits / (runs * 20) > 0.75
