"""Choosing and ordering the words for a session."""
import logging
import random
from typing import Dict, List, Optional, Sequence

from spellclash.config import UNATTEMPTED_WORD_WEIGHT
from spellclash.models.game_models import WordPerformance, WordSnapshot

logger = logging.getLogger(__name__)

# 100% success = 0.1 weight, 0% success = 1.0 weight
MIN_WEIGHT = 0.1
SUCCESS_RATE_FACTOR = 0.9


def word_weight(
    performance: Optional[WordPerformance],
    unattempted_weight: float = UNATTEMPTED_WORD_WEIGHT,
) -> float:
    """Selection weight for a word given the player's history with it."""
    if performance is None or performance.attempts == 0:
        return unattempted_weight
    return 1.0 - performance.success_rate * SUCCESS_RATE_FACTOR


class WordSelector:
    """Picks the words a session plays and fixes their order."""

    def __init__(self, rng: Optional[random.Random] = None, unattempted_weight: float = UNATTEMPTED_WORD_WEIGHT):
        """Initialize the selector with an optional random source."""
        self.rng = rng or random.Random()
        self.unattempted_weight = unattempted_weight

    def shuffled(self, words: Sequence[WordSnapshot]) -> List[WordSnapshot]:
        """Return all words in a uniformly random order."""
        result = list(words)
        self.rng.shuffle(result)
        return result

    def weighted_sample(
        self,
        words: Sequence[WordSnapshot],
        performance: Dict[int, WordPerformance],
        count: int,
    ) -> List[WordSnapshot]:
        """Draw ``count`` words without replacement, favouring weak words.

        Each round draws a point in ``[0, total)`` over the remaining weights,
        takes the word whose cumulative weight passes it and removes it from
        the pool.
        """
        if count >= len(words):
            return list(words)

        remaining = [
            (word, word_weight(performance.get(word.id), self.unattempted_weight))
            for word in words
        ]
        selected: List[WordSnapshot] = []
        while len(selected) < count and remaining:
            total_weight = sum(weight for _, weight in remaining)
            point = self.rng.random() * total_weight

            selected_idx = len(remaining) - 1
            cumulative = 0.0
            for idx, (_, weight) in enumerate(remaining):
                cumulative += weight
                if point < cumulative:
                    selected_idx = idx
                    break

            word, _ = remaining.pop(selected_idx)
            selected.append(word)

        logger.debug(f"Weighted selection picked {len(selected)} of {len(words)} words")
        return selected

    def select(
        self,
        words: Sequence[WordSnapshot],
        count: Optional[int] = None,
        performance: Optional[Dict[int, WordPerformance]] = None,
    ) -> List[WordSnapshot]:
        """Select the session words and shuffle them.

        Without ``count`` every word is used; otherwise a weighted sample of at
        most ``count`` words is drawn first.
        """
        if count is None:
            return self.shuffled(words)
        return self.shuffled(self.weighted_sample(words, performance or {}, count))
