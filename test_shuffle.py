"""Unit tests for per-turn answer shuffling."""

import random
import unittest
from collections import Counter

from narrative_engine.question_bank import QUESTION_BANK
from narrative_engine.shuffle import shuffle_options


class TestShuffleOptions(unittest.TestCase):
    def test_returns_permutation(self):
        options = list(QUESTION_BANK[0].options)
        shuffled = shuffle_options(options, random.Random(1))
        self.assertEqual(len(shuffled), 4)
        self.assertEqual(Counter(shuffled), Counter(options))

    def test_input_not_mutated(self):
        options = ["a", "b", "c", "d"]
        for seed in range(20):
            shuffle_options(options, random.Random(seed))
        self.assertEqual(options, ["a", "b", "c", "d"])

    def test_accepts_tuples(self):
        shuffled = shuffle_options(("a", "b", "c", "d"), random.Random(3))
        self.assertIsInstance(shuffled, list)
        self.assertEqual(sorted(shuffled), ["a", "b", "c", "d"])

    def test_positions_roughly_uniform(self):
        """Each option lands in each position about a quarter of the time."""
        rng = random.Random(12345)
        runs = 8000
        counts = Counter()
        for _ in range(runs):
            for pos, item in enumerate(shuffle_options(["a", "b", "c", "d"], rng)):
                counts[(item, pos)] += 1
        expected = runs / 4
        for item in "abcd":
            for pos in range(4):
                self.assertAlmostEqual(counts[(item, pos)], expected, delta=expected * 0.1)

    def test_default_rng(self):
        self.assertEqual(sorted(shuffle_options([3, 1, 2, 4])), [1, 2, 3, 4])


if __name__ == "__main__":
    unittest.main()
