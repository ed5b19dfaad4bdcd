"""Unit tests for the like-score accumulator."""

import itertools
import unittest

from narrative_engine.scoring import (
    EARTH_SAVED_THRESHOLD,
    SCORE_MAX,
    SCORE_MIN,
    apply_delta,
    is_earth_spared,
    running_scores,
)


def _clamp(v):
    return max(SCORE_MIN, min(SCORE_MAX, v))


class TestApplyDelta(unittest.TestCase):
    def test_moves_by_delta_inside_bounds(self):
        self.assertEqual(apply_delta(0, 1), 1)
        self.assertEqual(apply_delta(0, -1), -1)
        self.assertEqual(apply_delta(5, -1), 4)

    def test_clamps_at_bounds(self):
        self.assertEqual(apply_delta(SCORE_MAX, 1), SCORE_MAX)
        self.assertEqual(apply_delta(SCORE_MIN, -1), SCORE_MIN)
        self.assertEqual(apply_delta(SCORE_MAX, -1), SCORE_MAX - 1)


class TestRunningScores(unittest.TestCase):
    def test_every_sequence_up_to_ten_turns(self):
        """Running score stays in bounds and equals the clamped prefix sum."""
        for length in range(1, 11):
            for deltas in itertools.product((1, -1), repeat=length):
                scores = running_scores(deltas)
                self.assertEqual(len(scores), length)
                for k, score in enumerate(scores, start=1):
                    self.assertGreaterEqual(score, SCORE_MIN)
                    self.assertLessEqual(score, SCORE_MAX)
                    self.assertEqual(score, _clamp(sum(deltas[:k])))

    def test_long_sequences_stay_in_bounds(self):
        scores = running_scores([1] * 15 + [-1] * 30)
        self.assertEqual(max(scores), SCORE_MAX)
        self.assertEqual(min(scores), SCORE_MIN)
        self.assertEqual(scores[14], SCORE_MAX)
        # Clamping means the descent starts from 10, not 15.
        self.assertEqual(scores[15], SCORE_MAX - 1)

    def test_empty(self):
        self.assertEqual(running_scores([]), [])


class TestEarthSpared(unittest.TestCase):
    def test_threshold(self):
        self.assertEqual(EARTH_SAVED_THRESHOLD, 2)
        for score in range(SCORE_MIN, 2):
            self.assertFalse(is_earth_spared(score), score)
        for score in range(2, SCORE_MAX + 1):
            self.assertTrue(is_earth_spared(score), score)

    def test_scenarios(self):
        alternating = [1, -1] * 5
        self.assertEqual(running_scores(alternating)[-1], 0)
        self.assertFalse(is_earth_spared(running_scores(alternating)[-1]))

        six_up_four_down = [1] * 6 + [-1] * 4
        self.assertEqual(running_scores(six_up_four_down)[-1], 2)
        self.assertTrue(is_earth_spared(2))

        self.assertEqual(running_scores([1] * 10)[-1], 10)
        self.assertEqual(running_scores([-1] * 10)[-1], -10)
        self.assertFalse(is_earth_spared(-10))


if __name__ == "__main__":
    unittest.main()
