"""Unit tests for asset and audio-cue lookups."""

import unittest
from unittest.mock import Mock

import presentation
from narrative_engine.state_machine import Phase


class TestMood(unittest.TestCase):
    def test_tiers(self):
        expected = {
            -10: "super_mad", -4: "super_mad",
            -3: "mad", -2: "mad",
            -1: "neutral", 0: "neutral", 1: "neutral",
            2: "happy", 3: "happy",
            4: "super_happy", 10: "super_happy",
        }
        for score, mood in expected.items():
            self.assertEqual(presentation.score_to_mood(score), mood, score)

    def test_alien_image_path(self):
        self.assertEqual(presentation.alien_image_path(1, -5), "/images/alien_q1_super_mad.png")
        self.assertEqual(presentation.alien_image_path(10, 0), "/images/alien_q10_neutral.png")


class TestResolveAssets(unittest.TestCase):
    def test_intro(self):
        assets = presentation.resolve_assets(Phase.INTRO, None, 0)
        self.assertEqual(assets, {"background": "/images/bg.png", "alien": None, "ending": None})

    def test_in_progress(self):
        assets = presentation.resolve_assets(Phase.IN_PROGRESS, 3, 2)
        self.assertEqual(assets["alien"], "/images/alien_q3_happy.png")
        self.assertIsNone(assets["ending"])

    def test_endings(self):
        self.assertEqual(presentation.resolve_assets(Phase.ENDED, None, 2)["ending"], "/images/ending_safe.png")
        self.assertEqual(presentation.resolve_assets(Phase.ENDED, None, 1)["ending"], "/images/ending_explode.png")


class TestAudioCue(unittest.TestCase):
    def test_cues(self):
        self.assertEqual(presentation.audio_cue(Phase.INTRO, None, None), "intro_theme")
        self.assertEqual(presentation.audio_cue(Phase.IN_PROGRESS, 4, None), "question_4")
        self.assertEqual(presentation.audio_cue(Phase.ENDED, None, True), "ending_safe")
        self.assertEqual(presentation.audio_cue(Phase.ENDED, None, False), "ending_explode")

    def test_deduplicator_suppresses_repeats(self):
        play = Mock()
        cues = presentation.CueDeduplicator(play)
        self.assertTrue(cues.emit("question_1"))
        self.assertFalse(cues.emit("question_1"))
        self.assertTrue(cues.emit("question_2"))
        self.assertFalse(cues.emit(None))
        self.assertEqual([c.args[0] for c in play.call_args_list], ["question_1", "question_2"])

    def test_deduplicator_clear_allows_replay(self):
        play = Mock()
        cues = presentation.CueDeduplicator(play)
        cues.emit("intro_theme")
        cues.clear()
        self.assertTrue(cues.emit("intro_theme"))
        self.assertEqual(play.call_count, 2)

    def test_playback_errors_swallowed(self):
        cues = presentation.CueDeduplicator(Mock(side_effect=OSError("no audio device")))
        self.assertTrue(cues.emit("ending_safe"))
        self.assertEqual(cues.last_cue, "ending_safe")


if __name__ == "__main__":
    unittest.main()
