"""Unit tests for the terminal front end."""

import argparse
import asyncio
import io
import unittest
from unittest.mock import patch

import cli_play


class ScriptedInput:
    """Feeds canned answers and notes whether each prompt ran on the event loop thread."""

    def __init__(self, answers):
        self.answers = list(answers)
        self.on_loop_thread = []

    def __call__(self, prompt=""):
        try:
            asyncio.get_running_loop()
            self.on_loop_thread.append(True)
        except RuntimeError:
            self.on_loop_thread.append(False)
        return self.answers.pop(0)


class TestPlay(unittest.TestCase):
    def _run(self, answers):
        scripted = ScriptedInput(answers)
        out = io.StringIO()
        with patch("builtins.input", scripted), patch("sys.stdout", out):
            cli_play.cmd_play(argparse.Namespace(seed=7, offline=True))
        return scripted, out.getvalue()

    def test_full_offline_game(self):
        scripted, output = self._run([""] + ["1"] * 10)
        self.assertIn("GAME OVER", output)
        self.assertIn("Explanation (fallback)", output)
        self.assertIn("Overall:", output)
        self.assertEqual(scripted.answers, [])

    def test_prompts_do_not_block_event_loop(self):
        scripted, _ = self._run(["", "x", "r", "q"])
        self.assertEqual(len(scripted.on_loop_thread), 4)
        self.assertFalse(any(scripted.on_loop_thread))

    def test_fallback_demo(self):
        out = io.StringIO()
        with patch("sys.stdout", out):
            cli_play.cmd_fallback_demo(argparse.Namespace(pattern="favorable"))
        self.assertIn("Final score: 10", out.getvalue())
        self.assertIn("Q10:", out.getvalue())


if __name__ == "__main__":
    unittest.main()
