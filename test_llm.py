"""Unit tests for the Gemini completer (fake client, no network)."""

import os
import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import llm


def _response(text, finish="STOP"):
    part = SimpleNamespace(text=text)
    cand = SimpleNamespace(finish_reason=finish, content=SimpleNamespace(parts=[part]))
    return SimpleNamespace(candidates=[cand])


def _client(generate):
    return SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate)))


class TestConfiguration(unittest.TestCase):
    def test_no_key_means_no_completer(self):
        with patch.dict(os.environ, {"GEMINI_API_KEY": ""}):
            self.assertFalse(llm.is_configured())
            self.assertIsNone(llm.get_completer())

    def test_key_configured(self):
        with patch.dict(os.environ, {"GEMINI_API_KEY": "test-key"}):
            self.assertTrue(llm.is_configured())


class TestGeminiCompleter(unittest.IsolatedAsyncioTestCase):
    async def test_returns_trimmed_text(self):
        generate = AsyncMock(return_value=_response("  Q1: hi\n"))
        completer = llm.GeminiCompleter(_client(generate), model="models/test")
        self.assertEqual(await completer.complete("prompt", 0.4), "Q1: hi")
        kwargs = generate.call_args.kwargs
        self.assertEqual(kwargs["model"], "models/test")
        self.assertEqual(kwargs["contents"], "prompt")
        self.assertEqual(kwargs["config"].temperature, 0.4)

    async def test_empty_text_is_none(self):
        completer = llm.GeminiCompleter(_client(AsyncMock(return_value=_response("   "))))
        self.assertIsNone(await completer.complete("prompt", 0.4))

    async def test_no_candidates_is_none(self):
        completer = llm.GeminiCompleter(_client(AsyncMock(return_value=SimpleNamespace(candidates=[]))))
        self.assertIsNone(await completer.complete("prompt", 0.4))

    async def test_blocked_is_none(self):
        completer = llm.GeminiCompleter(_client(AsyncMock(return_value=_response("text", finish="SAFETY"))))
        self.assertIsNone(await completer.complete("prompt", 0.4))

    async def test_transport_error_is_none(self):
        completer = llm.GeminiCompleter(_client(AsyncMock(side_effect=ConnectionError("down"))))
        self.assertIsNone(await completer.complete("prompt", 0.1))

    async def test_unsupported_timeout_option_is_logged(self):
        from google.genai import types

        generate = AsyncMock(return_value=_response("Q1: hi"))
        completer = llm.GeminiCompleter(_client(generate))
        with patch.object(types, "HttpOptions", side_effect=TypeError("no timeout")):
            with self.assertLogs("llm", level="DEBUG") as logs:
                self.assertEqual(await completer.complete("prompt", 0.4), "Q1: hi")
        self.assertIn("no timeout", "\n".join(logs.output))
        self.assertIsNone(generate.call_args.kwargs["config"].http_options)


if __name__ == "__main__":
    unittest.main()
