"""Gemini text generation for ending explanations.

Implements the async ``complete(prompt, temperature)`` capability used by
``narrative_engine.explanation``. Any failure comes back as None so the
caller can fall back to scripted text.
API key from environment only: GEMINI_API_KEY. Never hardcode or log.
"""
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv(Path(__file__).resolve().parent / ".env")

_GEMINI_KEY = "GEMINI_API_KEY"
_LLM_MODEL = os.getenv("NARRATIVE_LLM_MODEL", "models/gemini-2.0-flash")
_REQUEST_TIMEOUT_S = float(os.getenv("NARRATIVE_LLM_TIMEOUT_S", "30"))
_MAX_OUTPUT_TOKENS = int(os.getenv("NARRATIVE_MAX_OUTPUT_TOKENS", "1536"))

_BLOCKED_FINISH_REASONS = ("BLOCKED", "SAFETY", "RECITATION")


def is_configured() -> bool:
    return bool(os.environ.get(_GEMINI_KEY))


def request_timeout_s() -> float:
    return _REQUEST_TIMEOUT_S


def _client():
    """Return Gemini client if key is set, else None. Key is read from env only."""
    api_key = os.environ.get(_GEMINI_KEY)
    if not api_key:
        return None
    try:
        from google import genai
        return genai.Client(api_key=api_key)
    except Exception as e:
        logger.warning(f"Gemini client unavailable: {e}")
        return None


def _response_text(response) -> str:
    """Pull the first candidate's text, ignoring blocked candidates."""
    if not getattr(response, "candidates", None):
        return ""
    cand = response.candidates[0]
    finish = getattr(cand, "finish_reason", None) or getattr(cand, "finishReason", None)
    if any(reason in str(finish).upper() for reason in _BLOCKED_FINISH_REASONS):
        return ""
    content = getattr(cand, "content", None)
    parts = getattr(content, "parts", None) or []
    texts = [getattr(p, "text", None) or "" for p in parts]
    return "".join(texts)


class GeminiCompleter:
    """Async text completion backed by a Gemini client."""

    def __init__(self, client, model: str = _LLM_MODEL, max_output_tokens: int = _MAX_OUTPUT_TOKENS):
        self._client = client
        self._model = model
        self._max_output_tokens = max_output_tokens

    async def complete(self, prompt: str, temperature: float) -> Optional[str]:
        try:
            from google.genai import types

            config_kw = {"temperature": temperature, "max_output_tokens": self._max_output_tokens}
            try:
                config_kw["http_options"] = types.HttpOptions(timeout=int(_REQUEST_TIMEOUT_S * 1000))
            except Exception as e:
                logger.debug(f"HttpOptions timeout not supported: {e}")

            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=prompt,
                config=types.GenerateContentConfig(**config_kw),
            )
            text = _response_text(response).strip()
            return text or None
        except Exception as e:
            logger.warning(f"Gemini completion failed: {str(e)[:200]}")
            return None


def get_completer() -> Optional[GeminiCompleter]:
    """Return a completer when a credential is configured, else None (offline fallback)."""
    client = _client()
    if not client:
        return None
    return GeminiCompleter(client)
