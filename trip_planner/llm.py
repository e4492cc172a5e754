"""
llm.py
------
Thin wrapper around the Gemini text API.

Every service builds a prompt, calls `call_llm`, pulls the first JSON block
out of the free-text answer, and falls back to canned data on any failure.
`generate_json` bundles those three steps.
"""

from __future__ import annotations

import json
import logging
import re
import threading
from typing import Any, Callable

from google import genai

from trip_planner import config
from trip_planner.errors import LLMUnavailableError

logger = logging.getLogger(__name__)

_client: genai.Client | None = None
_client_lock = threading.Lock()

_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)
_ARRAY_RE = re.compile(r"\[.*\]", re.DOTALL)


def _get_client() -> genai.Client:
    global _client
    with _client_lock:
        if _client is None:
            _client = genai.Client(api_key=config.GEMINI_API_KEY)
        return _client


def llm_enabled() -> bool:
    return not config.USE_STUB_LLM and bool(config.GEMINI_API_KEY)


def call_llm(prompt: str) -> str:
    if not llm_enabled():
        raise LLMUnavailableError("LLM disabled (USE_STUB_LLM or missing GEMINI_API_KEY)")

    response = _get_client().models.generate_content(
        model=config.LLM_MODEL_NAME,
        contents=prompt,
    )

    if not response or not response.text:
        raise RuntimeError("Empty Gemini response")

    return response.text.strip()


def extract_json(text: str, kind: str = "object") -> Any:
    """
    Return the first JSON object (or array, with kind="array") embedded in
    `text`, or None when nothing parses.
    """
    pattern = _ARRAY_RE if kind == "array" else _OBJECT_RE
    match = pattern.search(text or "")
    if not match:
        return None
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError:
        return None


def generate_json(
    prompt: str,
    fallback: Callable[[], Any] | Any,
    kind: str = "object",
    label: str = "llm",
) -> Any:
    """
    Ask the LLM for JSON. On stub mode, API error or unparseable output the
    fallback is returned instead (called first if it is callable).
    """
    try:
        parsed = extract_json(call_llm(prompt), kind=kind)
        if parsed is not None:
            return parsed
        logger.warning("%s: no %s JSON in LLM response, using fallback", label, kind)
    except LLMUnavailableError:
        logger.debug("%s: LLM disabled, using fallback", label)
    except Exception as exc:
        logger.error("%s: LLM call failed: %s", label, exc)
    return fallback() if callable(fallback) else fallback


def generate_text(prompt: str, fallback: str, label: str = "llm") -> str:
    """Plain-text variant of `generate_json`."""
    try:
        return call_llm(prompt)
    except LLMUnavailableError:
        logger.debug("%s: LLM disabled, using fallback", label)
    except Exception as exc:
        logger.error("%s: LLM call failed: %s", label, exc)
    return fallback
