# backend/app/core/llm.py
"""
Gemini REST client.

generate() never raises: it returns (success, text) where text is the model
output on success and a short reason otherwise. Callers that need a usable
reply raise LLMError themselves.
"""
import json
import logging
import re
from typing import Tuple

import requests

from app.core.config import settings

logger = logging.getLogger(__name__)

GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")


class LLMError(Exception):
    """
    Raised when the LLM call fails or returns an unusable response.
    """


def _extract_text(obj) -> str:
    if obj is None:
        return ""
    if isinstance(obj, str):
        return obj
    if isinstance(obj, (int, float, bool)):
        return str(obj)
    if isinstance(obj, list):
        return "\n".join(t for t in (_extract_text(x) for x in obj) if t)
    if isinstance(obj, dict):
        for k in ("text", "content", "parts", "output"):
            if k in obj and obj[k] is not None:
                return _extract_text(obj[k])
        return ""
    return ""


def extract_json(text: str) -> dict:
    """
    Models often wrap JSON in prose or code fences; parse the outermost {...} block.
    """
    match = _JSON_BLOCK.search(text or "")
    if not match:
        raise LLMError(f"No JSON object found in LLM output: {(text or '')[:200]!r}")
    try:
        obj = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise LLMError(f"Invalid JSON in LLM output: {e}") from e
    if not isinstance(obj, dict):
        raise LLMError("LLM output JSON is not an object")
    return obj


class GeminiClient:
    def __init__(self, api_key: str = None, model: str = None, timeout: int = None):
        self.api_key = settings.GEMINI_API_KEY if api_key is None else api_key
        self.model = model or settings.GEMINI_MODEL
        self.timeout = timeout or settings.GEMINI_TIMEOUT

    def generate(self, prompt: str, model: str = None) -> Tuple[bool, str]:
        model = model or self.model
        if not self.api_key:
            logger.warning("GEMINI_API_KEY not set")
            return False, "GEMINI_API_KEY not set"

        endpoint = GEMINI_ENDPOINT.format(model=model)
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }
        body = {"contents": [{"parts": [{"text": prompt}]}]}

        logger.debug("Calling Gemini %s (model=%s, key=%d-chars)", endpoint, model, len(self.api_key))
        try:
            resp = requests.post(endpoint, headers=headers, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Gemini request failed: %s", e)
            return False, f"HTTP exception: {e}"

        if resp.status_code != 200:
            raw = resp.text or "<no-body>"
            logger.warning("Gemini returned %s: %s", resp.status_code, raw[:2000])
            return False, f"Gemini error {resp.status_code}: {raw[:500]}"

        try:
            payload = resp.json()
        except ValueError as e:
            logger.error("Gemini response is not JSON: %s", (resp.text or "")[:2000])
            return False, f"Invalid JSON: {e}"

        candidates = payload.get("candidates") if isinstance(payload, dict) else None
        text_out = _extract_text(candidates[0]) if candidates else ""
        text_out = text_out.strip()
        if not text_out:
            logger.warning("Gemini returned no text (keys: %s)", list(payload)[:10] if isinstance(payload, dict) else "?")
            return False, "Empty response from model"

        logger.debug("Gemini reply preview: %s", text_out[:1000])
        return True, text_out
