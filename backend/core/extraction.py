"""
extraction.py — AI-assisted roster extraction.

Design:
- The model only transcribes the sheet into JSON; it never computes anything.
- Its output is untrusted and goes straight to core.validator.
- Failures raise ExtractionError so callers can report them; no silent fallbacks.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, List, Optional

import httpx

from core.grading import SUBJECT_KEYS

logger = logging.getLogger(__name__)

GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models"


class ExtractionError(RuntimeError):
    """Raised when the AI service fails or returns something that is not JSON."""


def build_prompt(text: str) -> str:
    keys = ", ".join(f'"{key}" (number or null)' for key in SUBJECT_KEYS)
    return (
        "You are a data extraction assistant.\n"
        "Analyze the following text from a school grade sheet.\n"
        "Extract a list of students with their grades.\n\n"
        "Return ONLY a valid JSON array. Do not include markdown code blocks.\n\n"
        "The JSON objects must have these exact keys:\n"
        f'"numero" (number), "aluno" (string), {keys}.\n\n'
        'Treat empty values, "-", or missing grades as 0 or null.\n'
        'Convert comma decimals (e.g., "12,5") to dots (e.g., 12.5).\n\n'
        "Data Text:\n"
        f"{text}\n"
    )


def strip_code_fences(text: str) -> str:
    return text.replace("```json", "").replace("```", "").strip()


def parse_model_output(text: str) -> List[Any]:
    """Decode the model's reply into a list of untrusted candidates."""
    cleaned = strip_code_fences(text or "")
    if not cleaned:
        raise ExtractionError("The AI returned an empty response.")
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ExtractionError(f"The AI response is not valid JSON: {exc.msg}") from exc

    if isinstance(parsed, dict):
        return [parsed]
    if not isinstance(parsed, list):
        raise ExtractionError("The AI response is not a JSON array.")
    return parsed


def _response_text(data: Dict[str, Any]) -> str:
    if data.get("error"):
        message = (data["error"] or {}).get("message") if isinstance(data["error"], dict) else data["error"]
        raise ExtractionError(str(message or "AI service error."))

    parts: List[str] = []
    for candidate in data.get("candidates") or []:
        content = (candidate or {}).get("content") or {}
        for part in content.get("parts") or []:
            if isinstance(part, dict) and part.get("text"):
                parts.append(part["text"])
    return "".join(parts).strip()


def extract_roster(text: str, client: Optional[httpx.Client] = None) -> List[Any]:
    """Send roster text to Gemini and return the decoded candidate list."""
    api_key = os.getenv("GEMINI_API_KEY", "").strip()
    model = os.getenv("GEMINI_MODEL", "gemini-1.5-flash").strip()
    timeout_s = float(os.getenv("AI_TIMEOUT_SECONDS", "30"))
    if not api_key:
        raise ExtractionError("GEMINI_API_KEY is not set.")
    if not text or not text.strip():
        return []

    payload = {"contents": [{"parts": [{"text": build_prompt(text)}]}]}
    url = f"{GEMINI_API_URL}/{model}:generateContent"

    logger.debug("Requesting roster extraction from %s (%d chars)", model, len(text))
    try:
        if client is None:
            with httpx.Client(timeout=timeout_s) as own_client:
                res = own_client.post(url, params={"key": api_key}, json=payload)
        else:
            res = client.post(url, params={"key": api_key}, json=payload)
        data = res.json()
    except httpx.HTTPError as exc:
        logger.error("AI extraction request failed: %s", exc)
        raise ExtractionError(f"Could not reach the AI service: {exc}") from exc
    except ValueError as exc:
        raise ExtractionError("The AI service returned a non-JSON envelope.") from exc

    if not isinstance(data, dict):
        raise ExtractionError("Unexpected response from the AI service.")
    if res.is_error and not data.get("error"):
        raise ExtractionError(f"AI service error (HTTP {res.status_code}).")

    candidates = parse_model_output(_response_text(data))
    logger.info("AI extraction returned %d candidate rows", len(candidates))
    return candidates
