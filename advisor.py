"""Short AI-generated money tips through Google Gemini."""

from __future__ import annotations

import json
import logging
from typing import Iterable, Optional

import pandas as pd
from google import genai
from google.genai import types

import config

logger = logging.getLogger(__name__)

FALLBACK_ADVICE = "Oops! I couldn't look at your spending right now. Keep saving! 🚀"

SYSTEM_INSTRUCTION = (
    "You are a young, expert financial advisor. You speak in a warm, close tone "
    "and use emojis."
)

PROMPT_TEMPLATE = (
    "Review the following financial movements and give me 3 short, friendly tips "
    "to improve my finances. Be motivating and professional.\n"
    "Movements: {movements}"
)

_ADVICE_FIELDS = ("description", "amount", "currency", "date", "type", "category")


def _records(transactions) -> list[dict]:
    if isinstance(transactions, pd.DataFrame):
        df = transactions.rename(columns=str.lower)
        cols = [c for c in _ADVICE_FIELDS if c in df.columns]
        return df[cols].to_dict(orient="records")

    rows = []
    for t in transactions or []:
        if isinstance(t, dict):
            rows.append({k: t.get(k) for k in _ADVICE_FIELDS})
        else:
            rows.append({k: getattr(t, k, None) for k in _ADVICE_FIELDS})
    return rows


def build_prompt(transactions: Iterable) -> str:
    movements = json.dumps(_records(transactions), default=str, ensure_ascii=False)
    return PROMPT_TEMPLATE.format(movements=movements)


def request_advice(transactions: Iterable, api_key: Optional[str] = None, model: Optional[str] = None) -> str:
    """
    Ask Gemini for a few tips about ``transactions``.

    Never raises: a missing key or any failure in the call returns
    ``FALLBACK_ADVICE``.
    """
    api_key = api_key or config.GEMINI_API_KEY
    if not api_key:
        logger.info("GEMINI_API_KEY not set, returning fallback advice")
        return FALLBACK_ADVICE

    try:
        client = genai.Client(api_key=api_key)
        response = client.models.generate_content(
            model=model or config.GEMINI_MODEL,
            contents=build_prompt(transactions),
            config=types.GenerateContentConfig(system_instruction=SYSTEM_INSTRUCTION),
        )
        text = (response.text or "").strip()
    except Exception:
        logger.exception("Error analyzing finances")
        return FALLBACK_ADVICE

    return text or FALLBACK_ADVICE
