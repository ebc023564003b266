import json
from unittest.mock import MagicMock, patch

import pandas as pd

from advisor import FALLBACK_ADVICE, build_prompt, request_advice

TXNS = [
    {"id": 1, "description": "Rent", "amount": 800, "currency": "ARS", "date": "2025-09-02", "type": "expense", "category": "housing"},
    {"id": 2, "description": "Salary", "amount": 2500, "currency": "ARS", "date": "2025-09-01", "type": "income", "category": "salary"},
]


def test_prompt_carries_movements():
    prompt = build_prompt(TXNS)
    movements = json.loads(prompt.split("Movements: ", 1)[1])
    assert movements[0]["description"] == "Rent"
    assert "id" not in movements[0]


def test_prompt_from_frame():
    df = pd.DataFrame([{"Description": "Rent", "Amount": 800, "Type": "expense", "Date": pd.Timestamp("2025-09-02")}])
    movements = json.loads(build_prompt(df).split("Movements: ", 1)[1])
    assert movements == [{"description": "Rent", "amount": 800, "date": "2025-09-02 00:00:00", "type": "expense"}]


def test_no_key_returns_fallback_without_calling():
    with patch("advisor.config.GEMINI_API_KEY", None), patch("advisor.genai.Client") as client_cls:
        assert request_advice(TXNS) == FALLBACK_ADVICE
    client_cls.assert_not_called()


def test_returns_model_text():
    client = MagicMock()
    client.models.generate_content.return_value = MagicMock(text="  1. Save more 💖  ")
    with patch("advisor.genai.Client", return_value=client) as client_cls:
        assert request_advice(TXNS, api_key="k", model="gemini-test") == "1. Save more 💖"

    client_cls.assert_called_once_with(api_key="k")
    kwargs = client.models.generate_content.call_args.kwargs
    assert kwargs["model"] == "gemini-test"
    assert "Rent" in kwargs["contents"]


def test_failure_never_raises():
    client = MagicMock()
    client.models.generate_content.side_effect = RuntimeError("quota exceeded")
    with patch("advisor.genai.Client", return_value=client):
        assert request_advice(TXNS, api_key="k") == FALLBACK_ADVICE


def test_empty_reply_falls_back():
    client = MagicMock()
    client.models.generate_content.return_value = MagicMock(text=None)
    with patch("advisor.genai.Client", return_value=client):
        assert request_advice([], api_key="k") == FALLBACK_ADVICE
