from __future__ import annotations

import pandas as pd

from app.helpers import explain_match_row, format_amount, format_score, reasons_to_text


def test_format_helpers() -> None:
    assert format_score(87.2) == "87.20"
    assert format_score(None) == "n/a"
    assert format_amount(2500) == "$2,500"
    assert format_amount("bad") == "Unknown"
    assert reasons_to_text(["GPA_BELOW_MIN", "YEAR_BELOW_MIN"]) == "GPA_BELOW_MIN, YEAR_BELOW_MIN"


def test_explain_match_row_orders_signals_and_skips_neutral_scores() -> None:
    row = pd.Series({"academic_score": 66, "financial_score": 100, "extracurricular_score": 50})

    assert explain_match_row(row) == ["High financial need", "Strong GPA relative to the minimum"]


def test_explain_match_row_falls_back_when_nothing_stands_out() -> None:
    row = pd.Series({"academic_score": 20, "financial_score": 50, "extracurricular_score": float("nan")})

    assert explain_match_row(row) == ["Balanced profile fit after scoring"]
