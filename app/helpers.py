from __future__ import annotations

from typing import Any

import pandas as pd


def format_score(value: Any) -> str:
    score = _coerce_float(value)
    if score is None:
        return "n/a"
    return f"{score:.2f}"


def format_amount(value: Any) -> str:
    amount = _coerce_float(value)
    if amount is None:
        return "Unknown"
    return f"${max(amount, 0.0):,.0f}"


def explain_match_row(row: pd.Series, *, max_signals: int = 2) -> list[str]:
    signal_scores = [
        (
            float(_coerce_float(row.get("academic_score")) or 0.0),
            "Strong GPA relative to the minimum",
        ),
        (
            float(_coerce_float(row.get("financial_score")) or 0.0),
            "High financial need",
        ),
        (
            float(_coerce_float(row.get("extracurricular_score")) or 0.0),
            "Service hours and leadership",
        ),
    ]
    # Neutral sub-scores carry no signal.
    ranked = [
        label
        for score, label in sorted(signal_scores, key=lambda item: item[0], reverse=True)
        if score > 50
    ]
    if not ranked:
        return ["Balanced profile fit after scoring"]
    return ranked[:max_signals]


def reasons_to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(str(item) for item in value if str(item).strip())
    return str(value)


def _coerce_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return None
    if pd.isna(numeric):
        return None
    return numeric
