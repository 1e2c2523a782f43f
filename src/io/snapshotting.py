from __future__ import annotations

import json
import re
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any, Callable
from uuid import uuid4

import pandas as pd

SNAPSHOT_PREFIX = "matches_snapshot_"
CHANGES_PREFIX = "match_changes_"
SNAPSHOT_PATTERN = re.compile(r"^matches_snapshot_\d{8}\.parquet$")

SNAPSHOT_COLUMNS = ["student_id", "scholarship_id", "match_score", "match_date"]
MATCH_KEY = ("student_id", "scholarship_id")


def _coerce_output_date(run_date: date | str | None) -> date:
    if run_date is None:
        return datetime.now(tz=UTC).date()
    if isinstance(run_date, date):
        return run_date
    return datetime.strptime(run_date, "%Y%m%d").date()


def _snapshot_filename(run_date: date) -> str:
    return f"{SNAPSHOT_PREFIX}{run_date.strftime('%Y%m%d')}.parquet"


def _changes_filename(run_date: date) -> str:
    return f"{CHANGES_PREFIX}{run_date.strftime('%Y%m%d')}.json"


def _jsonable(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, float) and pd.isna(value):
        return None
    if pd.isna(value):
        return None
    if isinstance(value, pd.Timestamp):
        if value.tzinfo is not None:
            return value.tz_convert("UTC").isoformat()
        return value.isoformat()
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if hasattr(value, "item"):
        return value.item()
    return value


def list_snapshot_files(processed_dir: Path) -> list[Path]:
    # YYYYMMDD names sort chronologically.
    return sorted(
        path
        for path in processed_dir.glob(f"{SNAPSHOT_PREFIX}*.parquet")
        if SNAPSHOT_PATTERN.match(path.name)
    )


def get_latest_snapshot_path(processed_dir: Path, *, excluding: date | None = None) -> Path | None:
    """Most recent snapshot, skipping the one written for `excluding` when given."""
    skipped_name = _snapshot_filename(excluding) if excluding is not None else None
    snapshots = [path for path in list_snapshot_files(processed_dir) if path.name != skipped_name]
    return snapshots[-1] if snapshots else None


def prepare_snapshot_df(matches_df: pd.DataFrame) -> pd.DataFrame:
    snapshot_df = matches_df.reindex(columns=SNAPSHOT_COLUMNS)
    return snapshot_df.sort_values(by=list(MATCH_KEY), kind="mergesort").reset_index(drop=True)


def _replace_atomically(output_path: Path, write: Callable[[Path], Any]) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = output_path.with_name(f"{output_path.name}.{uuid4().hex}.tmp")
    try:
        write(temp_path)
        temp_path.replace(output_path)
    finally:
        if temp_path.exists():
            temp_path.unlink()


def write_parquet_atomic(df: pd.DataFrame, output_path: Path) -> None:
    _replace_atomically(output_path, lambda temp_path: df.to_parquet(temp_path, index=False, engine="pyarrow"))


def write_json_atomic(payload: dict[str, Any], output_path: Path) -> None:
    text = json.dumps(_jsonable(payload), indent=2, sort_keys=True)
    _replace_atomically(output_path, lambda temp_path: temp_path.write_text(text, encoding="utf-8"))


def _scores_by_key(df: pd.DataFrame) -> dict[tuple[int, int], float]:
    if df.empty:
        return {}
    return {
        (int(row["student_id"]), int(row["scholarship_id"])): float(row["match_score"])
        for _, row in df.iterrows()
    }


def build_delta(current_df: pd.DataFrame, prior_df: pd.DataFrame | None) -> dict[str, Any]:
    """Compare two match snapshots on the (student, scholarship) key."""
    prior = prior_df if prior_df is not None else pd.DataFrame(columns=SNAPSHOT_COLUMNS)
    current_scores = _scores_by_key(current_df)
    prior_scores = _scores_by_key(prior)

    current_keys = set(current_scores)
    prior_keys = set(prior_scores)

    added = [
        {"student_id": key[0], "scholarship_id": key[1], "match_score": current_scores[key]}
        for key in sorted(current_keys - prior_keys)
    ]
    removed = [
        {"student_id": key[0], "scholarship_id": key[1], "match_score": prior_scores[key]}
        for key in sorted(prior_keys - current_keys)
    ]

    changed: list[dict[str, Any]] = []
    for key in sorted(current_keys & prior_keys):
        old_score = prior_scores[key]
        new_score = current_scores[key]
        if old_score != new_score:
            changed.append(
                {
                    "student_id": key[0],
                    "scholarship_id": key[1],
                    "match_score": {"old": old_score, "new": new_score},
                }
            )

    return {"added": added, "removed": removed, "changed": changed}


def build_and_write_snapshot(
    matches_df: pd.DataFrame,
    *,
    processed_dir: Path,
    run_date: date | str | None = None,
) -> tuple[Path, Path, dict[str, Any]]:
    snapshot_date = _coerce_output_date(run_date)
    snapshot_df = prepare_snapshot_df(matches_df)

    processed_dir.mkdir(parents=True, exist_ok=True)
    prior_snapshot_path = get_latest_snapshot_path(processed_dir, excluding=snapshot_date)
    prior_df = pd.read_parquet(prior_snapshot_path) if prior_snapshot_path else None

    snapshot_path = processed_dir / _snapshot_filename(snapshot_date)
    changes_path = processed_dir / _changes_filename(snapshot_date)

    delta = build_delta(snapshot_df, prior_df)
    write_parquet_atomic(snapshot_df, snapshot_path)
    write_json_atomic(delta, changes_path)
    return snapshot_path, changes_path, delta
