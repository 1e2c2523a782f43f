from __future__ import annotations

import argparse
import logging
import sys
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

import pandas as pd

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from src.engine import AllocationEngine
from src.eval.metrics import eligibility_breakdown, matches_per_student, score_distribution_stats
from src.io.snapshotting import build_and_write_snapshot, write_json_atomic
from src.io.tables import load_directories
from src.matching.config import load_engine_config
from src.matching.models import matches_to_frame
from src.matching.scoring import score_candidates
from src.matching.store import ParquetMatchStore

logger = logging.getLogger("regenerate_matches")

DEFAULT_DATA_DIR = ROOT_DIR / "data" / "input"
DEFAULT_PROCESSED_DIR = ROOT_DIR / "data" / "processed"
DEFAULT_REPORT_DIR = ROOT_DIR / "reports" / "matches"
DEFAULT_CONFIG_PATH = ROOT_DIR / "data" / "engine_config.json"
MATCH_STORE_FILENAME = "matches.parquet"


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Regenerate persisted scholarship matches.")
    parser.add_argument("--data-dir", type=Path, default=DEFAULT_DATA_DIR)
    parser.add_argument("--processed-dir", type=Path, default=DEFAULT_PROCESSED_DIR)
    parser.add_argument("--report-dir", type=Path, default=DEFAULT_REPORT_DIR)
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH)
    parser.add_argument(
        "--student-id",
        type=int,
        default=None,
        help="Regenerate a single student. Defaults to every student.",
    )
    parser.add_argument(
        "--date",
        type=str,
        default=None,
        help="Run date in YYYYMMDD format. Defaults to current UTC date.",
    )
    return parser.parse_args()


def _resolve_repo_path(path: Path) -> Path:
    if path.is_absolute():
        return path
    return ROOT_DIR / path


def _coerce_run_date(run_date: str | None) -> date:
    if run_date is None:
        return datetime.now(tz=UTC).date()
    return datetime.strptime(run_date, "%Y%m%d").date()


def run_regeneration(
    *,
    data_dir: Path,
    processed_dir: Path,
    report_dir: Path,
    config_path: Path | None = None,
    student_id: int | None = None,
    run_date: date | None = None,
) -> dict[str, Any]:
    effective_date = run_date or datetime.now(tz=UTC).date()
    started_at = datetime.now(tz=UTC)
    matching_config, grouping_config = load_engine_config(config_path)

    students, scholarships, applications = load_directories(data_dir)
    store = ParquetMatchStore(processed_dir / MATCH_STORE_FILENAME)
    engine = AllocationEngine(
        students,
        scholarships,
        store,
        applications,
        matching_config=matching_config,
        grouping_config=grouping_config,
    )

    if student_id is None:
        engine.regenerate_all_matches(now=started_at)
        target_students = students.list_all_students()
    else:
        engine.regenerate_matches_for_student(student_id, now=started_at)
        student = students.get_student(student_id)
        target_students = [student] if student is not None else []
        if student is None:
            logger.warning("Student %s not found in %s", student_id, data_dir)

    all_scholarships = scholarships.list_all_scholarships()
    candidate_frames = [
        score_candidates(student, all_scholarships, matching_config) for student in target_students
    ]
    candidates_df = (
        pd.concat(candidate_frames, ignore_index=True) if candidate_frames else pd.DataFrame()
    )

    matches_df = matches_to_frame(store.all_matches())
    snapshot_path, changes_path, delta = build_and_write_snapshot(
        matches_df, processed_dir=processed_dir, run_date=effective_date
    )

    report_path = report_dir / f"regenerate_report_{effective_date.strftime('%Y%m%d')}.json"
    report_payload: dict[str, Any] = {
        "run_date": effective_date.isoformat(),
        "started_at": started_at.isoformat(),
        "scope": "all" if student_id is None else f"student:{student_id}",
        "matching_config": matching_config.to_dict(),
        "eligibility": eligibility_breakdown(candidates_df),
        "score_distribution": score_distribution_stats(matches_df),
        "matches_per_student": {str(key): value for key, value in matches_per_student(matches_df).items()},
        "delta_counts": {
            "added": len(delta["added"]),
            "removed": len(delta["removed"]),
            "changed": len(delta["changed"]),
        },
        "artifact_paths": {
            "store": str(store.path.resolve()),
            "snapshot": str(snapshot_path.resolve()),
            "delta": str(changes_path.resolve()),
            "report": str(report_path.resolve()),
        },
    }
    write_json_atomic(report_payload, report_path)
    return report_payload


def main() -> int:
    args = parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    report = run_regeneration(
        data_dir=_resolve_repo_path(args.data_dir),
        processed_dir=_resolve_repo_path(args.processed_dir),
        report_dir=_resolve_repo_path(args.report_dir),
        config_path=_resolve_repo_path(args.config),
        student_id=args.student_id,
        run_date=_coerce_run_date(args.date),
    )

    print(f"Wrote match store: {report['artifact_paths']['store']}")
    print(f"Wrote snapshot: {report['artifact_paths']['snapshot']}")
    print(f"Wrote report: {report['artifact_paths']['report']}")
    print(
        "Delta counts: "
        f"added={report['delta_counts']['added']}, "
        f"removed={report['delta_counts']['removed']}, "
        f"changed={report['delta_counts']['changed']}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
