from __future__ import annotations

import argparse
import logging
import sys
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from src.engine import AllocationEngine
from src.eval.metrics import group_size_distribution
from src.grouping.assembler import build_groups_report
from src.io.snapshotting import write_json_atomic
from src.io.tables import load_directories
from src.matching.config import load_engine_config
from src.matching.store import ParquetMatchStore

logger = logging.getLogger("find_groups")

DEFAULT_DATA_DIR = ROOT_DIR / "data" / "input"
DEFAULT_PROCESSED_DIR = ROOT_DIR / "data" / "processed"
DEFAULT_REPORT_DIR = ROOT_DIR / "reports" / "groups"
DEFAULT_CONFIG_PATH = ROOT_DIR / "data" / "engine_config.json"
MATCH_STORE_FILENAME = "matches.parquet"


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Find groups of students compatible on shared scholarships.")
    parser.add_argument("--data-dir", type=Path, default=DEFAULT_DATA_DIR)
    parser.add_argument("--processed-dir", type=Path, default=DEFAULT_PROCESSED_DIR)
    parser.add_argument("--report-dir", type=Path, default=DEFAULT_REPORT_DIR)
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH)
    parser.add_argument(
        "--min-match-score",
        type=float,
        default=None,
        help="Minimum match score counted as shared. Defaults to the grouping config.",
    )
    parser.add_argument(
        "--min-common",
        type=int,
        default=None,
        help="Minimum shared scholarships for two students to be compatible. Should be at least 1.",
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


def run_find_groups(
    *,
    data_dir: Path,
    processed_dir: Path,
    report_dir: Path,
    config_path: Path | None = None,
    min_match_score: float | None = None,
    min_common: int | None = None,
    run_date: date | None = None,
) -> dict[str, Any]:
    effective_date = run_date or datetime.now(tz=UTC).date()
    matching_config, grouping_config = load_engine_config(config_path)

    store_path = processed_dir / MATCH_STORE_FILENAME
    if not store_path.exists():
        raise FileNotFoundError(
            f"No match store at '{store_path}'. Run scripts/regenerate_matches.py first."
        )

    students, scholarships, applications = load_directories(data_dir)
    engine = AllocationEngine(
        students,
        scholarships,
        ParquetMatchStore(store_path),
        applications,
        matching_config=matching_config,
        grouping_config=grouping_config,
    )

    effective_min_score = grouping_config.min_match_score if min_match_score is None else min_match_score
    effective_min_common = grouping_config.min_common_scholarships if min_common is None else min_common
    if effective_min_common < 1:
        logger.warning(
            "min_common=%d connects every pair of students; results will not be meaningful.",
            effective_min_common,
        )

    groups = engine.find_compatible_student_groups(effective_min_score, effective_min_common)

    report_path = report_dir / f"groups_{effective_date.strftime('%Y%m%d')}.json"
    report_payload = build_groups_report(groups, effective_min_score, effective_min_common)
    report_payload["summary"] = group_size_distribution(groups)
    report_payload["artifact_paths"] = {"report": str(report_path.resolve())}
    write_json_atomic(report_payload, report_path)
    return report_payload


def main() -> int:
    args = parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run_date = datetime.strptime(args.date, "%Y%m%d").date() if args.date else None
    report = run_find_groups(
        data_dir=_resolve_repo_path(args.data_dir),
        processed_dir=_resolve_repo_path(args.processed_dir),
        report_dir=_resolve_repo_path(args.report_dir),
        config_path=_resolve_repo_path(args.config),
        min_match_score=args.min_match_score,
        min_common=args.min_common,
        run_date=run_date,
    )

    print(f"Total groups: {report['total_groups']}")
    print(f"Largest group: {report['summary']['largest_group']}")
    print(f"Wrote report: {report['artifact_paths']['report']}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
