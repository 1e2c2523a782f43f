from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pandas as pd
import pytest

from scripts.find_groups import run_find_groups
from scripts.regenerate_matches import run_regeneration


def _write_inputs(data_dir: Path) -> None:
    data_dir.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(
        [
            {
                "student_id": student_id,
                "first_name": name,
                "gpa": 9.5,
                "financial_need_score": 9.0,
                "community_service_hours": 80,
                "leadership_score": 4.0,
                "year_of_study": 3,
            }
            for student_id, name in ((1, "Ada"), (2, "Alan"), (3, "Grace"))
        ]
    ).to_csv(data_dir / "students.csv", index=False)
    pd.DataFrame(
        [
            {
                "scholarship_id": scholarship_id,
                "name": f"Award {scholarship_id}",
                "status": "ACTIVE",
                "min_gpa": min_gpa,
                "min_year_required": 1,
                "financial_need_weight": 0.3,
                "extracurricular_weight": 0.3,
            }
            for scholarship_id, min_gpa in ((10, 7.0), (11, 7.0), (12, 9.9))
        ]
    ).to_csv(data_dir / "scholarships.csv", index=False)


def test_run_regeneration_writes_store_snapshot_and_report(tmp_path: Path) -> None:
    _write_inputs(tmp_path / "input")

    report = run_regeneration(
        data_dir=tmp_path / "input",
        processed_dir=tmp_path / "processed",
        report_dir=tmp_path / "reports",
        run_date=date(2026, 3, 1),
    )

    assert Path(report["artifact_paths"]["store"]).exists()
    assert Path(report["artifact_paths"]["snapshot"]).exists()
    persisted = json.loads(Path(report["artifact_paths"]["report"]).read_text(encoding="utf-8"))
    assert persisted["scope"] == "all"
    assert persisted["score_distribution"]["count"] == 6
    assert persisted["delta_counts"] == {"added": 6, "removed": 0, "changed": 0}
    assert persisted["eligibility"]["ineligible_reason_breakdown"] == {"GPA_BELOW_MIN": 3}


def test_run_find_groups_reports_the_shared_group(tmp_path: Path) -> None:
    _write_inputs(tmp_path / "input")
    run_regeneration(
        data_dir=tmp_path / "input",
        processed_dir=tmp_path / "processed",
        report_dir=tmp_path / "reports",
        run_date=date(2026, 3, 1),
    )

    report = run_find_groups(
        data_dir=tmp_path / "input",
        processed_dir=tmp_path / "processed",
        report_dir=tmp_path / "reports",
        min_match_score=60.0,
        min_common=2,
        run_date=date(2026, 3, 1),
    )

    assert report["total_groups"] == 1
    assert report["compatible_groups"][0]["student_count"] == 3
    assert report["compatible_groups"][0]["common_scholarships_count"] == 2
    assert report["summary"]["students_in_any_group"] == 3


def test_run_find_groups_requires_a_match_store(tmp_path: Path) -> None:
    _write_inputs(tmp_path / "input")

    with pytest.raises(FileNotFoundError):
        run_find_groups(
            data_dir=tmp_path / "input",
            processed_dir=tmp_path / "processed",
            report_dir=tmp_path / "reports",
        )
