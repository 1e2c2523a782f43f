from __future__ import annotations

import json
from pathlib import Path

import pytest

from src.matching.config import GroupingConfig, MatchingConfig, load_engine_config


def test_matching_config_baseline_matches_documented_defaults() -> None:
    config = MatchingConfig.baseline()

    assert config.to_dict() == {
        "academic_weight": 0.4,
        "financial_need_weight": 0.3,
        "extracurricular_weight": 0.3,
        "match_threshold": 60.0,
        "gpa_ceiling": 10.0,
    }


@pytest.mark.parametrize(
    "overrides",
    [
        {"academic_weight": -0.1},
        {"financial_need_weight": float("nan")},
        {"match_threshold": 120.0},
        {"gpa_ceiling": 0.0},
    ],
)
def test_matching_config_rejects_invalid_values(overrides: dict[str, float]) -> None:
    with pytest.raises(ValueError):
        MatchingConfig(**overrides)


def test_from_mapping_keeps_baseline_for_missing_keys() -> None:
    config = MatchingConfig.from_mapping({"match_threshold": 70})

    assert config.match_threshold == 70.0
    assert config.academic_weight == 0.4


def test_grouping_config_does_not_guard_degenerate_thresholds() -> None:
    config = GroupingConfig.from_mapping({"min_common_scholarships": 0})

    assert config.min_common_scholarships == 0
    assert config.min_match_score == 7.0


def test_load_engine_config_reads_json_sections(tmp_path: Path) -> None:
    config_path = tmp_path / "engine_config.json"
    config_path.write_text(
        json.dumps({"matching": {"match_threshold": 55.0}, "grouping": {"min_match_score": 65.0}}),
        encoding="utf-8",
    )

    matching, grouping = load_engine_config(config_path)

    assert matching.match_threshold == 55.0
    assert grouping.min_match_score == 65.0
    assert grouping.min_common_scholarships == 2


def test_load_engine_config_falls_back_to_baselines(tmp_path: Path) -> None:
    matching, grouping = load_engine_config(tmp_path / "missing.json")

    assert matching == MatchingConfig.baseline()
    assert grouping == GroupingConfig.baseline()


def test_load_engine_config_rejects_non_object_payload(tmp_path: Path) -> None:
    config_path = tmp_path / "engine_config.json"
    config_path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(ValueError):
        load_engine_config(config_path)
