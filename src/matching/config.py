from __future__ import annotations

import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

DEFAULT_ACADEMIC_WEIGHT = 0.4
DEFAULT_FINANCIAL_NEED_WEIGHT = 0.3
DEFAULT_EXTRACURRICULAR_WEIGHT = 0.3
DEFAULT_MATCH_THRESHOLD = 60.0
DEFAULT_GPA_CEILING = 10.0

DEFAULT_MIN_MATCH_SCORE = 7.0
DEFAULT_MIN_COMMON_SCHOLARSHIPS = 2


@dataclass(frozen=True, slots=True)
class MatchingConfig:
    """Fallback weights and cutoffs used when scoring a student/scholarship pair.

    The weights apply only when a scholarship leaves its own weight unset.
    """

    academic_weight: float = DEFAULT_ACADEMIC_WEIGHT
    financial_need_weight: float = DEFAULT_FINANCIAL_NEED_WEIGHT
    extracurricular_weight: float = DEFAULT_EXTRACURRICULAR_WEIGHT
    match_threshold: float = DEFAULT_MATCH_THRESHOLD
    gpa_ceiling: float = DEFAULT_GPA_CEILING

    def __post_init__(self) -> None:
        for field_name in ("academic_weight", "financial_need_weight", "extracurricular_weight"):
            value = float(getattr(self, field_name))
            if not math.isfinite(value):
                raise ValueError(f"Matching weight '{field_name}' must be finite.")
            if value < 0.0:
                raise ValueError(f"Matching weight '{field_name}' must be non-negative.")

        threshold = float(self.match_threshold)
        if not math.isfinite(threshold) or threshold < 0.0 or threshold > 100.0:
            raise ValueError("Match threshold must be between 0.0 and 100.0.")

        ceiling = float(self.gpa_ceiling)
        if not math.isfinite(ceiling) or ceiling <= 0.0:
            raise ValueError("GPA ceiling must be a positive number.")

    @classmethod
    def baseline(cls) -> MatchingConfig:
        return cls()

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> MatchingConfig:
        values = payload or {}
        baseline = cls.baseline()
        return cls(
            academic_weight=float(values.get("academic_weight", baseline.academic_weight)),
            financial_need_weight=float(
                values.get("financial_need_weight", baseline.financial_need_weight)
            ),
            extracurricular_weight=float(
                values.get("extracurricular_weight", baseline.extracurricular_weight)
            ),
            match_threshold=float(values.get("match_threshold", baseline.match_threshold)),
            gpa_ceiling=float(values.get("gpa_ceiling", baseline.gpa_ceiling)),
        )

    def to_dict(self) -> dict[str, float]:
        return {
            "academic_weight": self.academic_weight,
            "financial_need_weight": self.financial_need_weight,
            "extracurricular_weight": self.extracurricular_weight,
            "match_threshold": self.match_threshold,
            "gpa_ceiling": self.gpa_ceiling,
        }


@dataclass(frozen=True, slots=True)
class GroupingConfig:
    """Default thresholds for compatible-group discovery.

    `min_common_scholarships` below 1 connects every pair of students; callers
    own that precondition.
    """

    min_match_score: float = DEFAULT_MIN_MATCH_SCORE
    min_common_scholarships: int = DEFAULT_MIN_COMMON_SCHOLARSHIPS

    @classmethod
    def baseline(cls) -> GroupingConfig:
        return cls()

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> GroupingConfig:
        values = payload or {}
        baseline = cls.baseline()
        return cls(
            min_match_score=float(values.get("min_match_score", baseline.min_match_score)),
            min_common_scholarships=int(
                values.get("min_common_scholarships", baseline.min_common_scholarships)
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "min_match_score": self.min_match_score,
            "min_common_scholarships": self.min_common_scholarships,
        }


def load_engine_config(path: Path | None) -> tuple[MatchingConfig, GroupingConfig]:
    if path is None or not path.exists():
        return MatchingConfig.baseline(), GroupingConfig.baseline()

    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"Engine config at '{path}' must be a JSON object.")
    return (
        MatchingConfig.from_mapping(payload.get("matching")),
        GroupingConfig.from_mapping(payload.get("grouping")),
    )
