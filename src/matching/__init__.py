"""Student/scholarship scoring, eligibility and match regeneration."""

from src.matching.config import GroupingConfig, MatchingConfig, load_engine_config
from src.matching.eligibility import eligibility_reasons, is_eligible
from src.matching.models import Match, ScholarshipCriteria, ScholarshipStatus, StudentProfile
from src.matching.scoring import compute_score, score_breakdown

__all__ = [
    "GroupingConfig",
    "Match",
    "MatchingConfig",
    "ScholarshipCriteria",
    "ScholarshipStatus",
    "StudentProfile",
    "compute_score",
    "eligibility_reasons",
    "is_eligible",
    "load_engine_config",
    "score_breakdown",
]
