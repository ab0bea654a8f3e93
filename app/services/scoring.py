"""
Performance review seed ratings.

Derives the default indicator values for a new monthly review from the
previous review and the month's activity counts. Everything here is pure;
the database gathering lives in app.services.performance_service.
"""

import math
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

MIN_RATING = 0
MAX_RATING = 5
MAX_INTERVIEW_RATING = 10

# Fallbacks when there is no previous review to carry forward
DEFAULT_RESUME_QUALITY = 1
DEFAULT_TECHNICAL_PROFICIENCY = 3
DEFAULT_ENERGY_LEVEL = 3
DEFAULT_BEHAVIORAL_PERFORMANCE = 1

# Step tables: (minimum monthly count, rating), ascending by count.
# The first step must start at 0 so every count maps to a rating.
ScoreTable = Sequence[Tuple[int, int]]

APPLICATION_TABLE: ScoreTable = ((0, 1), (10, 2), (20, 3), (30, 4), (40, 5))
APPLICATION_TABLE_HIGHEST: ScoreTable = ((0, 1), (20, 2), (40, 3), (60, 4), (80, 5))

NETWORKING_TABLE: ScoreTable = ((0, 1), (4, 2), (8, 3), (12, 4), (16, 5))
NETWORKING_TABLE_HIGHEST: ScoreTable = ((0, 1), (8, 2), (16, 3), (24, 4), (32, 5))

# Weights shown on the review form; they sum to 1.0
INDICATOR_WEIGHTS: Dict[str, float] = {
    "resume_quality": 0.10,
    "application_effectiveness": 0.10,
    "behavioral_performance": 0.10,
    "networking_capability": 0.20,
    "technical_proficiency": 0.30,
    "energy_level": 0.20,
}

OUTSTANDING_THRESHOLD = 4.0
RED_FLAG_ENERGY_BELOW = 2


@dataclass
class MonthlyActivity:
    """Raw counts for one student and one reporting month."""
    applications: int = 0
    networking_interactions: int = 0
    latest_behavioral_rating: Optional[int] = None


def clamp_rating(value, upper: int = MAX_RATING) -> int:
    """
    Clamp a rating into [0, upper]. None becomes 0.

    Infinite values clamp to the nearest bound; NaN is not a rating and
    raises ValueError.
    """
    if value is None:
        return MIN_RATING
    if isinstance(value, float):
        if math.isnan(value):
            raise ValueError("Rating must be a number")
        if math.isinf(value):
            return upper if value > 0 else MIN_RATING
    return max(MIN_RATING, min(upper, int(value)))


def score_from_table(count: int, table: ScoreTable) -> int:
    """Return the rating of the highest step whose threshold the count reaches."""
    count = max(0, count)
    rating = table[0][1]
    for threshold, step_rating in table:
        if count < threshold:
            break
        rating = step_rating
    return rating


def application_score(count: int, highest_attention: bool = False) -> int:
    table = APPLICATION_TABLE_HIGHEST if highest_attention else APPLICATION_TABLE
    return score_from_table(count, table)


def networking_score(count: int, highest_attention: bool = False) -> int:
    table = NETWORKING_TABLE_HIGHEST if highest_attention else NETWORKING_TABLE
    return score_from_table(count, table)


def interview_to_indicator(overall_rating: int) -> int:
    """Map a 0-10 mock interview rating onto the 0-5 indicator scale (half up)."""
    rating = clamp_rating(overall_rating, MAX_INTERVIEW_RATING)
    return clamp_rating(math.floor(rating / 2 + 0.5))


def _carry(previous: Optional[Dict[str, int]], field: str, default: int) -> int:
    if previous and previous.get(field) is not None:
        return clamp_rating(previous[field])
    return default


def derive_seed_ratings(
    activity: MonthlyActivity,
    previous: Optional[Dict[str, int]] = None,
    highest_attention: bool = False,
) -> Dict[str, int]:
    """
    Default indicator values for a new review.

    Args:
        activity: this month's counts and latest behavioral interview rating
        previous: indicator values of the prior review, if any
        highest_attention: use the stricter count thresholds

    Returns:
        dict keyed by indicator field name
    """
    if activity.latest_behavioral_rating is not None:
        behavioral = interview_to_indicator(activity.latest_behavioral_rating)
    else:
        behavioral = _carry(previous, "behavioral_performance", DEFAULT_BEHAVIORAL_PERFORMANCE)

    return {
        "resume_quality": _carry(previous, "resume_quality", DEFAULT_RESUME_QUALITY),
        "application_effectiveness": application_score(activity.applications, highest_attention),
        "behavioral_performance": behavioral,
        "networking_capability": networking_score(activity.networking_interactions, highest_attention),
        "technical_proficiency": _carry(previous, "technical_proficiency", DEFAULT_TECHNICAL_PROFICIENCY),
        "energy_level": _carry(previous, "energy_level", DEFAULT_ENERGY_LEVEL),
    }


def weighted_overall(indicators: Dict[str, int]) -> float:
    """Weighted average of the six indicators on the 0-5 scale."""
    total = sum(
        clamp_rating(indicators.get(field)) * weight
        for field, weight in INDICATOR_WEIGHTS.items()
    )
    return round(total, 2)


def suggest_performance_rating(indicators: Dict[str, int]) -> str:
    """Red flag on low energy, outstanding at 4+ overall, otherwise medium."""
    if clamp_rating(indicators.get("energy_level")) < RED_FLAG_ENERGY_BELOW:
        return "red_flag"
    if weighted_overall(indicators) >= OUTSTANDING_THRESHOLD:
        return "outstanding"
    return "medium"
