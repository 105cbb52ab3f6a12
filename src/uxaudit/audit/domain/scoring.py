"""
Overall score aggregation.

Weighted average of the four scored phases, renormalized over the phases
that actually produced a score, minus a capped red-flag penalty.
"""

from typing import Mapping

from uxaudit.audit.domain.enums import PhaseName

PHASE_WEIGHTS: dict[PhaseName, float] = {
    PhaseName.FIRST_IMPRESSIONS: 0.15,
    PhaseName.INSTALLATION: 0.25,
    PhaseName.FUNCTIONALITY: 0.35,
    PhaseName.VERIFICATION: 0.15,
}

RED_FLAG_PENALTY_PER_FLAG = 0.1
RED_FLAG_PENALTY_CAP = 2.0


def clamp_score(value: float, low: float = 0.0, high: float = 10.0) -> float:
    """Clamp to [low, high] and round to one decimal."""
    return round(max(low, min(high, value)), 1)


def weighted_phase_score(phase_scores: Mapping[PhaseName, float | None]) -> float:
    """
    Weighted average over phases with a score.

    Phases missing from the mapping, or mapped to None, are excluded and the
    remaining weights are rescaled. Returns 0.0 when nothing scored.
    """
    total = 0.0
    weight_used = 0.0

    for phase, weight in PHASE_WEIGHTS.items():
        score = phase_scores.get(phase)
        if score is None:
            continue
        total += score * weight
        weight_used += weight

    if weight_used == 0:
        return 0.0
    return total / weight_used


def red_flag_penalty(flag_count: int) -> float:
    return min(max(flag_count, 0) * RED_FLAG_PENALTY_PER_FLAG, RED_FLAG_PENALTY_CAP)


def calculate_overall_score(phase_scores: Mapping[PhaseName, float | None], red_flag_count: int) -> float:
    """
    Combine phase scores and red flag count into one 0-10 score.

    Example:
        >>> calculate_overall_score({PhaseName.FIRST_IMPRESSIONS: 8, PhaseName.INSTALLATION: 9,
        ...                          PhaseName.FUNCTIONALITY: 7, PhaseName.VERIFICATION: 6}, 0)
        7.6
    """
    base = weighted_phase_score(phase_scores)
    return clamp_score(base - red_flag_penalty(red_flag_count))


def grade_for_score(score: float) -> str:
    """Letter grade for the report renderer."""
    if score >= 9:
        return "A+"
    if score >= 8:
        return "A"
    if score >= 7:
        return "B"
    if score >= 6:
        return "C"
    if score >= 4:
        return "D"
    return "F"
