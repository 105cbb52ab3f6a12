"""Tests for overall score aggregation."""

import pytest

from uxaudit.audit.domain.enums import PhaseName
from uxaudit.audit.domain.scoring import (
    calculate_overall_score,
    clamp_score,
    grade_for_score,
    red_flag_penalty,
    weighted_phase_score,
)

ALL_PHASES = {
    PhaseName.FIRST_IMPRESSIONS: 8.0,
    PhaseName.INSTALLATION: 9.0,
    PhaseName.FUNCTIONALITY: 7.0,
    PhaseName.VERIFICATION: 6.0,
}


class TestCalculateOverallScore:
    """Test the weighted average and red flag penalty."""

    def test_weighted_average_of_all_phases(self):
        assert calculate_overall_score(ALL_PHASES, 0) == 7.6

    def test_penalty_per_flag(self):
        assert calculate_overall_score(ALL_PHASES, 3) == 7.3

    def test_penalty_is_capped(self):
        assert red_flag_penalty(50) == 2.0
        assert calculate_overall_score(ALL_PHASES, 50) == 5.6

    def test_missing_installation_is_renormalized(self):
        scores = {**ALL_PHASES, PhaseName.INSTALLATION: None}

        # (8*0.15 + 7*0.35 + 6*0.15) / 0.65
        assert weighted_phase_score(scores) == pytest.approx(4.55 / 0.65)
        assert calculate_overall_score(scores, 0) == 7.0

    def test_unscored_phases_are_ignored(self):
        scores = {**ALL_PHASES, PhaseName.RED_FLAGS: 0.0, PhaseName.ERROR_HANDLING: 0.0}

        assert calculate_overall_score(scores, 0) == 7.6

    def test_nothing_scored(self):
        assert calculate_overall_score({}, 0) == 0.0

    def test_never_negative(self):
        scores = {PhaseName.FUNCTIONALITY: 0.5}

        assert calculate_overall_score(scores, 10) == 0.0


class TestClampScore:
    def test_clamps_and_rounds(self):
        assert clamp_score(11.2) == 10.0
        assert clamp_score(-3) == 0.0
        assert clamp_score(6.66) == 6.7


class TestGradeForScore:
    @pytest.mark.parametrize(
        "score,grade",
        [(9.5, "A+"), (8.0, "A"), (7.2, "B"), (6.0, "C"), (4.5, "D"), (3.9, "F")],
    )
    def test_grade_bands(self, score, grade):
        assert grade_for_score(score) == grade
