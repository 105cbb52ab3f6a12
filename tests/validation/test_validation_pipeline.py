"""Tests for the three-cycle validation pipeline."""

import json

import pytest
from conftest import StubAgent, cycle_response

from uxaudit.audit.application.audit_orchestrator import AuditOrchestrator
from uxaudit.audit.domain.enums import PhaseName, Severity
from uxaudit.audit.domain.models import AuditConfig, PhaseResult, RedFlag
from uxaudit.shared.infrastructure.config import Settings
from uxaudit.validation.agents.offline import OfflineReasoningAgent
from uxaudit.validation.application.validation_pipeline import (
    ValidationPipeline,
    calculate_confidence,
    determine_status,
    final_score,
    parse_agent_response,
)
from uxaudit.validation.domain.models import CycleName, ValidationCycleResult, ValidationStatus

EXISTING_FLAG = RedFlag(
    severity=Severity.CRITICAL,
    category="project-structure",
    title="Missing README",
    description="Project is missing README",
    evidence=["README.md not found"],
)

AGENT_FLAG = {
    "severity": "medium",
    "category": "documentation",
    "title": "Examples are outdated",
    "description": "README examples use removed flags",
    "evidence": ["--legacy flag in README"],
    "fix": "Refresh examples",
}


def _cycle(score, passed=None, cycle=CycleName.CRITIQUE):
    return ValidationCycleResult(cycle=cycle, score=score, passed=score >= 5 if passed is None else passed)


async def _validate(agent, red_flags=None, phase_results=None):
    pipeline = ValidationPipeline(agent)
    return await pipeline.validate_async("/work/tool", phase_results or {}, red_flags or [EXISTING_FLAG])


class TestParseAgentResponse:
    """Test parse_agent_response."""

    def test_json_response(self):
        score, feedback, flags = parse_agent_response(cycle_response(8.5, ["Solid"], [AGENT_FLAG]))

        assert score == 8.5
        assert feedback == ["Solid"]
        assert flags[0].severity == Severity.MEDIUM
        assert flags[0].title == "Examples are outdated"

    def test_score_is_clamped(self):
        score, _, _ = parse_agent_response('{"score": 14, "feedback": []}')

        assert score == 10.0

    def test_malformed_json_uses_regex(self):
        score, feedback, flags = parse_agent_response('score: 6.5, feedback: ["partly ok"] (truncated')

        assert score == 6.5
        assert feedback == ["partly ok"]
        assert flags == []

    def test_invalid_red_flags_are_dropped(self):
        content = json.dumps({"score": 7, "feedback": [], "redFlags": [{"severity": "apocalyptic"}, "x", AGENT_FLAG]})

        _, _, flags = parse_agent_response(content)

        assert [f.title for f in flags] == ["Examples are outdated"]

    def test_string_feedback_is_one_entry(self):
        _, feedback, _ = parse_agent_response(json.dumps({"score": 8, "feedback": "Looks good"}))

        assert feedback == ["Looks good"]

    def test_non_list_feedback_is_ignored(self):
        _, feedback, _ = parse_agent_response(json.dumps({"score": 8, "feedback": {"note": "odd"}}))

        assert feedback == []

    @pytest.mark.parametrize(
        "override",
        [
            {"category": ["security"]},
            {"title": {"text": "T"}},
            {"description": 42},
            {"fix": ["Refresh examples"]},
            {"evidence": "--legacy flag in README"},
            {"evidence": [["nested"]]},
            {"location": ["README.md"]},
        ],
    )
    def test_red_flags_with_wrongly_typed_fields_are_dropped(self, override):
        content = json.dumps({"score": 7, "redFlags": [{**AGENT_FLAG, **override}, AGENT_FLAG]})

        _, _, flags = parse_agent_response(content)

        assert len(flags) == 1
        assert flags[0] == RedFlag.from_json(AGENT_FLAG)

    def test_non_list_red_flags_are_ignored(self):
        _, _, flags = parse_agent_response(json.dumps({"score": 7, "redFlags": AGENT_FLAG}))

        assert flags == []

    def test_no_score(self):
        with pytest.raises(ValueError):
            parse_agent_response("I refuse to answer")


class TestAggregation:
    """Test confidence, final score and status."""

    def test_three_passing_identical_cycles(self):
        cycles = [_cycle(8), _cycle(8), _cycle(8)]

        assert calculate_confidence(cycles) == pytest.approx(1.0)
        assert final_score(cycles) == 8.0

    def test_inconsistent_cycles_lower_confidence(self):
        cycles = [_cycle(9), _cycle(2), _cycle(9)]

        # variance > 10 zeroes consistency; 2 of 3 passed
        assert calculate_confidence(cycles) == pytest.approx(0.3 + 0.4 * 2 / 3)
        assert final_score(cycles) == 6.7

    def test_zero_scores_are_ignored(self):
        assert final_score([_cycle(0), _cycle(6), _cycle(8)]) == 7.0
        assert final_score([_cycle(0)]) == 5.0

    @pytest.mark.parametrize(
        "score,confidence,status",
        [
            (8.0, 0.9, ValidationStatus.VALIDATED),
            (6.0, 0.7, ValidationStatus.VALIDATED),
            (8.0, 0.5, ValidationStatus.UNVERIFIED),
            (5.9, 1.0, ValidationStatus.FAILED),
        ],
    )
    def test_status(self, score, confidence, status):
        assert determine_status(score, confidence) == status


class TestValidationPipeline:
    """Test ValidationPipeline.validate_async."""

    @pytest.mark.asyncio
    async def test_all_cycles_pass(self):
        agent = StubAgent([cycle_response(8), cycle_response(8), cycle_response(8)])

        result = await _validate(agent)

        assert result.status == ValidationStatus.VALIDATED
        assert result.passed
        assert result.score == 8.0
        assert result.confidence == pytest.approx(1.0)
        assert list(result.cycles) == ["critique", "meta-critique", "evidence"]
        assert all(cycle.agent == "stub" for cycle in result.cycles.values())
        assert [r.cycle for r in agent.requests] == ["critique", "meta-critique", "evidence"]

    @pytest.mark.asyncio
    async def test_meta_critique_sees_critique_feedback(self):
        agent = StubAgent([cycle_response(7, ["Missed the license check"]), cycle_response(7), cycle_response(7)])

        await _validate(agent)

        assert "Missed the license check" in agent.requests[1].user_message

    @pytest.mark.asyncio
    async def test_flags_from_first_two_cycles_are_added_and_reach_evidence_cycle(self):
        evidence_flag = {**AGENT_FLAG, "title": "Evidence cycle invention"}
        agent = StubAgent(
            [
                cycle_response(7, red_flags=[AGENT_FLAG]),
                cycle_response(7),
                cycle_response(7, red_flags=[evidence_flag]),
            ]
        )

        result = await _validate(agent)

        assert [f.title for f in result.additional_flags] == ["Examples are outdated"]
        assert "Examples are outdated" in agent.requests[2].user_message
        assert "Missing README" in agent.requests[2].user_message
        assert result.cycles["evidence"].red_flags == []

    @pytest.mark.asyncio
    async def test_offline_agent_falls_back_on_every_cycle(self):
        result = await _validate(OfflineReasoningAgent())

        assert result.score == 7.0
        assert result.confidence == pytest.approx(1.0)
        assert result.status == ValidationStatus.VALIDATED
        for name, cycle in result.cycles.items():
            assert cycle.fallback
            assert cycle.agent == f"{name} (fallback)"
            assert cycle.feedback[0] == "[Agent unavailable - fallback result]"

    @pytest.mark.asyncio
    async def test_unparseable_and_raising_cycles_fall_back(self):
        agent = StubAgent(["no score anywhere", RuntimeError("connection reset"), cycle_response(9)])

        result = await _validate(agent)

        assert result.cycles["critique"].fallback
        assert result.cycles["meta-critique"].fallback
        assert not result.cycles["evidence"].fallback
        assert result.cycles["evidence"].score == 9.0

    @pytest.mark.asyncio
    async def test_low_scores_fail(self):
        agent = StubAgent([cycle_response(3), cycle_response(4), cycle_response(3)])

        result = await _validate(agent)

        assert result.status == ValidationStatus.FAILED
        assert not result.passed
        assert not any(cycle.passed for cycle in result.cycles.values())

    @pytest.mark.asyncio
    async def test_disagreeing_cycles_are_unverified(self):
        agent = StubAgent([cycle_response(9), cycle_response(2), cycle_response(9)])

        result = await _validate(agent)

        assert result.score == 6.7
        assert result.status == ValidationStatus.UNVERIFIED

    @pytest.mark.asyncio
    async def test_pipeline_fault_yields_failed_result(self):
        broken = PhaseResult(phase=PhaseName.FIRST_IMPRESSIONS, success=True, duration=0.0, findings=object())

        result = await _validate(StubAgent(), phase_results={"first-impressions": broken})

        assert result.status == ValidationStatus.FAILED
        assert result.score == 0.0
        assert result.confidence == 0.0
        assert result.error is not None
        assert result.feedback[0].startswith("Validation error:")


class TestAgentFlagsThroughAudit:
    """Agent output with malformed flags still yields a complete audit."""

    @pytest.mark.asyncio
    async def test_list_category_does_not_break_flag_merge(self, tmp_path):
        bad_flag = {"severity": "high", "category": ["security"], "title": "T", "description": "d"}
        response = json.dumps({"score": 8, "redFlags": [bad_flag, AGENT_FLAG]})
        agent = StubAgent([response, response, response])
        orchestrator = AuditOrchestrator(agent=agent, settings=Settings(), phases=())

        session = await orchestrator.run_audit_async(tmp_path, AuditConfig(validation=True))

        assert session.validation.status == ValidationStatus.VALIDATED
        assert [f.title for f in session.red_flags] == ["Examples are outdated"]
        assert session.errors == []
