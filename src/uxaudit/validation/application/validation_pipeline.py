"""
Validation Pipeline.

Three sequential review cycles over an audit's findings:

1. critique       - obvious errors, missing or unjustified red flags
2. meta-critique  - bias and blind spots in cycle 1 (receives its result)
3. evidence       - evidence quality of every flag, including the ones the
                    first two cycles added

A cycle whose agent is unavailable, errors out or answers with nothing
parseable resolves to a fallback result instead of failing the run. Only a
fault in the pipeline itself produces a ``failed`` ValidationResult.
"""

import statistics
import time
from collections.abc import Mapping, Sequence
from typing import Any

from uxaudit.audit.domain.models import PhaseResult, RedFlag
from uxaudit.audit.domain.scoring import clamp_score
from uxaudit.shared.domain.exceptions import AgentUnavailableError
from uxaudit.shared.infrastructure.config import Settings, settings as default_settings
from uxaudit.shared.infrastructure.logging import get_logger
from uxaudit.shared.utils.json_parser import extract_score_fallback, parse_json_from_llm
from uxaudit.validation.agents.base import AgentRequest, ReasoningAgent
from uxaudit.validation.application.prompts import (
    SYSTEM_PROMPT,
    build_audit_summary,
    critique_prompt,
    evidence_prompt,
    meta_critique_prompt,
)
from uxaudit.validation.domain.models import (
    CONFIDENCE_THRESHOLD,
    CYCLE_PASS_THRESHOLD,
    FALLBACK_SCORE,
    VALIDATION_PASS_THRESHOLD,
    CycleName,
    ValidationCycleResult,
    ValidationResult,
    ValidationStatus,
)

logger = get_logger(__name__)

NEUTRAL_SCORE = 5.0
VARIANCE_SCALE = 10.0

_FALLBACK_FEEDBACK = {
    CycleName.CRITIQUE: ["Audit structure appears sound", "Consider checking for missing edge cases"],
    CycleName.META_CRITIQUE: ["Critique appears reasonably unbiased", "Minor blind spots possible but acceptable"],
    CycleName.EVIDENCE: ["Evidence quality appears moderate", "Red flags are generally well-documented"],
}


def parse_agent_response(content: str) -> tuple[float, list[str], list[RedFlag]]:
    """
    Turn raw agent text into (score, feedback, red_flags).

    Falls back to regex extraction when the JSON is malformed.

    Raises:
        ValueError: If no score can be recovered at all
    """
    parsed = parse_json_from_llm(content)
    if isinstance(parsed, dict) and isinstance(parsed.get("score"), (int, float)):
        raw_feedback = parsed.get("feedback") or []
        if isinstance(raw_feedback, str):
            raw_feedback = [raw_feedback]
        elif not isinstance(raw_feedback, list):
            raw_feedback = []
        feedback = [str(item) for item in raw_feedback if item]
        return clamp_score(float(parsed["score"])), feedback, _parse_red_flags(parsed.get("redFlags"))

    score, feedback = extract_score_fallback(content)
    if score is None:
        raise ValueError("Agent response contained no score")
    return clamp_score(score), feedback or ["Unable to parse agent response"], []


_FLAG_TEXT_FIELDS = ("category", "title", "description", "fix")


def _check_red_flag_types(item: dict) -> None:
    for key in _FLAG_TEXT_FIELDS:
        if key in item and not isinstance(item[key], str):
            raise TypeError(f"{key} must be a string")
    if item.get("location") is not None and not isinstance(item["location"], str):
        raise TypeError("location must be a string")
    evidence = item.get("evidence", [])
    if not isinstance(evidence, list) or not all(isinstance(entry, str) for entry in evidence):
        raise TypeError("evidence must be a list of strings")


def _parse_red_flags(raw: Any) -> list[RedFlag]:
    if not isinstance(raw, list):
        return []
    flags = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        try:
            _check_red_flag_types(item)
            flags.append(RedFlag.from_json(item))
        except (ValueError, TypeError, AttributeError) as e:
            logger.debug("agent_red_flag_rejected", error=str(e))
    return flags


def calculate_confidence(cycles: Sequence[ValidationCycleResult]) -> float:
    """
    Confidence in the validation verdict (0-1).

    0.3 x completion + 0.3 x score consistency + 0.4 x pass rate, where
    consistency is ``max(0, 1 - variance / 10)`` over the cycle scores.
    """
    if not cycles:
        return 0.0

    completion = len(cycles) / len(CycleName)
    variance = statistics.pvariance([c.score for c in cycles])
    consistency = max(0.0, 1 - variance / VARIANCE_SCALE)
    pass_rate = sum(1 for c in cycles if c.passed) / len(cycles)

    return 0.3 * completion + 0.3 * consistency + 0.4 * pass_rate


def final_score(cycles: Sequence[ValidationCycleResult]) -> float:
    scores = [c.score for c in cycles if c.score > 0]
    if not scores:
        return NEUTRAL_SCORE
    return round(sum(scores) / len(scores), 1)


def determine_status(score: float, confidence: float) -> ValidationStatus:
    if score >= VALIDATION_PASS_THRESHOLD:
        if confidence >= CONFIDENCE_THRESHOLD:
            return ValidationStatus.VALIDATED
        return ValidationStatus.UNVERIFIED
    return ValidationStatus.FAILED


class ValidationPipeline:
    """Runs the three validation cycles against an injected reasoning agent."""

    def __init__(self, agent: ReasoningAgent, settings: Settings | None = None):
        self.agent = agent
        self.settings = settings or default_settings

    async def validate_async(
        self,
        target_path: str,
        phase_results: Mapping[str, PhaseResult],
        red_flags: Sequence[RedFlag],
    ) -> ValidationResult:
        """
        Validate an audit's findings.

        Args:
            target_path: Audited path, used in the prompts
            phase_results: Phase results keyed by phase name
            red_flags: Merged red flags from the audit

        Returns:
            ValidationResult; never raises
        """
        start_time = time.perf_counter()
        logger.info("validation_started", agent=self.agent.name, red_flags=len(red_flags))

        try:
            summary = build_audit_summary(target_path, phase_results, red_flags)

            critique = await self._run_cycle(CycleName.CRITIQUE, critique_prompt(summary))
            meta = await self._run_cycle(CycleName.META_CRITIQUE, meta_critique_prompt(summary, critique))

            additional_flags = [*critique.red_flags, *meta.red_flags]
            evidence = await self._run_cycle(
                CycleName.EVIDENCE,
                evidence_prompt([*red_flags, *additional_flags]),
                collect_flags=False,
            )

            cycles = [critique, meta, evidence]
            score = final_score(cycles)
            confidence = calculate_confidence(cycles)
            status = determine_status(score, confidence)

            logger.info(
                "validation_completed",
                score=score,
                confidence=confidence,
                status=status.value,
                duration=round(time.perf_counter() - start_time, 2),
            )

            return ValidationResult(
                passed=score >= VALIDATION_PASS_THRESHOLD,
                score=score,
                status=status,
                confidence=confidence,
                feedback=[item for cycle in cycles for item in cycle.feedback],
                additional_flags=additional_flags,
                cycles={cycle.cycle.value: cycle for cycle in cycles},
            )

        except Exception as e:
            logger.error("validation_failed", error=str(e), error_type=type(e).__name__)
            return ValidationResult(
                passed=False,
                score=0.0,
                status=ValidationStatus.FAILED,
                confidence=0.0,
                feedback=[f"Validation error: {e}"],
                error=str(e),
            )

    async def _run_cycle(self, cycle: CycleName, prompt: str, collect_flags: bool = True) -> ValidationCycleResult:
        start_time = time.perf_counter()
        request = AgentRequest(
            system_prompt=SYSTEM_PROMPT,
            user_message=prompt,
            cycle=cycle.value,
            timeout_seconds=self.settings.agent_timeout_seconds,
        )

        try:
            if not await self.agent.is_available_async():
                raise AgentUnavailableError(f"Agent {self.agent.name} is not available", {"cycle": cycle.value})

            response = await self.agent.send_async(request)
            if not response.success:
                raise AgentUnavailableError(
                    response.error_message or "Agent request failed",
                    {"cycle": cycle.value, "agent": response.agent},
                )

            score, feedback, flags = parse_agent_response(response.content)

        except Exception as e:
            logger.warning("validation_cycle_fallback", cycle=cycle.value, error=str(e))
            return ValidationCycleResult(
                cycle=cycle,
                score=FALLBACK_SCORE,
                feedback=["[Agent unavailable - fallback result]", *_FALLBACK_FEEDBACK[cycle]],
                agent=f"{cycle.value} (fallback)",
                duration=time.perf_counter() - start_time,
                passed=True,
                fallback=True,
            )

        logger.debug("validation_cycle_completed", cycle=cycle.value, score=score, flags=len(flags))
        return ValidationCycleResult(
            cycle=cycle,
            score=score,
            feedback=feedback,
            red_flags=flags if collect_flags else [],
            agent=self.agent.name,
            duration=time.perf_counter() - start_time,
            passed=score >= CYCLE_PASS_THRESHOLD,
        )
