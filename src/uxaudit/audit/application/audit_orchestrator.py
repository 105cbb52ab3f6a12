"""
Audit Orchestrator.

Runs the six audit phases in order against one target and assembles the
AuditSession:

1. FIRST IMPRESSIONS: README, install instructions, examples
2. INSTALLATION: real install with the ecosystem's build tool
3. FUNCTIONALITY: command matrix against the discovered binary
4. VERIFICATION: documentation claims vs. observed behaviour
5. ERROR HANDLING: adversarial probes
6. RED FLAGS: static scan of the source tree

Only input and gate errors escape; a phase that raises is recorded as a
failed PhaseResult and the run continues.
"""

import time
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from pathlib import Path

from uxaudit.audit.domain.enums import PhaseName
from uxaudit.audit.domain.models import (
    FEATURE_VALIDATION,
    AccessDecision,
    AuditConfig,
    PhaseResult,
    RedFlag,
    merge_red_flags,
)
from uxaudit.audit.domain.scoring import calculate_overall_score
from uxaudit.audit.domain.session import AuditSession
from uxaudit.audit.phases.base_phase import BasePhase
from uxaudit.audit.phases.error_handling import ErrorHandlingPhase
from uxaudit.audit.phases.first_impressions import FirstImpressionsPhase
from uxaudit.audit.phases.functionality import FunctionalityPhase
from uxaudit.audit.phases.installation import InstallationPhase
from uxaudit.audit.phases.red_flags import RedFlagsPhase
from uxaudit.audit.phases.verification import VerificationPhase
from uxaudit.shared.domain.exceptions import AuditNotPermittedError, AuditPathNotFoundError
from uxaudit.shared.infrastructure.config import Settings, settings as default_settings
from uxaudit.shared.infrastructure.execution.command_executor import CommandExecutor
from uxaudit.shared.infrastructure.logging import get_logger
from uxaudit.validation.agents.base import ReasoningAgent
from uxaudit.validation.agents.factory import create_reasoning_agent
from uxaudit.validation.application.validation_pipeline import ValidationPipeline
from uxaudit.validation.domain.models import ValidationResult
from uxaudit.validation.infrastructure.artifact_store import save_validation_result

logger = get_logger(__name__)

DEFAULT_PHASES: tuple[type[BasePhase], ...] = (
    FirstImpressionsPhase,
    InstallationPhase,
    FunctionalityPhase,
    VerificationPhase,
    ErrorHandlingPhase,
    RedFlagsPhase,
)


class AuditOrchestrator:
    """Coordinates the six audit phases, validation and scoring."""

    def __init__(
        self,
        agent: ReasoningAgent | None = None,
        executor: CommandExecutor | None = None,
        settings: Settings | None = None,
        phases: Sequence[type[BasePhase]] = DEFAULT_PHASES,
        progress_callback: Callable | None = None,
    ):
        """
        Initialize orchestrator.

        Args:
            agent: Reasoning agent for validation (picked from settings if None)
            executor: Process runner shared by all phases
            settings: Process settings
            phases: Phase classes, run in the given order
            progress_callback: Optional callback for progress updates
        """
        self.settings = settings or default_settings
        self.agent = agent or create_reasoning_agent(self.settings)
        self.executor = executor or CommandExecutor()
        self.phases = tuple(phases)
        self.progress_callback = progress_callback
        self.validation_pipeline = ValidationPipeline(self.agent, self.settings)

    async def run_audit_async(
        self,
        target_path: str | Path,
        config: AuditConfig | None = None,
        access: AccessDecision | None = None,
    ) -> AuditSession:
        """
        Audit one tool.

        Args:
            target_path: Directory of the tool to audit
            config: Per-audit options
            access: Usage gate decision (defaults to permitting everything)

        Returns:
            Completed AuditSession

        Raises:
            AuditPathNotFoundError: If target_path does not exist
            AuditNotPermittedError: If the gate denies the audit
        """
        config = config or AuditConfig()
        access = access or AccessDecision.allow_all()
        target = Path(target_path)

        if not target.exists():
            raise AuditPathNotFoundError(f"Path not found: {target}", {"path": str(target)})
        if not access.audit_permitted:
            raise AuditNotPermittedError("Audit limit reached for this account", {"tier": config.tier})

        run_validation = config.validation
        if run_validation and not access.authorizes(FEATURE_VALIDATION):
            logger.warning("validation_not_authorized", tier=config.tier)
            run_validation = False

        logger.info("audit_started", target=str(target), tier=config.tier, validation=run_validation)
        start_time = time.perf_counter()

        session = AuditSession(target_path=str(target), config=config)

        for phase_class in self.phases:
            result = await self._run_phase(phase_class, target, config)
            session.phase_results[result.phase.value] = result
            session.errors.extend(f"{result.phase.value}: {error}" for error in result.errors)

        flags: list[RedFlag] = []
        for result in session.phase_results.values():
            flags.extend(result.red_flags)
        session.red_flags = merge_red_flags(flags)

        if run_validation:
            session.validation = await self.validation_pipeline.validate_async(
                str(target), session.phase_results, session.red_flags
            )
            if session.validation.additional_flags:
                session.red_flags = merge_red_flags([*session.red_flags, *session.validation.additional_flags])
            self._persist_validation(target, session)
        else:
            reason = "Validation disabled" if not config.validation else "Validation not included in current plan"
            session.validation = ValidationResult.skipped_result(reason)

        phase_scores = {PhaseName(name): result.score for name, result in session.phase_results.items()}
        session.score = calculate_overall_score(phase_scores, len(session.red_flags))
        session.completed_at = datetime.now(timezone.utc)

        logger.info(
            "audit_completed",
            target=str(target),
            score=session.score,
            grade=session.grade,
            red_flags=len(session.red_flags),
            duration=round(time.perf_counter() - start_time, 2),
        )
        return session

    async def _run_phase(self, phase_class: type[BasePhase], target: Path, config: AuditConfig) -> PhaseResult:
        phase = phase_class(
            target_path=target,
            config=config,
            executor=self.executor,
            progress_callback=self.progress_callback,
        )
        if self.progress_callback:
            self.progress_callback("phase_started", {"phase": phase.name.value})

        start_time = time.perf_counter()
        try:
            findings = await phase.execute_async()
            result = PhaseResult(
                phase=phase.name,
                success=True,
                duration=time.perf_counter() - start_time,
                findings=findings,
            )
        except Exception as e:
            logger.error("phase_failed", phase=phase.name.value, error=str(e), error_type=type(e).__name__)
            result = PhaseResult(
                phase=phase.name,
                success=False,
                duration=time.perf_counter() - start_time,
                errors=[str(e)],
            )

        logger.info("phase_completed", phase=phase.name.value, success=result.success, duration=round(result.duration, 2))
        if self.progress_callback:
            self.progress_callback("phase_completed", {"phase": phase.name.value, "success": result.success})
        return result

    def _persist_validation(self, target: Path, session: AuditSession) -> None:
        try:
            save_validation_result(target, session.validation, self.settings.artifact_dir_name)
        except OSError as e:
            logger.error("validation_artifact_write_failed", target=str(target), error=str(e))
            session.errors.append(f"Could not save validation artifact: {e}")
