"""
Installation Phase.

Detects the project's ecosystem, checks that its build tool is present and
then runs the real install command inside the audited directory.
"""

import shutil
import time

from uxaudit.audit.discovery.binary_discovery import resolve_binary_name
from uxaudit.audit.discovery.ecosystem import EcosystemInfo, detect_ecosystem
from uxaudit.audit.domain.enums import PhaseName
from uxaudit.audit.domain.models import InstallationFindings
from uxaudit.audit.domain.scoring import clamp_score
from uxaudit.audit.phases.base_phase import BasePhase
from uxaudit.shared.infrastructure.execution.command_executor import INSTALL_TIMEOUT, PREREQUISITE_TIMEOUT
from uxaudit.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

FAST_INSTALL_SECONDS = 10.0
SLOW_WARNING_SECONDS = 30.0
VERY_SLOW_SECONDS = 60.0


def calculate_installation_score(success: bool, duration: float, has_warnings: bool) -> float:
    """
    Score an attempted installation.

    7 base on success, +2 under 10s or +1 under 30s, -1 over 60s,
    -0.5 when any warning was raised. A failed install scores 0.
    """
    if not success:
        return 0.0

    score = 7.0
    if duration < FAST_INSTALL_SECONDS:
        score += 2
    elif duration < SLOW_WARNING_SECONDS:
        score += 1
    elif duration > VERY_SLOW_SECONDS:
        score -= 1

    if has_warnings:
        score -= 0.5

    return clamp_score(score)


class InstallationPhase(BasePhase):
    """Executor for the INSTALLATION phase."""

    name = PhaseName.INSTALLATION

    async def execute_async(self) -> InstallationFindings:
        logger.info("executing_phase", phase=self.name.value, target=str(self.target_path))
        start_time = time.perf_counter()

        info = detect_ecosystem(self.target_path)
        logger.debug("ecosystem_detected", ecosystem=info.ecosystem.value, marker=info.marker)

        if not info.installable:
            return InstallationFindings(
                attempted=False,
                success=False,
                duration=time.perf_counter() - start_time,
                score=0.0,
                ecosystem=info.ecosystem,
                errors=[f"Unsupported package type: {info.ecosystem.value}"],
                notes=[
                    f"Package type '{info.ecosystem.value}' cannot be auto-tested",
                    "Manual installation testing required",
                ],
            )

        profile = info.profile
        method = profile.install.display

        missing = await self._check_prerequisites(info)
        if missing:
            return InstallationFindings(
                attempted=False,
                success=False,
                duration=time.perf_counter() - start_time,
                score=0.0,
                ecosystem=info.ecosystem,
                method=method,
                missing_prerequisites=missing,
                errors=[f"{tool} is not installed" for tool in missing],
                notes=["Missing prerequisites for installation", *missing],
            )

        self._emit("installing", method=method)
        notes = [f"Installation method: {method}"]
        errors: list[str] = []
        warnings: list[str] = []
        binary_name = None

        outcome = await self.executor.run_async(
            profile.install.executable,
            list(profile.install.args),
            cwd=self.target_path,
            timeout=INSTALL_TIMEOUT,
        )
        duration = time.perf_counter() - start_time
        success = outcome.succeeded

        if success:
            notes.append("Installation completed successfully")
            if outcome.duration < FAST_INSTALL_SECONDS:
                notes.append(f"Fast installation ({outcome.duration:.1f}s)")
            elif outcome.duration > SLOW_WARNING_SECONDS:
                warnings.append(f"Slow installation ({outcome.duration:.1f}s)")

            binary_name = resolve_binary_name(self.target_path)
            if binary_name and shutil.which(binary_name):
                notes.append(f"Binary installed: {binary_name}")
            else:
                warnings.append("Binary not found in PATH after installation")
        else:
            if outcome.timed_out:
                errors.append(f"Installation timed out after {INSTALL_TIMEOUT:.0f}s")
            else:
                errors.append(f"Installation failed with exit code {outcome.exit_code}")
            if outcome.stderr:
                errors.append(f"Error output: {outcome.stderr[:200]}")

        score = calculate_installation_score(success, duration, bool(warnings))
        logger.info("installation_scored", ecosystem=info.ecosystem.value, success=success, score=score)

        return InstallationFindings(
            attempted=True,
            success=success,
            duration=duration,
            score=score,
            ecosystem=info.ecosystem,
            method=method,
            binary_name=binary_name,
            errors=errors,
            warnings=warnings,
            notes=notes,
        )

    async def _check_prerequisites(self, info: EcosystemInfo) -> list[str]:
        probe = info.profile.prerequisite
        outcome = await self.executor.run_async(probe.executable, list(probe.args), timeout=PREREQUISITE_TIMEOUT)
        if outcome.succeeded:
            return []
        logger.warning("prerequisite_missing", tool=info.profile.tool_name, exit_code=outcome.exit_code)
        return [info.profile.tool_name]
