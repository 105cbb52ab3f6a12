"""
Functionality Phase.

Runs a fixed matrix of common invocations against the discovered binary and
compares the README's feature list with what actually worked.
"""

import re

from uxaudit.audit.discovery.binary_discovery import DiscoveredBinary, discover_binary
from uxaudit.audit.discovery.documentation import extract_feature_list, find_readme
from uxaudit.audit.domain.enums import PhaseName
from uxaudit.audit.domain.models import CommandTest, FunctionalityFindings
from uxaudit.audit.domain.scoring import clamp_score
from uxaudit.audit.phases.base_phase import BasePhase
from uxaudit.shared.infrastructure.execution.command_executor import FUNCTIONALITY_TIMEOUT
from uxaudit.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

NO_ARGS_LABEL = "(no args)"

COMMAND_MATRIX: tuple[tuple[str, ...], ...] = (
    ("--help",),
    ("--version",),
    (),
    ("init",),
    ("build",),
    ("test",),
    ("run",),
    ("status",),
    ("list",),
    ("info",),
    ("--verbose",),
    ("--dry-run",),
)

_OUTPUT_LIMIT = 500
_WORD = re.compile(r"[a-z0-9][a-z0-9_-]*")


def calculate_functionality_score(tested: int, successful: int, missing_features: int) -> float:
    """rate x 7, +2 at 90% or +1 at 70%, -0.5 per missing feature."""
    if tested == 0:
        return 0.0
    rate = successful / tested
    score = rate * 7
    if rate >= 0.9:
        score += 2
    elif rate >= 0.7:
        score += 1
    score -= missing_features * 0.5
    return clamp_score(score)


def find_missing_features(features: list[str], tests: list[CommandTest]) -> list[str]:
    """
    Documented features with no matching successful subcommand.

    A feature counts as implemented when one of its words names a
    subcommand that exited cleanly.
    """
    working = {
        t.command
        for t in tests
        if t.success and t.command != NO_ARGS_LABEL and not t.command.startswith("-")
    }
    missing = []
    for feature in features:
        words = set(_WORD.findall(feature.lower()))
        if not words & working:
            missing.append(feature)
    return missing


class FunctionalityPhase(BasePhase):
    """Executor for the FUNCTIONALITY phase."""

    name = PhaseName.FUNCTIONALITY

    async def execute_async(self) -> FunctionalityFindings:
        logger.info("executing_phase", phase=self.name.value, target=str(self.target_path))

        binary = discover_binary(self.target_path)
        if binary is None:
            return FunctionalityFindings(
                commands_tested=[],
                successful_executions=0,
                failed_executions=0,
                missing_features=["Could not discover CLI binary"],
                score=0.0,
                notes=["CRITICAL: Could not find executable binary to test"],
            )

        tests = []
        for args in COMMAND_MATRIX:
            self._emit("testing_command", command=" ".join(args) or NO_ARGS_LABEL)
            tests.append(await self._test_command(binary, list(args)))

        readme = find_readme(self.target_path)
        features = extract_feature_list(readme.content) if readme else []
        missing = find_missing_features(features, tests)

        successful = sum(1 for t in tests if t.success)
        failed = len(tests) - successful
        notes = [f"Binary: {binary.display} (found via {binary.strategy})"]

        rate = successful / len(tests)
        notes.append(f"Success rate: {rate:.0%} ({successful}/{len(tests)})")
        if rate >= 0.9:
            notes.append("Excellent success rate - tool is reliable")
        elif rate >= 0.7:
            notes.append("Good success rate - some commands may need attention")
        else:
            notes.append("Poor success rate - many commands failing")
        if missing:
            notes.append(f"{len(missing)} documented features appear to be missing or broken")

        score = calculate_functionality_score(len(tests), successful, len(missing))
        logger.info("functionality_scored", tested=len(tests), successful=successful, missing=len(missing), score=score)

        return FunctionalityFindings(
            commands_tested=tests,
            successful_executions=successful,
            failed_executions=failed,
            missing_features=missing,
            score=score,
            notes=notes,
            binary=binary.display,
        )

    async def _test_command(self, binary: DiscoveredBinary, args: list[str]) -> CommandTest:
        executable, argv = binary.argv(args)
        outcome = await self.executor.run_async(executable, argv, cwd=self.target_path, timeout=FUNCTIONALITY_TIMEOUT)
        success = outcome.did_not_fail
        return CommandTest(
            command=" ".join(args) if args else NO_ARGS_LABEL,
            success=success,
            duration=outcome.duration,
            exit_code=outcome.exit_code,
            output=outcome.stdout[:_OUTPUT_LIMIT] or None,
            error=None if success else (outcome.stderr[:_OUTPUT_LIMIT] or None),
        )
