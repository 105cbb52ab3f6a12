"""
Verification Phase (Claim Verifier).

Pulls checkable claims out of the README and checks each one against the
tool. Extraction and verification are strategy tables keyed by ClaimType,
so a new claim kind is one extractor plus one verifier.
"""

import re
import shlex
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path

from uxaudit.audit.discovery.binary_discovery import DiscoveredBinary, discover_binary, resolve_binary_name
from uxaudit.audit.discovery.documentation import extract_fenced_blocks, find_readme
from uxaudit.audit.domain.enums import ClaimType, MatchStatus, PhaseName
from uxaudit.audit.domain.models import VerificationFindings, VerifiedClaim
from uxaudit.audit.domain.scoring import clamp_score
from uxaudit.audit.phases.base_phase import BasePhase
from uxaudit.shared.infrastructure.execution.command_executor import CLAIM_TIMEOUT, CommandOutcome
from uxaudit.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

VERSION_PATTERN = re.compile(r"version\s*:?\s*([\d.]+)", re.IGNORECASE)
FEATURE_PATTERNS = (
    re.compile(r"supports?\s+([a-z0-9_-]+)", re.IGNORECASE),
    re.compile(r"can\s+([a-z]+)", re.IGNORECASE),
    re.compile(r"enables?\s+([a-z]+)", re.IGNORECASE),
)
CONFIG_PATTERNS = (
    re.compile(r"config(?:uration)?\s+file\s*:?\s*([^\s\n]+)", re.IGNORECASE),
    re.compile(r"uses?\s+([^\s\n]+)\s+config", re.IGNORECASE),
)
SHELL_LANGUAGES = frozenset({"", "bash", "shell", "sh", "console"})
COMMANDS_PER_BLOCK = 3


@dataclass
class Claim:
    """A statement from the docs that can be checked."""

    text: str
    claim_type: ClaimType
    expected: str | None = None
    command: list[str] = field(default_factory=list)


# ============================================================================
# Extractors
# ============================================================================


def extract_version_claims(content: str) -> list[Claim]:
    match = VERSION_PATTERN.search(content)
    if not match:
        return []
    version = match.group(1).strip(".")
    if not version:
        return []
    return [Claim(text=f"Tool version is {version}", claim_type=ClaimType.VERSION, expected=version, command=["--version"])]


def extract_feature_claims(content: str) -> list[Claim]:
    claims = []
    for pattern in FEATURE_PATTERNS:
        for match in pattern.finditer(content):
            claims.append(Claim(text=f"Supports {match.group(1)}", claim_type=ClaimType.FEATURE, expected="supported"))
    return claims


def _strip_prompt(line: str) -> str:
    line = line.strip()
    if line.startswith("$ "):
        return line[2:].strip()
    return line


def extract_command_claims(content: str) -> list[Claim]:
    claims = []
    for block in extract_fenced_blocks(content):
        if block.language not in SHELL_LANGUAGES:
            continue
        lines = [_strip_prompt(line) for line in block.body.splitlines()]
        lines = [line for line in lines if line and not line.startswith("#")]
        for line in lines[:COMMANDS_PER_BLOCK]:
            try:
                parts = shlex.split(line)
            except ValueError:
                parts = line.split()
            if parts:
                claims.append(Claim(text=f"Command example: {line}", claim_type=ClaimType.COMMAND, command=parts))
    return claims


def extract_config_claims(content: str) -> list[Claim]:
    claims = []
    for pattern in CONFIG_PATTERNS:
        for match in pattern.finditer(content):
            config_file = match.group(1).rstrip(".,:;").strip("`'\"()")
            if config_file:
                claims.append(Claim(text=f"Uses config file: {config_file}", claim_type=ClaimType.CONFIG, expected=config_file))
    return claims


CLAIM_EXTRACTORS: dict[ClaimType, Callable[[str], list[Claim]]] = {
    ClaimType.VERSION: extract_version_claims,
    ClaimType.FEATURE: extract_feature_claims,
    ClaimType.COMMAND: extract_command_claims,
    ClaimType.CONFIG: extract_config_claims,
}


def extract_claims(content: str) -> list[Claim]:
    """Run every extractor; identical claim texts are kept once."""
    claims: list[Claim] = []
    seen: set[str] = set()
    for extractor in CLAIM_EXTRACTORS.values():
        for claim in extractor(content):
            if claim.text in seen:
                continue
            seen.add(claim.text)
            claims.append(claim)
    return claims


def calculate_verification_score(total: int, verified: int, accuracy_issues: int) -> float:
    """rate x 8, +2 at 100% or +1 at 90%, -1.5 per accuracy issue; 5 when nothing to check."""
    if total == 0:
        return 5.0
    rate = verified / total
    score = rate * 8
    if rate >= 1.0:
        score += 2
    elif rate >= 0.9:
        score += 1
    score -= accuracy_issues * 1.5
    return clamp_score(score)


class VerificationPhase(BasePhase):
    """Executor for the VERIFICATION phase."""

    name = PhaseName.VERIFICATION

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.binary: DiscoveredBinary | None = None
        self.tool_names: set[str] = set()
        self.verifiers: dict[ClaimType, Callable[[Claim], Awaitable[VerifiedClaim]]] = {
            ClaimType.VERSION: self._verify_version,
            ClaimType.FEATURE: self._verify_feature,
            ClaimType.COMMAND: self._verify_command,
            ClaimType.CONFIG: self._verify_config,
        }

    async def execute_async(self) -> VerificationFindings:
        logger.info("executing_phase", phase=self.name.value, target=str(self.target_path))

        readme = find_readme(self.target_path)
        claims = extract_claims(readme.content) if readme else []
        logger.debug("claims_extracted", count=len(claims))

        self.binary = discover_binary(self.target_path)
        self.tool_names = self._tool_names()

        verified_claims: list[VerifiedClaim] = []
        unverifiable: list[str] = []
        accuracy_issues: list[str] = []

        for claim in claims:
            self._emit("verifying_claim", claim=claim.text)
            result = await self.verifiers[claim.claim_type](claim)
            verified_claims.append(result)
            if result.verified:
                continue
            if result.mismatched:
                accuracy_issues.append(
                    f'Claim "{claim.text}" does not match: expected "{result.expected}", got "{result.actual}"'
                )
            else:
                unverifiable.append(claim.text)

        verified_count = sum(1 for c in verified_claims if c.verified)
        notes = self._notes(len(verified_claims), verified_count, accuracy_issues, unverifiable)
        score = calculate_verification_score(len(verified_claims), verified_count, len(accuracy_issues))

        logger.info(
            "verification_scored",
            claims=len(verified_claims),
            verified=verified_count,
            accuracy_issues=len(accuracy_issues),
            score=score,
        )

        return VerificationFindings(
            verified_claims=verified_claims,
            unverifiable_claims=unverifiable,
            accuracy_issues=accuracy_issues,
            score=score,
            notes=notes,
        )

    def _tool_names(self) -> set[str]:
        names = set()
        if self.binary is not None:
            names.add(Path(self.binary.path).name)
            names.add(Path(self.binary.path).stem)
        declared = resolve_binary_name(self.target_path)
        if declared:
            names.add(declared)
        names.add(self.target_path.resolve().name)
        return names

    async def _run(self, argv: list[str]) -> CommandOutcome:
        executable, args = argv[0], argv[1:]
        if self.binary is not None and executable in self.tool_names:
            executable, args = self.binary.argv(args)
        return await self.executor.run_async(executable, args, cwd=self.target_path, timeout=CLAIM_TIMEOUT)

    async def _verify_version(self, claim: Claim) -> VerifiedClaim:
        if self.binary is None:
            return VerifiedClaim(claim=claim.text, claim_type=claim.claim_type, verified=False, source="documentation", expected=claim.expected)

        executable, args = self.binary.argv(claim.command)
        outcome = await self.executor.run_async(executable, args, cwd=self.target_path, timeout=CLAIM_TIMEOUT)
        actual = outcome.stdout.strip() or outcome.stderr.strip()
        verified = bool(claim.expected) and claim.expected in actual
        return VerifiedClaim(
            claim=claim.text,
            claim_type=claim.claim_type,
            verified=verified,
            source=" ".join(claim.command),
            expected=claim.expected,
            actual=actual,
            match=MatchStatus.EXACT if verified else MatchStatus.NONE,
        )

    async def _verify_feature(self, claim: Claim) -> VerifiedClaim:
        # Free-text capability claims are not machine-checkable
        return VerifiedClaim(claim=claim.text, claim_type=claim.claim_type, verified=False, source="documentation")

    async def _verify_command(self, claim: Claim) -> VerifiedClaim:
        outcome = await self._run(claim.command)
        verified = outcome.did_not_fail
        if outcome.exit_code == 0:
            match = MatchStatus.EXACT
        elif verified:
            match = MatchStatus.PARTIAL
        else:
            match = MatchStatus.NONE
        return VerifiedClaim(
            claim=claim.text,
            claim_type=claim.claim_type,
            verified=verified,
            source=" ".join(claim.command),
            expected="exit code 0",
            actual=f"exit code {outcome.exit_code}",
            match=match,
        )

    async def _verify_config(self, claim: Claim) -> VerifiedClaim:
        root = self.target_path.resolve()
        candidate = (root / claim.expected).resolve()
        # Only files shipped with the tool count; absolute and ../ paths are outside it
        inside = candidate.is_relative_to(root)
        exists = inside and candidate.exists()
        if not inside:
            actual = "path outside project"
        else:
            actual = "file exists" if exists else "file not found"
        return VerifiedClaim(
            claim=claim.text,
            claim_type=claim.claim_type,
            verified=exists,
            source=claim.expected,
            expected=claim.expected,
            actual=actual,
            match=MatchStatus.EXACT if exists else MatchStatus.NONE,
        )

    @staticmethod
    def _notes(total: int, verified: int, accuracy_issues: list[str], unverifiable: list[str]) -> list[str]:
        notes = []
        if total == 0:
            notes.append("No verifiable claims found in documentation")
        else:
            rate = verified / total
            notes.append(f"Verified {verified}/{total} claims ({rate:.0%})")
            if rate >= 0.9:
                notes.append("Excellent documentation accuracy")
            elif rate >= 0.7:
                notes.append("Good documentation accuracy with some inconsistencies")
            elif rate >= 0.5:
                notes.append("Poor documentation accuracy - many claims don't match behavior")
            else:
                notes.append("CRITICAL: Documentation does not match actual tool behavior")
        if accuracy_issues:
            notes.append(f"Found {len(accuracy_issues)} documentation inaccuracies")
        if unverifiable:
            notes.append(f"{len(unverifiable)} claims could not be automatically verified")
        return notes
