"""
Audit domain models.

Core entities produced by the six audit phases: red flags, per-phase
findings, phase results, and the audit configuration and access decision
that the caller hands to the orchestrator.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from uxaudit.audit.domain.enums import ClaimType, Ecosystem, MatchStatus, PhaseName, Severity
from uxaudit.shared.domain.base_model import BaseDomainModel


@dataclass
class RedFlag(BaseDomainModel):
    """
    A discrete, categorized defect finding.

    Two flags with the same (category, title) describe the same defect and
    are merged by merge_red_flags().
    """

    severity: Severity
    category: str
    title: str
    description: str
    evidence: List[str] = field(default_factory=list)
    fix: str = ""
    location: Optional[str] = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.category, self.title)


def merge_red_flags(flags: Iterable[RedFlag]) -> List[RedFlag]:
    """
    Deduplicate red flags by (category, title).

    The first occurrence keeps its position and fields; evidence from later
    occurrences is appended in order, without repeating strings. Input flags
    are not modified.
    """
    merged: Dict[tuple[str, str], RedFlag] = {}

    for flag in flags:
        existing = merged.get(flag.key)
        if existing is None:
            merged[flag.key] = dataclasses.replace(flag, evidence=list(dict.fromkeys(flag.evidence)))
            continue
        for item in flag.evidence:
            if item not in existing.evidence:
                existing.evidence.append(item)

    return list(merged.values())


def count_by_severity(flags: Iterable[RedFlag]) -> Dict[str, int]:
    counts = {severity.value: 0 for severity in Severity}
    for flag in flags:
        counts[flag.severity.value] += 1
    return counts


# ============================================================================
# Phase findings
# ============================================================================


@dataclass
class FirstImpressionsFindings(BaseDomainModel):
    """Phase 1: README quality, install instructions, examples, clarity."""

    has_readme: bool
    readme_score: float
    has_install_instructions: bool
    has_examples: bool
    description_clarity: float
    score: float
    notes: List[str] = field(default_factory=list)
    readme_file: Optional[str] = None

    @property
    def scored(self) -> bool:
        return True


@dataclass
class InstallationFindings(BaseDomainModel):
    """Phase 2: outcome of actually installing the tool."""

    attempted: bool
    success: bool
    duration: float
    score: float
    ecosystem: Ecosystem = Ecosystem.UNKNOWN
    method: Optional[str] = None
    binary_name: Optional[str] = None
    missing_prerequisites: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)

    @property
    def scored(self) -> bool:
        # An install that was never attempted carries no signal about the tool
        return self.attempted


@dataclass
class CommandTest(BaseDomainModel):
    """One command from the functionality matrix."""

    command: str
    success: bool
    duration: float
    exit_code: Optional[int] = None
    output: Optional[str] = None
    error: Optional[str] = None


@dataclass
class FunctionalityFindings(BaseDomainModel):
    """Phase 3: command matrix results and documented-but-missing features."""

    commands_tested: List[CommandTest]
    successful_executions: int
    failed_executions: int
    missing_features: List[str]
    score: float
    notes: List[str] = field(default_factory=list)
    binary: Optional[str] = None

    @property
    def scored(self) -> bool:
        return True


@dataclass
class VerifiedClaim(BaseDomainModel):
    """A documentation claim and the result of checking it."""

    claim: str
    claim_type: ClaimType
    verified: bool
    source: Optional[str] = None
    expected: Optional[str] = None
    actual: Optional[str] = None
    match: Optional[MatchStatus] = None

    @property
    def mismatched(self) -> bool:
        """The claim was executed and produced a different result."""
        return not self.verified and self.actual is not None


@dataclass
class VerificationFindings(BaseDomainModel):
    """Phase 4: claims extracted from docs and how many held up."""

    verified_claims: List[VerifiedClaim]
    unverifiable_claims: List[str]
    accuracy_issues: List[str]
    score: float
    notes: List[str] = field(default_factory=list)

    @property
    def scored(self) -> bool:
        return True


@dataclass
class RedFlagFindings(BaseDomainModel):
    """Phases 5 and 6: red flags plus informational notes, no score."""

    red_flags: List[RedFlag] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)

    @property
    def scored(self) -> bool:
        return False


PhaseFindings = Union[
    FirstImpressionsFindings,
    InstallationFindings,
    FunctionalityFindings,
    VerificationFindings,
    RedFlagFindings,
]

FINDINGS_BY_PHASE: Dict[PhaseName, type] = {
    PhaseName.FIRST_IMPRESSIONS: FirstImpressionsFindings,
    PhaseName.INSTALLATION: InstallationFindings,
    PhaseName.FUNCTIONALITY: FunctionalityFindings,
    PhaseName.VERIFICATION: VerificationFindings,
    PhaseName.ERROR_HANDLING: RedFlagFindings,
    PhaseName.RED_FLAGS: RedFlagFindings,
}


@dataclass
class PhaseResult(BaseDomainModel):
    """Outcome of one phase invocation."""

    phase: PhaseName
    success: bool
    duration: float
    findings: Optional[PhaseFindings] = None
    errors: List[str] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> PhaseResult:
        """Deserialize, restoring findings as the dataclass that belongs to the phase."""
        result = super().from_json(data)
        if isinstance(result.findings, dict):
            result.findings = FINDINGS_BY_PHASE[result.phase].from_json(result.findings)
        return result

    @property
    def score(self) -> Optional[float]:
        """Phase score when the phase produced one that should be aggregated."""
        if not self.success or self.findings is None:
            return None
        if not getattr(self.findings, "scored", False):
            return None
        return self.findings.score

    @property
    def red_flags(self) -> List[RedFlag]:
        if isinstance(self.findings, RedFlagFindings):
            return self.findings.red_flags
        return []


# ============================================================================
# Caller-supplied inputs
# ============================================================================


@dataclass
class AuditConfig(BaseDomainModel):
    """Per-audit options supplied by the front end."""

    output: str = "uxaudit-report.json"
    validation: bool = True
    tier: str = "free"
    verbose: bool = False
    context: Optional[str] = None


FEATURE_VALIDATION = "validation"


@dataclass(frozen=True)
class AccessDecision:
    """
    Decision from the usage/licensing gate.

    The gate itself lives outside the core; the orchestrator only reads
    these two answers.
    """

    audit_permitted: bool = True
    authorized_features: frozenset[str] = frozenset()

    def authorizes(self, feature: str) -> bool:
        return feature in self.authorized_features

    @classmethod
    def allow_all(cls) -> "AccessDecision":
        return cls(audit_permitted=True, authorized_features=frozenset({FEATURE_VALIDATION}))
