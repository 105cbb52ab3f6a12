"""Audit domain models and scoring."""

from uxaudit.audit.domain.enums import ClaimType, Ecosystem, MatchStatus, PhaseName, Severity
from uxaudit.audit.domain.models import (
    AccessDecision,
    AuditConfig,
    CommandTest,
    FirstImpressionsFindings,
    FunctionalityFindings,
    InstallationFindings,
    PhaseResult,
    RedFlag,
    RedFlagFindings,
    VerificationFindings,
    VerifiedClaim,
    merge_red_flags,
)
from uxaudit.audit.domain.scoring import calculate_overall_score, grade_for_score

__all__ = [
    # Enums
    "ClaimType",
    "Ecosystem",
    "MatchStatus",
    "PhaseName",
    "Severity",
    # Models
    "AccessDecision",
    "AuditConfig",
    "CommandTest",
    "FirstImpressionsFindings",
    "FunctionalityFindings",
    "InstallationFindings",
    "PhaseResult",
    "RedFlag",
    "RedFlagFindings",
    "VerificationFindings",
    "VerifiedClaim",
    "merge_red_flags",
    # Scoring
    "calculate_overall_score",
    "grade_for_score",
]
