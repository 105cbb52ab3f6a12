"""uxaudit - audit command-line tools from a first-time user's perspective."""

__version__ = "0.1.0"

from uxaudit.audit.application.audit_orchestrator import AuditOrchestrator
from uxaudit.audit.domain.enums import PhaseName, Severity
from uxaudit.audit.domain.models import AccessDecision, AuditConfig, PhaseResult, RedFlag
from uxaudit.audit.domain.session import AuditSession
from uxaudit.validation.domain.models import ValidationResult, ValidationStatus

__all__ = [
    "__version__",
    "AuditOrchestrator",
    "AuditConfig",
    "AccessDecision",
    "AuditSession",
    "PhaseName",
    "PhaseResult",
    "RedFlag",
    "Severity",
    "ValidationResult",
    "ValidationStatus",
]
