"""
Domain exceptions for uxaudit.

All application errors inherit from UxAuditError. Only input and gate errors
ever escape the orchestrator; everything else is recovered into phase
results, notes or fallback validation cycles.
"""


class UxAuditError(Exception):
    """Base class for all uxaudit exceptions."""

    def __init__(self, message: str, context: dict = None):
        super().__init__(message)
        self.context = context or {}


class AuditPathNotFoundError(UxAuditError):
    """Raised when the audited path does not exist."""

    pass


class AuditNotPermittedError(UxAuditError):
    """Raised when the usage gate reports no remaining audits."""

    pass


class ConfigurationError(UxAuditError):
    """Raised when configuration is invalid or corrupt."""

    pass


class AgentUnavailableError(UxAuditError):
    """Raised when the reasoning agent backend cannot be reached."""

    pass
