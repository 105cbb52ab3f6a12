"""The six audit phases."""

from uxaudit.audit.phases.base_phase import BasePhase
from uxaudit.audit.phases.error_handling import ErrorHandlingPhase
from uxaudit.audit.phases.first_impressions import FirstImpressionsPhase
from uxaudit.audit.phases.functionality import FunctionalityPhase
from uxaudit.audit.phases.installation import InstallationPhase
from uxaudit.audit.phases.red_flags import RedFlagsPhase
from uxaudit.audit.phases.verification import VerificationPhase

__all__ = [
    "BasePhase",
    "FirstImpressionsPhase",
    "InstallationPhase",
    "FunctionalityPhase",
    "VerificationPhase",
    "ErrorHandlingPhase",
    "RedFlagsPhase",
]
