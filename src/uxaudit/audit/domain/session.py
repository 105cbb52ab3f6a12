"""
Audit session model.

The assembled record handed to the external report renderer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from uxaudit.audit.domain.enums import PhaseName
from uxaudit.audit.domain.models import AuditConfig, PhaseResult, RedFlag, count_by_severity
from uxaudit.audit.domain.scoring import grade_for_score
from uxaudit.shared.domain.base_model import BaseDomainModel
from uxaudit.validation.domain.models import ValidationResult


@dataclass
class AuditSession(BaseDomainModel):
    """One completed audit run."""

    target_path: str
    config: AuditConfig
    phase_results: Dict[str, PhaseResult] = field(default_factory=dict)
    red_flags: List[RedFlag] = field(default_factory=list)
    score: float = 0.0
    completed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    validation: Optional[ValidationResult] = None
    errors: List[str] = field(default_factory=list)

    @property
    def grade(self) -> str:
        return grade_for_score(self.score)

    def findings(self, phase: PhaseName) -> Any:
        result = self.phase_results.get(phase.value)
        return result.findings if result else None

    def to_json(self) -> Dict[str, Any]:
        data = super().to_json()
        data["grade"] = self.grade
        data["severityCounts"] = count_by_severity(self.red_flags)
        return data
