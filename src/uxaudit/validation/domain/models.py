"""
Validation domain models.

Results of the three-cycle validation pipeline. ValidationResult is the only
entity the core persists (as a write-once JSON artifact), so it round-trips
through to_json()/from_json().
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from uxaudit.audit.domain.models import RedFlag
from uxaudit.shared.domain.base_model import BaseDomainModel

CYCLE_PASS_THRESHOLD = 5.0
VALIDATION_PASS_THRESHOLD = 6.0
CONFIDENCE_THRESHOLD = 0.7
FALLBACK_SCORE = 7.0


class ValidationStatus(str, Enum):
    VALIDATED = "validated"
    UNVERIFIED = "unverified"
    FAILED = "failed"
    SKIPPED = "skipped"


class CycleName(str, Enum):
    """The three validation cycles, in execution order."""

    CRITIQUE = "critique"
    META_CRITIQUE = "meta-critique"
    EVIDENCE = "evidence"


@dataclass
class ValidationCycleResult(BaseDomainModel):
    """Outcome of one validation cycle."""

    cycle: CycleName
    score: float
    feedback: List[str] = field(default_factory=list)
    red_flags: List[RedFlag] = field(default_factory=list)
    agent: str = ""
    duration: float = 0.0
    passed: bool = False
    fallback: bool = False


@dataclass
class ValidationResult(BaseDomainModel):
    """Aggregate verdict of the validation pipeline."""

    passed: bool
    score: float
    status: ValidationStatus
    confidence: float
    feedback: List[str] = field(default_factory=list)
    additional_flags: List[RedFlag] = field(default_factory=list)
    cycles: Dict[str, ValidationCycleResult] = field(default_factory=dict)
    validated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    error: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return self.status == ValidationStatus.SKIPPED

    @classmethod
    def skipped_result(cls, reason: Optional[str] = None) -> "ValidationResult":
        """Result used when validation is disabled or not authorized."""
        return cls(
            passed=True,
            score=0.0,
            status=ValidationStatus.SKIPPED,
            confidence=0.0,
            feedback=[reason] if reason else [],
        )

    def to_json(self) -> Dict[str, Any]:
        data = super().to_json()
        data["skipped"] = self.skipped
        return data
