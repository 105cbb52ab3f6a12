"""Validation domain models."""

from uxaudit.validation.domain.models import (
    CycleName,
    ValidationCycleResult,
    ValidationResult,
    ValidationStatus,
)

__all__ = ["CycleName", "ValidationCycleResult", "ValidationResult", "ValidationStatus"]
