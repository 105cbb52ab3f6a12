"""
Validation artifact store.

Each validation run is written once as camelCase JSON under
``<target>/.uxaudit/validation/validation-<timestamp>.json``. Artifacts are
never rewritten; loading returns them newest first.
"""

import json
from pathlib import Path

from uxaudit.shared.infrastructure.config import settings
from uxaudit.shared.infrastructure.logging import get_logger
from uxaudit.validation.domain.models import ValidationResult

logger = get_logger(__name__)

ARTIFACT_PREFIX = "validation-"


def artifact_dir(target_path: Path, dir_name: str | None = None) -> Path:
    return Path(target_path) / (dir_name or settings.artifact_dir_name)


def artifact_file_name(result: ValidationResult) -> str:
    """``validation-2026-01-02T03-04-05-123456+00-00.json`` style name."""
    stamp = result.validated_at.isoformat().replace(":", "-").replace(".", "-")
    return f"{ARTIFACT_PREFIX}{stamp}.json"


def save_validation_result(target_path: Path, result: ValidationResult, dir_name: str | None = None) -> Path:
    """
    Persist a validation result.

    Args:
        target_path: Audited project directory
        result: Result to write
        dir_name: Artifact directory relative to target_path

    Returns:
        Path of the written artifact

    Raises:
        OSError: If the directory or file cannot be written
        FileExistsError: If an artifact with the same timestamp exists
    """
    directory = artifact_dir(target_path, dir_name)
    directory.mkdir(parents=True, exist_ok=True)

    path = directory / artifact_file_name(result)
    # "x" mode: artifacts are write-once
    with open(path, "x", encoding="utf-8") as f:
        json.dump(result.to_json(), f, indent=2)

    logger.info("validation_artifact_saved", path=str(path))
    return path


def load_validation_results(target_path: Path, dir_name: str | None = None) -> list[ValidationResult]:
    """Load every readable artifact for a target, newest first."""
    directory = artifact_dir(target_path, dir_name)
    if not directory.is_dir():
        return []

    results = []
    for path in directory.glob(f"{ARTIFACT_PREFIX}*.json"):
        try:
            with open(path, encoding="utf-8") as f:
                results.append(ValidationResult.from_json(json.load(f)))
        except (OSError, ValueError, TypeError, KeyError) as e:
            logger.warning("validation_artifact_invalid", path=str(path), error=str(e))

    results.sort(key=lambda r: r.validated_at, reverse=True)
    return results
