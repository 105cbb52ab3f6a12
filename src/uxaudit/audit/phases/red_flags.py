"""
Red Flags Phase (Static Red-Flag Scanner).

Independent static checks over the audited source tree. Every check returns
its own flags and notes; one check blowing up is logged and noted without
stopping the others. The merged result is deduplicated by (category, title).
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from uxaudit.audit.discovery.documentation import find_readme
from uxaudit.audit.discovery.ecosystem import Manifest, read_manifest
from uxaudit.audit.discovery.file_walker import (
    find_source_files,
    find_test_files,
    read_text,
    relative_to,
)
from uxaudit.audit.domain.enums import PhaseName, Severity
from uxaudit.audit.domain.models import RedFlag, RedFlagFindings, count_by_severity, merge_red_flags
from uxaudit.audit.phases.base_phase import BasePhase
from uxaudit.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

SECRET_PATTERNS: tuple[tuple[str, re.Pattern], ...] = (
    ("Google API key", re.compile(r"AIza[0-9A-Za-z\-_]{35}")),
    ("AWS access key", re.compile(r"AKIA[0-9A-Z]{16}")),
    ("OpenAI API key", re.compile(r"sk-[a-zA-Z0-9]{48}")),
    ("Slack token", re.compile(r"xox[bap]-[0-9]{12}-[0-9]{12}-[0-9A-Za-z]{24}")),
    ("GitHub personal access token", re.compile(r"ghp_[a-zA-Z0-9]{36}")),
    ("password", re.compile(r"password\s*=\s*[\"'][^\"']+[\"']")),
)

# name -> first safe version
VULNERABLE_NPM_PACKAGES = {
    "lodash": (4, 17, 21),
    "axios": (0, 21, 1),
    "minimist": (1, 2, 6),
}
VULNERABLE_PYPI_PACKAGES = {
    "requests": (2, 31, 0),
    "pyyaml": (5, 4),
    "jinja2": (3, 1, 3),
    "urllib3": (1, 26, 18),
}

LICENSE_FILES = ("LICENSE", "LICENSE.md", "LICENSE.txt", "COPYING")
TEST_DIRECTORIES = ("test", "tests", "__tests__", "spec")
ROOT_SPRAWL_LIMIT = 5
MINIMAL_TEST_LINES = 10
PRE_RELEASE_PREFIXES = ("^0.", "~0.", "0.", "==0.", "~=0.", ">=0.")
PRE_RELEASE_LIMIT = 3

EVAL_PATTERN = re.compile(r"\beval\s*\(")
SPAWN_PATTERNS = (
    re.compile(r"\bexec\s*\("),
    re.compile(r"\bspawn\s*\("),
    re.compile(r"\bos\.system\s*\("),
    re.compile(r"shell\s*=\s*True"),
)
SANITIZE_MARKERS = ("sanitize", "escape", "validate", "shlex.quote")
ACCESSIBILITY_MARKERS = ("accessibility", "a11y", "screen reader")

_VERSION_NUMBER = re.compile(r"(\d+(?:\.\d+)*)")


@dataclass
class CheckResult:
    red_flags: list[RedFlag] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


def parse_version(spec: str) -> tuple[int, ...] | None:
    """Leading version number of a dependency spec (``^4.17.0`` -> (4, 17, 0))."""
    match = _VERSION_NUMBER.search(spec)
    if not match:
        return None
    return tuple(int(part) for part in match.group(1).split("."))


def _below(version: tuple[int, ...], threshold: tuple[int, ...]) -> bool:
    width = max(len(version), len(threshold))
    return version + (0,) * (width - len(version)) < threshold + (0,) * (width - len(threshold))


# ============================================================================
# Checks
# ============================================================================


def check_hardcoded_secrets(root: Path, manifest: Manifest) -> CheckResult:
    result = CheckResult()
    checked = 0
    for path in find_source_files(root):
        content = read_text(path)
        if content is None:
            continue
        checked += 1
        for name, pattern in SECRET_PATTERNS:
            if not pattern.search(content):
                continue
            result.red_flags.append(
                RedFlag(
                    severity=Severity.CRITICAL,
                    category="security",
                    title=f"Hardcoded {name} detected",
                    description=f"Found {name} in source code which is a critical security vulnerability",
                    evidence=[f"File: {relative_to(path, root)}"],
                    fix=f"Remove {name} from source code and use environment variables",
                    location=str(path),
                )
            )
    logger.debug("secrets_scanned", files=checked, hits=len(result.red_flags))
    if not result.red_flags:
        result.notes.append("No hardcoded secrets found")
    return result


def check_vulnerable_dependencies(root: Path, manifest: Manifest) -> CheckResult:
    result = CheckResult()
    if manifest.source == "package.json":
        known = VULNERABLE_NPM_PACKAGES
    elif manifest.source in ("pyproject.toml", "requirements.txt"):
        known = VULNERABLE_PYPI_PACKAGES
    else:
        return result

    for name, spec in manifest.dependencies.items():
        threshold = known.get(name.lower())
        if threshold is None:
            continue
        version = parse_version(spec)
        # unpinned requirements are not flagged
        if version is None or not _below(version, threshold):
            continue
        safe = ".".join(str(part) for part in threshold)
        result.red_flags.append(
            RedFlag(
                severity=Severity.HIGH,
                category="security",
                title="Known vulnerable dependency",
                description=f"Package {name} below {safe} has known security vulnerabilities",
                evidence=[f"Dependency: {name} {spec}"],
                fix=f"Update {name} to {safe} or later",
            )
        )

    if not result.red_flags:
        result.notes.append("No known vulnerable dependencies found")
    return result


def check_missing_files(root: Path, manifest: Manifest) -> CheckResult:
    result = CheckResult()
    essentials = (
        ("README", find_readme(root) is not None, Severity.CRITICAL, "README.md"),
        ("license file", any((root / f).exists() for f in LICENSE_FILES), Severity.HIGH, "LICENSE"),
        (".gitignore", (root / ".gitignore").exists(), Severity.MEDIUM, ".gitignore"),
    )
    for name, present, severity, file_name in essentials:
        if present:
            continue
        result.red_flags.append(
            RedFlag(
                severity=severity,
                category="project-structure",
                title=f"Missing {name}",
                description=f"Project is missing {name}",
                evidence=[f"{file_name} not found"],
                fix=f"Add {name} to the project",
            )
        )

    if (root / ".env").exists() and not (root / ".env.example").exists():
        result.red_flags.append(
            RedFlag(
                severity=Severity.MEDIUM,
                category="security",
                title="Missing .env.example",
                description="Project uses .env but doesn't provide .env.example template",
                evidence=[".env found but .env.example missing"],
                fix="Create .env.example with placeholder values",
            )
        )

    if not result.red_flags:
        result.notes.append("All essential files present")
    return result


def check_project_structure(root: Path, manifest: Manifest) -> CheckResult:
    result = CheckResult()
    entries = list(root.iterdir())

    by_extension: dict[str, int] = {}
    for entry in entries:
        if entry.is_file() and entry.suffix in (".js", ".ts", ".py") and entry.stem != "index":
            by_extension[entry.suffix] = by_extension.get(entry.suffix, 0) + 1
    if any(count > ROOT_SPRAWL_LIMIT for count in by_extension.values()):
        result.red_flags.append(
            RedFlag(
                severity=Severity.LOW,
                category="project-structure",
                title="Poor project organization",
                description="Many source files at root level - should be organized in directories",
                evidence=[f"Found {sum(by_extension.values())} source files at root"],
                fix="Organize source files into src/, lib/, or similar directories",
            )
        )

    has_test_dir = any((root / name).is_dir() for name in TEST_DIRECTORIES)
    if has_test_dir or find_test_files(root):
        result.notes.append("Test directory or files present")
    else:
        result.red_flags.append(
            RedFlag(
                severity=Severity.MEDIUM,
                category="testing",
                title="No tests found",
                description="Project lacks test files or test directory",
                evidence=["No test/ or tests/ directory found", "No test files found"],
                fix="Add tests to ensure code quality and prevent regressions",
            )
        )

    if not (root / "docs").is_dir() and not (root / "documentation").is_dir():
        result.notes.append("No docs/ directory found")
    return result


def _meaningful_lines(content: str) -> int:
    return sum(
        1
        for line in content.splitlines()
        if line.strip() and not line.strip().startswith(("//", "#"))
    )


def check_minimal_tests(root: Path, manifest: Manifest) -> CheckResult:
    result = CheckResult()
    test_files = find_test_files(root)
    if not test_files:
        return result

    minimal = 0
    for path in test_files:
        content = read_text(path)
        if content is not None and _meaningful_lines(content) < MINIMAL_TEST_LINES:
            minimal += 1

    if minimal > len(test_files) * 0.5:
        result.red_flags.append(
            RedFlag(
                severity=Severity.LOW,
                category="testing",
                title="Many tests appear to be empty or minimal",
                description=f"{minimal} of {len(test_files)} test files have very little content",
                evidence=[f"Found {minimal} minimal test files"],
                fix="Add proper test cases to ensure code quality",
            )
        )
    return result


def check_pre_release_dependencies(root: Path, manifest: Manifest) -> CheckResult:
    result = CheckResult()
    pinned = [
        f"{name}@{spec}"
        for name, spec in manifest.dependencies.items()
        if spec.replace(" ", "").startswith(PRE_RELEASE_PREFIXES)
    ]
    if len(pinned) > PRE_RELEASE_LIMIT:
        result.red_flags.append(
            RedFlag(
                severity=Severity.LOW,
                category="maintenance",
                title="Many outdated dependencies",
                description="Project has many dependencies using version 0.x",
                evidence=pinned[:5],
                fix="Update dependencies to latest stable versions",
            )
        )
    return result


def check_code_safety(root: Path, manifest: Manifest) -> CheckResult:
    result = CheckResult()
    for path in find_source_files(root):
        content = read_text(path)
        if content is None:
            continue
        evidence = [f"File: {relative_to(path, root)}"]

        if EVAL_PATTERN.search(content):
            result.red_flags.append(
                RedFlag(
                    severity=Severity.HIGH,
                    category="security",
                    title="Use of eval() detected",
                    description="eval() can lead to code injection vulnerabilities",
                    evidence=list(evidence),
                    fix="Remove eval() and use safer alternatives",
                    location=str(path),
                )
            )

        spawns = any(pattern.search(content) for pattern in SPAWN_PATTERNS)
        if spawns and not any(marker in content for marker in SANITIZE_MARKERS):
            result.red_flags.append(
                RedFlag(
                    severity=Severity.MEDIUM,
                    category="security",
                    title="Potential command injection",
                    description="Process spawning found without input sanitization",
                    evidence=list(evidence),
                    fix="Add input sanitization before shell command execution",
                    location=str(path),
                )
            )

    if not result.red_flags:
        result.notes.append("No obvious security issues detected")
    return result


def check_licensing(root: Path, manifest: Manifest) -> CheckResult:
    result = CheckResult()
    if manifest.source in ("package.json", "Cargo.toml", "pyproject.toml"):
        if manifest.license:
            result.notes.append(f"License: {manifest.license}")
        else:
            result.red_flags.append(
                RedFlag(
                    severity=Severity.MEDIUM,
                    category="legal",
                    title="No license specified",
                    description=f"{manifest.source} does not specify a license",
                    evidence=[f'{manifest.source} missing "license" field'],
                    fix=f'Add license field to {manifest.source} (e.g., "MIT", "Apache-2.0")',
                )
            )

    if any((root / f).exists() for f in LICENSE_FILES):
        result.notes.append("LICENSE file present")
    else:
        result.red_flags.append(
            RedFlag(
                severity=Severity.MEDIUM,
                category="legal",
                title="Missing LICENSE file",
                description="Project does not have a LICENSE file",
                evidence=["LICENSE file not found"],
                fix="Add LICENSE file with full license text",
            )
        )
    return result


def check_accessibility(root: Path, manifest: Manifest) -> CheckResult:
    result = CheckResult()
    readme = find_readme(root)
    if readme is None:
        return result
    if any(marker in readme.lowered for marker in ACCESSIBILITY_MARKERS):
        result.notes.append("Accessibility considerations documented")
    else:
        result.notes.append("Accessibility not mentioned in documentation")
    if re.search(r"\b(red|green)\b", readme.lowered):
        result.notes.append("May use color-only indicators (consider accessibility)")
    return result


RED_FLAG_CHECKS: tuple[Callable[[Path, Manifest], CheckResult], ...] = (
    check_hardcoded_secrets,
    check_vulnerable_dependencies,
    check_missing_files,
    check_project_structure,
    check_minimal_tests,
    check_pre_release_dependencies,
    check_code_safety,
    check_licensing,
    check_accessibility,
)


class RedFlagsPhase(BasePhase):
    """Executor for the RED FLAGS phase."""

    name = PhaseName.RED_FLAGS

    def __init__(self, *args, checks: tuple[Callable[[Path, Manifest], CheckResult], ...] = RED_FLAG_CHECKS, **kwargs):
        super().__init__(*args, **kwargs)
        self.checks = checks

    async def execute_async(self) -> RedFlagFindings:
        logger.info("executing_phase", phase=self.name.value, target=str(self.target_path))

        manifest = read_manifest(self.target_path)
        flags: list[RedFlag] = []
        notes: list[str] = []

        for check in self.checks:
            try:
                result = check(self.target_path, manifest)
            except Exception as e:
                logger.warning("red_flag_check_failed", check=check.__name__, error=str(e))
                notes.append(f"Check {check.__name__} failed: {e}")
                continue
            flags.extend(result.red_flags)
            notes.extend(result.notes)

        unique = merge_red_flags(flags)
        if unique:
            counts = count_by_severity(unique)
            notes.append(f"Found {len(unique)} red flags:")
            notes.extend(f"  - {severity.capitalize()}: {count}" for severity, count in counts.items() if count)
        else:
            notes.append("No critical red flags detected")

        logger.info("red_flags_completed", red_flags=len(unique))
        return RedFlagFindings(red_flags=unique, notes=notes)
