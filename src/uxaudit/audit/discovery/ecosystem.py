"""
Ecosystem detection and manifest reading.

Maps marker files to an ecosystem, and knows each ecosystem's build tool,
prerequisite probe and install command.
"""

import json
import tempfile
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from uxaudit.audit.domain.enums import Ecosystem
from uxaudit.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

# Ordered: the first marker present decides the ecosystem
ECOSYSTEM_MARKERS: tuple[tuple[str, Ecosystem], ...] = (
    ("package.json", Ecosystem.NODEJS),
    ("Cargo.toml", Ecosystem.RUST),
    ("go.mod", Ecosystem.GO),
    ("setup.py", Ecosystem.PYTHON),
    ("pyproject.toml", Ecosystem.PYTHON),
    ("requirements.txt", Ecosystem.PYTHON),
    ("Gemfile", Ecosystem.RUBY),
    ("Makefile", Ecosystem.MAKE),
    ("CMakeLists.txt", Ecosystem.CMAKE),
    ("Dockerfile", Ecosystem.DOCKER),
)


@dataclass(frozen=True)
class ToolCommand:
    executable: str
    args: tuple[str, ...]

    @property
    def display(self) -> str:
        return " ".join((self.executable, *self.args))


@dataclass(frozen=True)
class EcosystemProfile:
    """How to check for and run an ecosystem's build step."""

    tool_name: str
    prerequisite: ToolCommand
    install: ToolCommand


def _go_build_output() -> str:
    return str(Path(tempfile.gettempdir()) / "uxaudit-go-build")


ECOSYSTEM_PROFILES: dict[Ecosystem, EcosystemProfile] = {
    Ecosystem.NODEJS: EcosystemProfile(
        tool_name="npm",
        prerequisite=ToolCommand("npm", ("--version",)),
        install=ToolCommand("npm", ("install", "--quiet")),
    ),
    Ecosystem.RUST: EcosystemProfile(
        tool_name="cargo",
        prerequisite=ToolCommand("cargo", ("--version",)),
        install=ToolCommand("cargo", ("build", "--quiet")),
    ),
    Ecosystem.GO: EcosystemProfile(
        tool_name="go",
        prerequisite=ToolCommand("go", ("version",)),
        install=ToolCommand("go", ("build", "-o", _go_build_output())),
    ),
    Ecosystem.PYTHON: EcosystemProfile(
        tool_name="pip",
        prerequisite=ToolCommand("pip", ("--version",)),
        install=ToolCommand("pip", ("install", "-e", ".", "--quiet")),
    ),
    Ecosystem.RUBY: EcosystemProfile(
        tool_name="bundler",
        prerequisite=ToolCommand("bundle", ("--version",)),
        install=ToolCommand("bundle", ("install",)),
    ),
    Ecosystem.DOCKER: EcosystemProfile(
        tool_name="docker",
        prerequisite=ToolCommand("docker", ("--version",)),
        install=ToolCommand("docker", ("build", "-t", "uxaudit-probe", ".")),
    ),
}


@dataclass(frozen=True)
class EcosystemInfo:
    ecosystem: Ecosystem
    marker: str | None = None

    @property
    def installable(self) -> bool:
        return self.ecosystem in ECOSYSTEM_PROFILES

    @property
    def profile(self) -> EcosystemProfile | None:
        return ECOSYSTEM_PROFILES.get(self.ecosystem)


def detect_ecosystem(root: Path) -> EcosystemInfo:
    for marker, ecosystem in ECOSYSTEM_MARKERS:
        if (root / marker).exists():
            return EcosystemInfo(ecosystem=ecosystem, marker=marker)
    return EcosystemInfo(ecosystem=Ecosystem.UNKNOWN)


# ============================================================================
# Manifest readers
# ============================================================================


@dataclass
class Manifest:
    """The bits of a package manifest the phases care about."""

    name: str | None = None
    version: str | None = None
    license: str | None = None
    scripts: dict[str, str] = field(default_factory=dict)
    dependencies: dict[str, str] = field(default_factory=dict)
    source: str | None = None


def read_package_json(root: Path) -> dict[str, Any] | None:
    path = root / "package.json"
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.debug("package_json_unreadable", path=str(path), error=str(e))
        return None
    return data if isinstance(data, dict) else None


def read_toml(path: Path) -> dict[str, Any] | None:
    if not path.is_file():
        return None
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.debug("toml_unreadable", path=str(path), error=str(e))
        return None


def _npm_bin_entries(pkg: dict[str, Any]) -> dict[str, str]:
    bin_field = pkg.get("bin")
    if isinstance(bin_field, str):
        name = str(pkg.get("name", "")).split("/")[-1] or Path(bin_field).stem
        return {name: bin_field}
    if isinstance(bin_field, dict):
        return {str(k): str(v) for k, v in bin_field.items()}
    return {}


def _parse_requirements(path: Path) -> dict[str, str]:
    deps: dict[str, str] = {}
    if not path.is_file():
        return deps
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError:
        return deps
    for line in lines:
        line = line.split("#", 1)[0].strip()
        if not line or line.startswith("-"):
            continue
        name, spec = _split_requirement(line)
        if name:
            deps[name] = spec
    return deps


def _split_requirement(requirement: str) -> tuple[str, str]:
    for index, char in enumerate(requirement):
        if char in "<>=!~;[ ":
            return requirement[:index].strip().lower(), requirement[index:].split(";", 1)[0].strip()
    return requirement.strip().lower(), ""


def read_manifest(root: Path) -> Manifest:
    """
    Merge what the project's manifests declare.

    package.json wins over Cargo.toml, which wins over pyproject.toml;
    requirements.txt only contributes dependencies.
    """
    pkg = read_package_json(root)
    if pkg is not None:
        deps: dict[str, str] = {}
        for section in ("dependencies", "devDependencies"):
            if isinstance(pkg.get(section), dict):
                deps.update({str(k): str(v) for k, v in pkg[section].items()})
        return Manifest(
            name=pkg.get("name"),
            version=pkg.get("version"),
            license=pkg.get("license") if isinstance(pkg.get("license"), str) else None,
            scripts=_npm_bin_entries(pkg),
            dependencies=deps,
            source="package.json",
        )

    cargo = read_toml(root / "Cargo.toml")
    if cargo is not None:
        package = cargo.get("package", {})
        scripts = {b["name"]: b.get("path", "") for b in cargo.get("bin", []) if isinstance(b, dict) and "name" in b}
        deps = {str(k): (v if isinstance(v, str) else str(v.get("version", ""))) for k, v in cargo.get("dependencies", {}).items()}
        return Manifest(
            name=package.get("name"),
            version=package.get("version"),
            license=package.get("license"),
            scripts=scripts,
            dependencies=deps,
            source="Cargo.toml",
        )

    pyproject = read_toml(root / "pyproject.toml")
    if pyproject is not None:
        project = pyproject.get("project", {})
        deps = {}
        for requirement in project.get("dependencies", []):
            name, spec = _split_requirement(str(requirement))
            deps[name] = spec
        deps.update(_parse_requirements(root / "requirements.txt"))
        license_field = project.get("license")
        if isinstance(license_field, dict):
            license_field = license_field.get("text") or license_field.get("file")
        return Manifest(
            name=project.get("name"),
            version=project.get("version"),
            license=license_field,
            scripts={str(k): str(v) for k, v in project.get("scripts", {}).items()},
            dependencies=deps,
            source="pyproject.toml",
        )

    requirements = _parse_requirements(root / "requirements.txt")
    if requirements:
        return Manifest(dependencies=requirements, source="requirements.txt")

    return Manifest()
