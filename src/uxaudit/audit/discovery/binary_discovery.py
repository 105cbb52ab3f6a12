"""
Binary discovery.

Locates the executable that the functionality, verification and
error-handling phases probe. Strategies are tried in order and the first
hit wins:

1. Declared entry points (package.json ``bin``, pyproject
   ``[project.scripts]`` resolved on PATH, Cargo package under target/).
2. Conventional build outputs (dist/cli.js, ...).
3. Naming convention (``<root>/<dirname>``, ``bin/<dirname>``, PATH).
"""

import os
import shutil
from dataclasses import dataclass
from pathlib import Path

from uxaudit.audit.discovery.ecosystem import read_manifest, read_toml
from uxaudit.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

CONVENTIONAL_OUTPUTS = (
    "dist/cli.js",
    "dist/index.js",
    "build/cli.js",
    "lib/cli.js",
    "bin/cli.js",
)

CARGO_PROFILES = ("release", "debug")


@dataclass(frozen=True)
class DiscoveredBinary:
    """An executable plus any interpreter needed to launch it."""

    path: str
    strategy: str
    interpreter: str | None = None

    @property
    def executable(self) -> str:
        return self.interpreter or self.path

    def argv(self, args: list[str] | None = None) -> tuple[str, list[str]]:
        """Return (executable, args) ready for CommandExecutor.run_async()."""
        args = list(args or [])
        if self.interpreter:
            return self.interpreter, [self.path, *args]
        return self.path, args

    @property
    def display(self) -> str:
        return f"{self.interpreter} {self.path}" if self.interpreter else self.path


def _is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def _wrap(path: Path, strategy: str) -> DiscoveredBinary | None:
    if not path.is_file():
        return None
    if path.suffix in (".js", ".mjs", ".cjs"):
        return DiscoveredBinary(path=str(path), strategy=strategy, interpreter="node")
    if _is_executable(path):
        return DiscoveredBinary(path=str(path), strategy=strategy)
    return None


def _from_declared_entry_points(root: Path) -> DiscoveredBinary | None:
    manifest = read_manifest(root)
    if manifest.source == "package.json":
        for target in manifest.scripts.values():
            found = _wrap(root / target, "package.json bin")
            if found:
                return found

    if manifest.source == "pyproject.toml":
        for script in manifest.scripts:
            resolved = shutil.which(script)
            if resolved:
                return DiscoveredBinary(path=resolved, strategy="pyproject scripts")

    cargo = read_toml(root / "Cargo.toml")
    if cargo is not None:
        name = cargo.get("package", {}).get("name")
        if name:
            for profile in CARGO_PROFILES:
                found = _wrap(root / "target" / profile / name, f"cargo {profile}")
                if found:
                    return found

    return None


def _from_conventional_outputs(root: Path) -> DiscoveredBinary | None:
    for relative in CONVENTIONAL_OUTPUTS:
        found = _wrap(root / relative, "conventional output")
        if found:
            return found
    return None


def _from_naming_convention(root: Path) -> DiscoveredBinary | None:
    name = root.resolve().name
    for candidate in (root / name, root / "bin" / name):
        if _is_executable(candidate):
            return DiscoveredBinary(path=str(candidate), strategy="naming convention")
    resolved = shutil.which(name)
    if resolved:
        return DiscoveredBinary(path=resolved, strategy="PATH")
    return None


_STRATEGIES = (
    _from_declared_entry_points,
    _from_conventional_outputs,
    _from_naming_convention,
)


def discover_binary(root: Path) -> DiscoveredBinary | None:
    """
    Find the audited tool's executable.

    Args:
        root: Audited project directory

    Returns:
        The first binary found, or None when every strategy misses
    """
    for strategy in _STRATEGIES:
        found = strategy(root)
        if found:
            logger.debug("binary_discovered", path=found.path, strategy=found.strategy)
            return found
    logger.debug("binary_not_found", root=str(root))
    return None


def resolve_binary_name(root: Path) -> str | None:
    """Name the installed tool is expected to go by on PATH."""
    manifest = read_manifest(root)
    if manifest.scripts:
        return next(iter(manifest.scripts))
    if manifest.name:
        return str(manifest.name).split("/")[-1]
    if (root / "go.mod").exists():
        return root.resolve().name
    return None
