"""
Source tree walker.

Yields files under the audited path, pruning dependency, build and VCS
directories. Files are re-read on every call; nothing is cached.
"""

import os
from collections.abc import Iterable, Iterator
from pathlib import Path

from uxaudit.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

EXCLUDED_DIRS = frozenset({
    "node_modules",
    ".git",
    "dist",
    "build",
    "target",
    "__pycache__",
    ".venv",
    "venv",
    ".tox",
    ".mypy_cache",
    ".pytest_cache",
    ".uxaudit",
})

SOURCE_EXTENSIONS = frozenset({".js", ".ts", ".jsx", ".tsx", ".py", ".go", ".rs", ".rb", ".sh"})

TEST_FILE_SUFFIXES = (".test.ts", ".test.js", ".spec.ts", ".spec.js", "_test.go", "_spec.rb")


def walk_files(root: Path, excluded_dirs: Iterable[str] = EXCLUDED_DIRS) -> Iterator[Path]:
    """Yield every regular file under root, skipping excluded directory names."""
    excluded = set(excluded_dirs)

    def _on_error(error: OSError) -> None:
        logger.debug("walk_error", path=getattr(error, "filename", None), error=str(error))

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        dirnames[:] = sorted(d for d in dirnames if d not in excluded)
        for name in sorted(filenames):
            path = Path(dirpath) / name
            if path.is_file():
                yield path


def find_source_files(root: Path, extensions: Iterable[str] = SOURCE_EXTENSIONS) -> list[Path]:
    wanted = set(extensions)
    return [p for p in walk_files(root) if p.suffix in wanted]


def is_test_file(path: Path) -> bool:
    name = path.name
    if name.endswith(TEST_FILE_SUFFIXES):
        return True
    return path.suffix == ".py" and (name.startswith("test_") or name.endswith("_test.py"))


def find_test_files(root: Path) -> list[Path]:
    return [p for p in walk_files(root) if is_test_file(p)]


def read_text(path: Path) -> str | None:
    """Read a text file, returning None when it cannot be read."""
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.debug("file_read_failed", path=str(path), error=str(e))
        return None


def relative_to(path: Path, root: Path) -> str:
    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)
