"""
Audit domain enums.

String-valued so they serialize directly into report JSON.
"""

from enum import Enum


class PhaseName(str, Enum):
    """The six fixed audit phases, in execution order."""

    FIRST_IMPRESSIONS = "first-impressions"
    INSTALLATION = "installation"
    FUNCTIONALITY = "functionality"
    VERIFICATION = "verification"
    ERROR_HANDLING = "error-handling"
    RED_FLAGS = "red-flags"


class Severity(str, Enum):
    """
    Red flag severity, ordered by impact.

    ``rank`` is 0 for the most severe level so flags can be sorted with it.
    """

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = [Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM, Severity.LOW]


class Ecosystem(str, Enum):
    """Package ecosystem detected from marker files."""

    NODEJS = "nodejs"
    RUST = "rust"
    GO = "go"
    PYTHON = "python"
    RUBY = "ruby"
    MAKE = "make"
    CMAKE = "cmake"
    DOCKER = "docker"
    UNKNOWN = "unknown"


class ClaimType(str, Enum):
    """Kinds of documentation claims, each with its own verification strategy."""

    VERSION = "version"
    FEATURE = "feature"
    COMMAND = "command"
    CONFIG = "config"


class MatchStatus(str, Enum):
    """How closely observed behaviour matched a claim."""

    EXACT = "exact"
    PARTIAL = "partial"
    NONE = "none"
