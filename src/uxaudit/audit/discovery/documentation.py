"""
Documentation Scanner.

Locates the README of the audited tool and extracts structural signals from
it: headings, fenced code blocks, links, images, badges and named sections.
Pure text analysis; the only filesystem access is find_readme().
"""

import re
from dataclasses import dataclass
from pathlib import Path

from uxaudit.audit.discovery.file_walker import read_text

# Order matters: the first existing file wins and the rest are ignored
README_CANDIDATES = (
    "README.md",
    "README.markdown",
    "README.rst",
    "README.txt",
    "readme.md",
    "Readme.md",
)

CANONICAL_SECTIONS = ("installation", "usage", "features", "contributing", "license")

PURPOSE_PHRASES = (
    "is a",
    "allows you to",
    "helps you",
    "enables",
    "provides",
    "tool for",
    "cli tool",
    "command line",
)
BENEFIT_PHRASES = ("why", "benefit", "advantage", "use case", "when to use", "features")
QUICK_START_PHRASES = ("quick start", "quickstart", "getting started", "in 5 minutes", "try it now")
STATUS_PHRASES = ("beta", "stable", "version")

_HEADING = re.compile(r"^(#{1,6})\s+(.*?)\s*#*\s*$", re.MULTILINE)
_FENCED_BLOCK = re.compile(r"^[ \t]*```[ \t]*([\w+-]*)[^\n]*\n(.*?)^[ \t]*```", re.MULTILINE | re.DOTALL)
_BULLET = re.compile(r"^\s*[-*+]\s+(.*\S)\s*$")


@dataclass(frozen=True)
class FencedBlock:
    language: str
    body: str


@dataclass(frozen=True)
class ReadmeDocument:
    """A README that was found on disk."""

    path: Path
    content: str

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def line_count(self) -> int:
        return len(self.content.split("\n"))

    @property
    def lowered(self) -> str:
        return self.content.lower()

    @property
    def headings(self) -> list[str]:
        return [m.group(2) for m in _HEADING.finditer(self.content)]

    @property
    def has_title(self) -> bool:
        return self.content.split("\n", 1)[0].startswith("#")

    @property
    def has_code_blocks(self) -> bool:
        return "```" in self.content

    @property
    def has_links(self) -> bool:
        return "http" in self.content or "github" in self.lowered

    @property
    def has_images(self) -> bool:
        return "![" in self.content or "<img" in self.lowered

    @property
    def has_badges(self) -> bool:
        return "[" in self.content and "img.shields.io" in self.content


def find_readme(root: Path) -> ReadmeDocument | None:
    """Return the first README variant that exists and is readable."""
    for name in README_CANDIDATES:
        candidate = root / name
        if not candidate.is_file():
            continue
        content = read_text(candidate)
        if content is not None:
            return ReadmeDocument(path=candidate, content=content)
    return None


def mentions_any(text: str, phrases: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(phrase in lowered for phrase in phrases)


def score_readme_quality(doc: ReadmeDocument) -> float:
    """
    README quality sub-score (0-10).

    - length tiers: 2 / 1 / 0.5 points
    - canonical sections: up to 3 points, proportional
    - fenced code blocks: 2 points
    - links 1 point, images 0.5
    - five or more headings: 1.5 points
    """
    score = 0.0

    lines = doc.line_count
    if lines >= 50:
        score += 2
    elif lines >= 30:
        score += 1
    elif lines >= 20:
        score += 0.5

    found_sections = [s for s in CANONICAL_SECTIONS if s in doc.lowered]
    score += len(found_sections) / len(CANONICAL_SECTIONS) * 3

    if doc.has_code_blocks:
        score += 2

    if doc.has_links:
        score += 1
    if doc.has_images:
        score += 0.5

    if len(doc.headings) >= 5:
        score += 1.5

    return min(round(score, 1), 10.0)


def evaluate_description_clarity(doc: ReadmeDocument) -> float:
    """Keyword-based clarity of the project description (0-10)."""
    score = 0.0
    if doc.has_title:
        score += 1
    if mentions_any(doc.content, PURPOSE_PHRASES):
        score += 3
    if mentions_any(doc.content, BENEFIT_PHRASES):
        score += 2
    if mentions_any(doc.content, QUICK_START_PHRASES):
        score += 2
    if doc.has_badges:
        score += 1
    if mentions_any(doc.content, STATUS_PHRASES):
        score += 1
    return min(round(score, 1), 10.0)


def readme_observations(doc: ReadmeDocument) -> list[str]:
    observations = []
    if doc.line_count < 20:
        observations.append(f"README is too short ({doc.line_count} lines) - lacks detail")
    if doc.has_badges:
        observations.append("README has project badges (good for credibility)")
    if not doc.has_title:
        observations.append("README lacks a clear title/heading")
    if not doc.has_links:
        observations.append("README lacks links to repository/issues")
    return observations


def extract_fenced_blocks(content: str) -> list[FencedBlock]:
    return [FencedBlock(language=m.group(1).lower(), body=m.group(2)) for m in _FENCED_BLOCK.finditer(content)]


def extract_section(content: str, title: str) -> str | None:
    """
    Body of the first heading whose text starts with ``title``.

    The section ends at the next heading of the same or a higher level.
    """
    matches = list(_HEADING.finditer(content))
    for index, match in enumerate(matches):
        if not match.group(2).lower().startswith(title.lower()):
            continue
        level = len(match.group(1))
        end = len(content)
        for following in matches[index + 1:]:
            if len(following.group(1)) <= level:
                end = following.start()
                break
        return content[match.end():end]
    return None


def extract_feature_list(content: str) -> list[str]:
    """Bullet items listed under a ``Features`` heading."""
    section = extract_section(content, "features")
    if not section:
        return []
    features = []
    for line in section.splitlines():
        match = _BULLET.match(line)
        if match:
            features.append(match.group(1))
    return features
