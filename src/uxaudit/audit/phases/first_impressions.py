"""
First Impressions Phase.

What a newcomer sees before running anything: is there a README, does it
say how to install the tool, are there examples, and is the description
clear. Reads the filesystem only.
"""

from pathlib import Path

from uxaudit.audit.discovery.documentation import (
    ReadmeDocument,
    evaluate_description_clarity,
    find_readme,
    readme_observations,
    score_readme_quality,
)
from uxaudit.audit.domain.enums import PhaseName
from uxaudit.audit.domain.models import FirstImpressionsFindings
from uxaudit.audit.domain.scoring import clamp_score
from uxaudit.audit.phases.base_phase import BasePhase
from uxaudit.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

INSTALL_KEYWORDS = (
    "install",
    "npm install",
    "pip install",
    "cargo install",
    "go install",
    "brew install",
    "setup",
    "getting started",
)
INSTALL_DOCUMENTS = ("INSTALL.md", "INSTALLATION.md", "docs/install.md", "docs/installation.md")
INSTALL_MANIFESTS = ("package.json", "Cargo.toml", "go.mod", "pyproject.toml", "setup.py")

EXAMPLE_DIRECTORIES = ("examples", "example", "samples", "demo")
USAGE_DOCUMENTS = ("USAGE.md", "docs/usage.md", "docs/examples.md", "EXAMPLES.md")

# Phase score weights
W_HAS_README = 1.5
W_README_QUALITY = 0.35
W_INSTALL = 2.0
W_EXAMPLES = 2.0
W_CLARITY = 0.35


class FirstImpressionsPhase(BasePhase):
    """Executor for the FIRST IMPRESSIONS phase."""

    name = PhaseName.FIRST_IMPRESSIONS

    async def execute_async(self) -> FirstImpressionsFindings:
        logger.info("executing_phase", phase=self.name.value, target=str(self.target_path))
        notes: list[str] = []

        readme = find_readme(self.target_path)
        if readme is None:
            notes.append("CRITICAL: No README file found")
            readme_score = 0.0
            clarity = 0.0
        else:
            readme_score = score_readme_quality(readme)
            clarity = evaluate_description_clarity(readme)
            notes.extend(readme_observations(readme))

        has_install = self._has_install_instructions(readme)
        if not has_install:
            notes.append("CRITICAL: No installation instructions found")

        has_examples = self._has_examples(readme)
        if not has_examples:
            notes.append("No usage examples found")

        score = clamp_score(
            W_HAS_README * (readme is not None)
            + W_README_QUALITY * readme_score
            + W_INSTALL * has_install
            + W_EXAMPLES * has_examples
            + W_CLARITY * clarity
        )

        logger.info(
            "first_impressions_scored",
            has_readme=readme is not None,
            readme_score=readme_score,
            clarity=clarity,
            score=score,
        )

        return FirstImpressionsFindings(
            has_readme=readme is not None,
            readme_score=readme_score,
            has_install_instructions=has_install,
            has_examples=has_examples,
            description_clarity=clarity,
            score=score,
            notes=notes,
            readme_file=readme.name if readme else None,
        )

    def _has_install_instructions(self, readme: ReadmeDocument | None) -> bool:
        if readme is not None and any(keyword in readme.lowered for keyword in INSTALL_KEYWORDS):
            return True
        if self._any_exists(INSTALL_DOCUMENTS):
            return True
        # A manifest implies the ecosystem's standard install command
        return self._any_exists(INSTALL_MANIFESTS)

    def _has_examples(self, readme: ReadmeDocument | None) -> bool:
        if readme is not None and readme.has_code_blocks:
            return True
        for directory in EXAMPLE_DIRECTORIES:
            candidate = self.target_path / directory
            if candidate.is_dir() and any(p.is_file() for p in candidate.iterdir()):
                return True
        return self._any_exists(USAGE_DOCUMENTS)

    def _any_exists(self, relatives: tuple[str, ...]) -> bool:
        return any((self.target_path / Path(relative)).exists() for relative in relatives)
