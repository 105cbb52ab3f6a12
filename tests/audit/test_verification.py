"""Tests for claim extraction and the verification phase."""

import pytest
from conftest import write_files

from uxaudit.audit.domain.enums import ClaimType, MatchStatus
from uxaudit.audit.phases.verification import (
    VerificationPhase,
    calculate_verification_score,
    extract_claims,
    extract_command_claims,
    extract_config_claims,
    extract_feature_claims,
    extract_version_claims,
)

GOODTOOL_README = """# goodtool

Version: 1.2.3

```bash
$ goodtool --version
goodtool list
```

Configuration file: .goodtoolrc
"""


class TestClaimExtractors:
    """Test the per-type extractors."""

    def test_version_claim(self):
        claims = extract_version_claims("Current version: 2.4.0.")

        assert len(claims) == 1
        assert claims[0].expected == "2.4.0"
        assert claims[0].command == ["--version"]

    def test_feature_claims(self):
        claims = extract_feature_claims("It supports json output and enables caching.")

        assert [c.text for c in claims] == ["Supports json", "Supports caching"]
        assert all(c.claim_type == ClaimType.FEATURE for c in claims)

    def test_command_claims_only_from_shell_blocks(self):
        content = (
            "```bash\n$ tool init --force\n# comment\ntool 'run thing'\ntool a\ntool b\n```\n"
            "```python\nimport tool\n```\n"
            "```\ntool status\n```\n"
        )

        claims = extract_command_claims(content)

        assert [c.command for c in claims] == [
            ["tool", "init", "--force"],
            ["tool", "run thing"],
            ["tool", "a"],
            ["tool", "status"],
        ]

    def test_config_claim_keeps_leading_dot(self):
        claims = extract_config_claims("Configuration file: `.toolrc`.")

        assert claims[0].expected == ".toolrc"

    def test_duplicate_claims_are_dropped(self):
        content = "```sh\ntool init\n```\n\n```sh\ntool init\n```\n"

        assert len(extract_claims(content)) == 1


class TestCalculateVerificationScore:
    def test_no_claims_is_neutral(self):
        assert calculate_verification_score(0, 0, 0) == 5.0

    def test_all_verified(self):
        assert calculate_verification_score(4, 4, 0) == 10.0

    def test_ninety_percent_bonus(self):
        assert calculate_verification_score(10, 9, 0) == 8.2

    def test_accuracy_issue_penalty(self):
        assert calculate_verification_score(4, 3, 1) == 4.5


class TestVerificationPhase:
    """Test VerificationPhase against a real shell-script tool."""

    @pytest.mark.asyncio
    async def test_no_readme(self, tmp_path):
        findings = await VerificationPhase(tmp_path).execute_async()

        assert findings.verified_claims == []
        assert findings.score == 5.0
        assert "No verifiable claims found in documentation" in findings.notes

    @pytest.mark.asyncio
    async def test_missing_config_file_is_an_accuracy_issue(self, good_tool_project):
        write_files(good_tool_project, {"README.md": GOODTOOL_README})

        findings = await VerificationPhase(good_tool_project).execute_async()

        by_type = {}
        for claim in findings.verified_claims:
            by_type.setdefault(claim.claim_type, []).append(claim)

        assert by_type[ClaimType.VERSION][0].verified
        assert "goodtool 1.2.3" in by_type[ClaimType.VERSION][0].actual
        assert [c.verified for c in by_type[ClaimType.COMMAND]] == [True, True]
        assert by_type[ClaimType.COMMAND][0].match == MatchStatus.EXACT
        assert not by_type[ClaimType.CONFIG][0].verified
        assert by_type[ClaimType.CONFIG][0].actual == "file not found"
        assert len(findings.accuracy_issues) == 1
        assert findings.score == 4.5
        assert "Found 1 documentation inaccuracies" in findings.notes

    @pytest.mark.asyncio
    async def test_all_claims_hold(self, good_tool_project):
        write_files(good_tool_project, {"README.md": GOODTOOL_README, ".goodtoolrc": "{}"})

        findings = await VerificationPhase(good_tool_project).execute_async()

        assert len(findings.verified_claims) == 4
        assert all(c.verified for c in findings.verified_claims)
        assert findings.accuracy_issues == []
        assert findings.score == 10.0
        assert "Excellent documentation accuracy" in findings.notes

    @pytest.mark.asyncio
    async def test_failing_command_claim(self, good_tool_project):
        write_files(good_tool_project, {"README.md": "```sh\ngoodtool teleport\n```\n"})

        findings = await VerificationPhase(good_tool_project).execute_async()

        claim = findings.verified_claims[0]
        assert not claim.verified
        assert claim.actual == "exit code 2"
        assert claim.match == MatchStatus.NONE
        assert findings.score == 0.0

    @pytest.mark.asyncio
    async def test_feature_claims_are_unverifiable(self, good_tool_project):
        write_files(good_tool_project, {"README.md": "goodtool supports templates.\n"})

        findings = await VerificationPhase(good_tool_project).execute_async()

        assert findings.unverifiable_claims == ["Supports templates"]
        assert findings.accuracy_issues == []
        assert findings.score == 0.0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("config_path", ["/etc/passwd", "../outside.conf"])
    async def test_config_claim_outside_project_is_not_verified(self, good_tool_project, config_path):
        write_files(good_tool_project, {"README.md": f"Configuration file: {config_path}\n"})
        write_files(good_tool_project.parent, {"outside.conf": "x=1\n"})

        findings = await VerificationPhase(good_tool_project).execute_async()

        claim = findings.verified_claims[0]
        assert claim.claim_type == ClaimType.CONFIG
        assert not claim.verified
        assert claim.actual == "path outside project"
        assert claim.match == MatchStatus.NONE
