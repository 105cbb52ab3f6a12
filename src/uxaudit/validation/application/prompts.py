"""
Prompt templates for the three validation cycles.

Every prompt asks for the same JSON shape so one parser handles all cycles:

    {"score": 0-10, "feedback": ["..."], "redFlags": [{...}]}
"""

from collections.abc import Mapping, Sequence

from uxaudit.audit.domain.enums import PhaseName
from uxaudit.audit.domain.models import PhaseResult, RedFlag
from uxaudit.validation.domain.models import ValidationCycleResult

SUMMARY_FLAG_LIMIT = 10
EVIDENCE_FLAG_LIMIT = 15
EVIDENCE_ITEMS_PER_FLAG = 3

SYSTEM_PROMPT = (
    "You review automated user-experience audits of command-line tools. "
    "Judge only what the evidence supports. Respond with a single JSON object and nothing else."
)

OUTPUT_FORMAT = """## Required Output Format
Respond with JSON ONLY (no markdown):
{
  "score": 0-10,
  "feedback": ["string"],
  "redFlags": [{
    "severity": "critical|high|medium|low",
    "category": "string",
    "title": "string",
    "description": "string",
    "evidence": ["string"],
    "fix": "string"
  }]
}"""

_PHASE_TITLES = {
    PhaseName.FIRST_IMPRESSIONS: "First Impressions",
    PhaseName.INSTALLATION: "Installation",
    PhaseName.FUNCTIONALITY: "Functionality",
    PhaseName.VERIFICATION: "Verification",
}


def _phase_lines(phase: PhaseName, result: PhaseResult | None) -> list[str]:
    lines = [f"### {_PHASE_TITLES[phase]}"]
    if result is None or not result.success or result.findings is None:
        lines.append("- Not completed")
        return lines

    findings = result.findings
    lines.append(f"- Score: {findings.score}/10")
    if phase == PhaseName.INSTALLATION:
        lines.append(f"- Attempted: {'Yes' if findings.attempted else 'No'}")
        lines.append(f"- Success: {'Yes' if findings.success else 'No'}")
    elif phase == PhaseName.FUNCTIONALITY:
        lines.append(f"- Commands tested: {len(findings.commands_tested)}")
    elif phase == PhaseName.VERIFICATION:
        lines.append(f"- Claims checked: {len(findings.verified_claims)}")
    if findings.notes:
        lines.append(f"- Notes: {'; '.join(findings.notes)}")
    return lines


def build_audit_summary(target_path: str, phase_results: Mapping[str, PhaseResult], red_flags: Sequence[RedFlag]) -> str:
    """Markdown summary of the audit shared by the first two cycles."""
    lines = [
        "# User Experience Audit - Validation Request",
        "",
        f"**Tool**: {target_path}",
        f"**Red Flags Found**: {len(red_flags)}",
        "",
        "## Task",
        "You are validating a user experience audit. Review the findings below for:",
        "1. **Obvious errors**: Missing documentation, broken links, incorrect claims",
        "2. **Bias**: Overly harsh or lenient assessments, missed context",
        "3. **Evidence quality**: Are red flags supported by actual evidence?",
        "",
        "## Phase Results",
        "",
    ]
    for phase in _PHASE_TITLES:
        lines.extend(_phase_lines(phase, phase_results.get(phase.value)))
        lines.append("")

    lines.append("### Red Flags")
    for flag in red_flags[:SUMMARY_FLAG_LIMIT]:
        lines.append(f"- **{flag.severity.value}**: {flag.title}\n  {flag.description}")
    if len(red_flags) > SUMMARY_FLAG_LIMIT:
        lines.append(f"_... and {len(red_flags) - SUMMARY_FLAG_LIMIT} more flags_")
    lines.append("")
    lines.append(OUTPUT_FORMAT)
    return "\n".join(lines)


def critique_prompt(summary: str) -> str:
    return f"""You are a ruthless critic reviewing a UX audit.

{summary}

**Your Role**: critique
- Check for obvious errors in the audit findings
- Identify missing red flags (things that should have been flagged)
- Verify evidence quality (are claims backed by actual evidence?)
- Check for false positives (are some red flags unjustified?)

Be thorough but fair. Respond with JSON ONLY."""


def meta_critique_prompt(summary: str, critique: ValidationCycleResult) -> str:
    feedback = "; ".join(critique.feedback) or "(none)"
    return f"""You are a meta-critic reviewing another reviewer's critique of a UX audit.

**Original Audit**:
{summary}

**Critique Under Review**:
- Score: {critique.score}/10
- Feedback: {feedback}
- Red Flags Found: {len(critique.red_flags)}

**Your Role**: meta-critique
- Check the critique for bias (too harsh? too lenient?)
- Identify blind spots (what did the critique miss?)
- Flag false positives (unjustified criticism)
- Provide a balanced assessment

Respond with JSON ONLY."""


def evidence_prompt(red_flags: Sequence[RedFlag]) -> str:
    entries = []
    for index, flag in enumerate(red_flags[:EVIDENCE_FLAG_LIMIT], start=1):
        evidence = ", ".join(flag.evidence[:EVIDENCE_ITEMS_PER_FLAG]) or "None provided"
        entries.append(f"{index}. **{flag.severity.value}**: {flag.title}\n   Evidence: {evidence}")
    listing = "\n".join(entries) or "(no red flags)"

    return f"""You are the evidence validator for a UX audit.

**Task**: Score the evidence behind each red flag. Good evidence is:
- Specific: not vague
- Independently verifiable: someone else could check it
- Measurable: the issue can be quantified
- Proven: there is concrete proof
- Observable: the issue can be directly observed

**Red Flags to Validate** ({len(red_flags)} total):
{listing}

**Scoring Criteria**:
- 9-10: All flags have strong evidence
- 7-8: Most flags have good evidence
- 5-6: Some flags lack evidence
- 3-4: Many flags lack evidence
- 0-2: Evidence is missing or weak

Provide your assessment as JSON ONLY:
{{"score": 0-10, "feedback": ["string"], "redFlags": []}}"""
