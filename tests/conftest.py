"""Shared test fixtures for the uxaudit test suite."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest

from uxaudit.shared.infrastructure.execution.command_executor import CommandOutcome
from uxaudit.validation.agents.base import AgentRequest, AgentResponse, ReasoningAgent

GOOD_TOOL_SCRIPT = """#!/bin/sh
usage() {
  cat <<EOF
Usage: goodtool [options] <command>

Options:
  --help       Show this help
  --version    Print version
  --verbose    Verbose output
  --dry-run    Show what would happen

Examples:
  goodtool init
  goodtool list
EOF
}
case "$1" in
  ""|--help) usage; exit 0 ;;
  --version) echo "goodtool 1.2.3"; exit 0 ;;
  --verbose|--dry-run) echo "ok"; exit 0 ;;
  init|build|test|run|status|list|info) echo "$1: done"; exit 0 ;;
  --file)
    if [ ! -f "$2" ]; then echo "goodtool: input file not found: $2" >&2; exit 1; fi
    exit 0 ;;
  --output)
    if ! ( : > "$2" ) 2>/dev/null; then echo "goodtool: cannot write output file: $2" >&2; exit 1; fi
    exit 0 ;;
  *) echo "goodtool: unknown argument '$1'. Try 'goodtool --help' for available commands." >&2; exit 2 ;;
esac
"""

SILENT_TOOL_SCRIPT = """#!/bin/sh
exit 0
"""

TERSE_TOOL_SCRIPT = """#!/bin/sh
echo "error" >&2
exit 1
"""


def write_executable(path: Path, script: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(script)
    path.chmod(0o755)
    return path


def write_files(root: Path, files: dict) -> Path:
    """Create files under root from a {relative path: content} mapping."""
    root.mkdir(parents=True, exist_ok=True)
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, (dict, list)):
            content = json.dumps(content)
        path.write_text(content)
    return root


def make_outcome(exit_code=0, stdout="", stderr="", duration=0.1, timed_out=False, command="tool"):
    return CommandOutcome(
        command=command,
        stdout=stdout,
        stderr=stderr,
        exit_code=exit_code,
        duration=duration,
        timed_out=timed_out,
    )


class StubAgent(ReasoningAgent):
    """Reasoning agent that replays canned responses in order."""

    def __init__(self, responses=None, available=True):
        self.responses = list(responses or [])
        self.available = available
        self.requests: list[AgentRequest] = []

    @property
    def name(self) -> str:
        return "stub"

    async def send_async(self, request: AgentRequest) -> AgentResponse:
        self.requests.append(request)
        content = self.responses.pop(0) if self.responses else ""
        if isinstance(content, Exception):
            raise content
        return AgentResponse(content=content, success=True, agent=self.name, model="stub")

    async def is_available_async(self) -> bool:
        return self.available


def cycle_response(score, feedback=None, red_flags=None) -> str:
    return json.dumps({"score": score, "feedback": feedback or ["Looks fine"], "redFlags": red_flags or []})


@pytest.fixture
def project_root(tmp_path):
    """Create a temporary project root directory."""
    return tmp_path


@pytest.fixture
def good_tool_project(tmp_path):
    """A project whose tool behaves well on every probe."""
    root = tmp_path / "goodtool"
    root.mkdir()
    write_executable(root / "bin" / "goodtool", GOOD_TOOL_SCRIPT)
    return root


@pytest.fixture
def silent_tool_project(tmp_path):
    """A project whose tool exits 0 with no output for everything."""
    root = tmp_path / "silenttool"
    root.mkdir()
    write_executable(root / "bin" / "silenttool", SILENT_TOOL_SCRIPT)
    return root


@pytest.fixture
def terse_tool_project(tmp_path):
    """A project whose tool fails every call with a one-word message."""
    root = tmp_path / "tersetool"
    root.mkdir()
    write_executable(root / "bin" / "tersetool", TERSE_TOOL_SCRIPT)
    return root


@pytest.fixture
def fake_executor():
    """Factory for an executor whose run_async returns canned outcomes."""

    def _make(outcome=None, side_effect=None):
        executor = Mock()
        if side_effect is not None:
            executor.run_async = AsyncMock(side_effect=side_effect)
        else:
            executor.run_async = AsyncMock(return_value=outcome or make_outcome())
        return executor

    return _make
