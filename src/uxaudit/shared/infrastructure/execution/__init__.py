"""Bounded external process execution."""

from uxaudit.shared.infrastructure.execution.command_executor import CommandExecutor, CommandOutcome

__all__ = ["CommandExecutor", "CommandOutcome"]
