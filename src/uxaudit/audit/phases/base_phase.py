"""
Base Phase module.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any

from uxaudit.audit.domain.enums import PhaseName
from uxaudit.audit.domain.models import AuditConfig
from uxaudit.shared.infrastructure.execution.command_executor import CommandExecutor
from uxaudit.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class BasePhase:
    """Base class for the six audit phases."""

    name: PhaseName

    def __init__(
        self,
        target_path: Path,
        config: AuditConfig | None = None,
        executor: CommandExecutor | None = None,
        progress_callback: Callable | None = None,
    ):
        """
        Initialize base phase.

        Args:
            target_path: Root directory of the audited tool
            config: Audit configuration
            executor: Process runner shared by every probe of the phase
            progress_callback: Optional callback for progress updates
        """
        self.target_path = Path(target_path)
        self.config = config or AuditConfig()
        self.executor = executor or CommandExecutor()
        self.progress_callback = progress_callback

    def _emit(self, status: str, **details: Any) -> None:
        if self.progress_callback:
            self.progress_callback("progress_update", {"phase": self.name.value, "status": status, **details})

    async def execute_async(self) -> Any:
        """Run the phase and return its findings object."""
        raise NotImplementedError
