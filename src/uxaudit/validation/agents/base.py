"""
Reasoning agent interface.

A reasoning agent takes a prompt for one validation cycle and returns raw
text that is expected to contain a JSON object with ``score``,
``feedback`` and ``redFlags``. The validation pipeline owns parsing and
fallback handling.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class AgentRequest:
    """Request to a reasoning agent."""

    system_prompt: str
    user_message: str
    cycle: str = ""
    model: Optional[str] = None
    temperature: float = 0.2
    max_tokens: int = 2000
    timeout_seconds: int = 60


@dataclass
class AgentResponse:
    """Response from a reasoning agent."""

    content: str
    success: bool
    error_message: Optional[str] = None
    agent: Optional[str] = None
    model: Optional[str] = None
    duration_ms: int = 0


class ReasoningAgent(ABC):
    """
    Interface for validation-cycle agents.

    Implementations are injected into the validation pipeline at
    construction; the pipeline never picks one itself.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Label recorded on each cycle result."""
        pass

    @abstractmethod
    async def send_async(self, request: AgentRequest) -> AgentResponse:
        """
        Send a prompt to the agent.

        Args:
            request: Prompt and generation parameters

        Returns:
            Agent response with content or error

        Raises:
            Should NOT raise exceptions - return AgentResponse with success=False instead
        """
        pass

    @abstractmethod
    async def is_available_async(self) -> bool:
        """
        Check if the agent can take requests.

        Note:
            Should NOT raise exceptions - return False on any error
        """
        pass
