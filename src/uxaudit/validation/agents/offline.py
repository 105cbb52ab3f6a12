"""
Offline reasoning agent.
"""

from uxaudit.validation.agents.base import AgentRequest, AgentResponse, ReasoningAgent


class OfflineReasoningAgent(ReasoningAgent):
    """
    A no-op agent used when no backend is configured.

    Reports itself unavailable and answers every request with an
    unsuccessful response, so each cycle resolves to its fallback result.
    Output is fully deterministic.
    """

    @property
    def name(self) -> str:
        return "offline"

    async def send_async(self, request: AgentRequest) -> AgentResponse:
        return AgentResponse(
            content="",
            success=False,
            error_message="No reasoning agent configured (offline mode)",
            agent=self.name,
            model="offline",
        )

    async def is_available_async(self) -> bool:
        return False
