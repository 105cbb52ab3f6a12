"""
Reasoning agent factory.
"""

from uxaudit.shared.infrastructure.config import Settings, settings as default_settings
from uxaudit.shared.infrastructure.logging import get_logger
from uxaudit.validation.agents.base import ReasoningAgent
from uxaudit.validation.agents.http_agent import HttpReasoningAgent
from uxaudit.validation.agents.offline import OfflineReasoningAgent

logger = get_logger(__name__)


def create_reasoning_agent(settings: Settings | None = None) -> ReasoningAgent:
    """
    Pick the agent implementation for this process.

    Args:
        settings: Process settings (defaults to the global instance)

    Returns:
        HttpReasoningAgent when an endpoint and API key are configured,
        otherwise OfflineReasoningAgent
    """
    settings = settings or default_settings

    if settings.agent_configured:
        logger.info("reasoning_agent_selected", agent="http", model=settings.agent_model)
        return HttpReasoningAgent(
            endpoint=settings.agent_endpoint,
            api_key=settings.agent_api_key,
            model=settings.agent_model,
            timeout_seconds=settings.agent_timeout_seconds,
        )

    logger.info("reasoning_agent_selected", agent="offline")
    return OfflineReasoningAgent()
