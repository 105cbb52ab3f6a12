"""Reasoning agents used by the validation cycles."""

from uxaudit.validation.agents.base import AgentRequest, AgentResponse, ReasoningAgent
from uxaudit.validation.agents.factory import create_reasoning_agent
from uxaudit.validation.agents.http_agent import HttpReasoningAgent
from uxaudit.validation.agents.offline import OfflineReasoningAgent

__all__ = [
    "AgentRequest",
    "AgentResponse",
    "ReasoningAgent",
    "HttpReasoningAgent",
    "OfflineReasoningAgent",
    "create_reasoning_agent",
]
