"""Tests for reasoning agent implementations and selection."""

import json

import httpx
import pytest

from uxaudit.shared.infrastructure.config import Settings
from uxaudit.validation.agents.base import AgentRequest
from uxaudit.validation.agents.factory import create_reasoning_agent
from uxaudit.validation.agents.http_agent import HttpReasoningAgent
from uxaudit.validation.agents.offline import OfflineReasoningAgent

REQUEST = AgentRequest(system_prompt="system", user_message="audit summary", cycle="critique")


def _agent(handler):
    return HttpReasoningAgent(
        endpoint="https://agent.example.com/v1/",
        api_key="test-key",
        model="review-model",
        transport=httpx.MockTransport(handler),
    )


class TestHttpReasoningAgent:
    """Test HttpReasoningAgent against a mock transport."""

    @pytest.mark.asyncio
    async def test_successful_completion(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={"model": "review-model-2024", "choices": [{"message": {"content": '{"score": 8}'}}]},
            )

        response = await _agent(handler).send_async(REQUEST)

        assert response.success
        assert response.content == '{"score": 8}'
        assert response.model == "review-model-2024"
        assert response.agent == "http:review-model"
        assert seen["url"] == "https://agent.example.com/v1/chat/completions"
        assert seen["auth"] == "Bearer test-key"
        assert seen["body"]["messages"][1] == {"role": "user", "content": "audit summary"}

    @pytest.mark.asyncio
    async def test_http_error_is_returned_not_raised(self):
        agent = _agent(lambda request: httpx.Response(503, text="overloaded"))

        response = await agent.send_async(REQUEST)

        assert not response.success
        assert response.content == ""
        assert "503" in response.error_message

    @pytest.mark.asyncio
    async def test_empty_choices(self):
        agent = _agent(lambda request: httpx.Response(200, json={"choices": []}))

        response = await agent.send_async(REQUEST)

        assert not response.success
        assert response.error_message == "No choices in agent response"

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        response = await _agent(handler).send_async(REQUEST)

        assert not response.success
        assert "connection refused" in response.error_message

    @pytest.mark.asyncio
    async def test_available_when_configured(self):
        assert await _agent(lambda request: httpx.Response(200)).is_available_async()

    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            HttpReasoningAgent(endpoint="https://agent.example.com", api_key="")


class TestOfflineReasoningAgent:
    @pytest.mark.asyncio
    async def test_always_unavailable(self):
        agent = OfflineReasoningAgent()

        response = await agent.send_async(REQUEST)

        assert not await agent.is_available_async()
        assert not response.success
        assert agent.name == "offline"


class TestCreateReasoningAgent:
    def test_offline_without_configuration(self):
        settings = Settings(agent_endpoint=None, agent_api_key=None)

        assert isinstance(create_reasoning_agent(settings), OfflineReasoningAgent)

    def test_http_when_configured(self):
        settings = Settings(agent_endpoint="https://agent.example.com/v1", agent_api_key="key", agent_model="m")

        agent = create_reasoning_agent(settings)

        assert isinstance(agent, HttpReasoningAgent)
        assert agent.name == "http:m"
