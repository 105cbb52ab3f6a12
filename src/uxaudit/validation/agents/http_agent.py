"""
HTTP reasoning agent.

Talks to any OpenAI-compatible chat completions endpoint over httpx.
"""

import time

import httpx

from uxaudit.shared.infrastructure.logging import get_logger
from uxaudit.validation.agents.base import AgentRequest, AgentResponse, ReasoningAgent

logger = get_logger(__name__)


class HttpReasoningAgent(ReasoningAgent):
    """Chat-completions client used for the live validation cycles."""

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        model: str = "gpt-4o-mini",
        timeout_seconds: int = 60,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not api_key:
            raise ValueError("Reasoning agent API key is required")
        if not endpoint:
            raise ValueError("Reasoning agent endpoint is required")

        self._base_url = endpoint.rstrip("/")
        self._api_key = api_key
        self._default_model = model
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    @property
    def name(self) -> str:
        return f"http:{self._default_model}"

    async def send_async(self, request: AgentRequest) -> AgentResponse:
        start_time = time.time()
        model = request.model or self._default_model

        try:
            headers = {
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self._api_key}",
            }
            payload = {
                "model": model,
                "messages": [
                    {"role": "system", "content": request.system_prompt},
                    {"role": "user", "content": request.user_message},
                ],
                "temperature": request.temperature,
                "max_tokens": request.max_tokens,
                "response_format": {"type": "json_object"},
            }

            timeout = request.timeout_seconds or self._timeout_seconds
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                response = await client.post(f"{self._base_url}/chat/completions", headers=headers, json=payload)
                response.raise_for_status()
                result = response.json()

            duration_ms = int((time.time() - start_time) * 1000)

            if not result.get("choices"):
                return AgentResponse(
                    content="",
                    success=False,
                    error_message="No choices in agent response",
                    agent=self.name,
                    model=model,
                    duration_ms=duration_ms,
                )

            return AgentResponse(
                content=result["choices"][0]["message"]["content"] or "",
                success=True,
                agent=self.name,
                model=result.get("model", model),
                duration_ms=duration_ms,
            )

        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as e:
            duration_ms = int((time.time() - start_time) * 1000)
            logger.warning("agent_request_failed", agent=self.name, cycle=request.cycle, error=str(e))
            return AgentResponse(
                content="",
                success=False,
                error_message=str(e),
                agent=self.name,
                model=model,
                duration_ms=duration_ms,
            )

    async def is_available_async(self) -> bool:
        # Only checks configuration; a probe call would cost a request
        return bool(self._api_key and self._base_url)
