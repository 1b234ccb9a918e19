"""
HTTP client for the OpenAI Assistants API
"""

import json
from typing import Optional, Dict, Any, List
import httpx

from cyberbot.exceptions import AssistantAPIError, ConfigurationError
from cyberbot.utils.config import config
from cyberbot.utils.logger import logger
from .models import Run, ToolCall, ToolOutput


class AssistantClient:
    """Async HTTP client for threads, messages, runs and tool outputs"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        organization: Optional[str] = None,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else config.OPENAI_API_KEY
        self.organization = organization if organization is not None else config.OPENAI_ORGANIZATION
        self.base_url = (base_url or config.OPENAI_API_BASE).rstrip("/")
        self.timeout = timeout or config.HTTP_TIMEOUT_SECONDS
        self._client = http_client
        self._owns_client = http_client is None

        if not self.api_key:
            raise ConfigurationError("Missing OpenAI configuration: OPENAI_API_KEY is not set")

    async def __aenter__(self):
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("Client not initialized. Use 'async with AssistantClient()' context manager")
        return self._client

    def _get_headers(self) -> Dict[str, str]:
        """Get headers with authentication"""
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "OpenAI-Beta": "assistants=v2",
        }
        if self.organization:
            headers["OpenAI-Organization"] = self.organization
        return headers

    async def _request(self, method: str, endpoint: str, **kwargs) -> Dict[str, Any]:
        """Make an authenticated API request"""
        url = f"{self.base_url}{endpoint}"

        try:
            response = await self.client.request(
                method=method,
                url=url,
                headers=self._get_headers(),
                **kwargs
            )
        except httpx.RequestError as e:
            logger.error("Assistant API request failed", endpoint=endpoint, error=str(e))
            raise AssistantAPIError(f"Request failed: {str(e)}", status_code=503)

        if response.status_code >= 400:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {"detail": response.text}

            logger.error(
                "Assistant API error",
                endpoint=endpoint,
                status_code=response.status_code,
                error_data=error_data,
            )
            vendor_error = error_data.get("error") if isinstance(error_data, dict) else None
            message = None
            if isinstance(vendor_error, dict):
                message = vendor_error.get("message")

            raise AssistantAPIError(
                message=message or f"Request failed with status {response.status_code}",
                status_code=response.status_code,
                details=error_data,
            )

        return response.json()

    # Threads and messages
    async def create_thread(self) -> str:
        """Create a new conversation thread and return its id"""
        response = await self._request("POST", "/threads", json={})
        return response["id"]

    async def add_message(self, thread_id: str, content: str, role: str = "user") -> Dict[str, Any]:
        """Append a message to a thread"""
        return await self._request(
            "POST",
            f"/threads/{thread_id}/messages",
            json={"role": role, "content": content},
        )

    async def list_messages(self, thread_id: str) -> List[Dict[str, Any]]:
        """List thread messages, newest first"""
        response = await self._request("GET", f"/threads/{thread_id}/messages")
        return response.get("data", [])

    # Runs
    async def create_run(self, thread_id: str, assistant_id: str) -> Run:
        """Start a run against a thread"""
        response = await self._request(
            "POST",
            f"/threads/{thread_id}/runs",
            json={"assistant_id": assistant_id},
        )
        return self._parse_run(response, thread_id)

    async def get_run(self, thread_id: str, run_id: str) -> Run:
        """Get run status, including any pending tool calls"""
        response = await self._request("GET", f"/threads/{thread_id}/runs/{run_id}")
        return self._parse_run(response, thread_id)

    async def submit_tool_outputs(self, thread_id: str, run_id: str, outputs: List[ToolOutput]) -> Run:
        """Submit all tool outputs for a requires_action run in one batch"""
        response = await self._request(
            "POST",
            f"/threads/{thread_id}/runs/{run_id}/submit_tool_outputs",
            json={"tool_outputs": [output.to_payload() for output in outputs]},
        )
        return self._parse_run(response, thread_id)

    async def get_assistant(self, assistant_id: str) -> Dict[str, Any]:
        """Fetch an assistant definition (model, instructions, tools)"""
        return await self._request("GET", f"/assistants/{assistant_id}")

    def _parse_run(self, data: Dict[str, Any], thread_id: str) -> Run:
        required_action = data.get("required_action") or {}
        raw_calls = (required_action.get("submit_tool_outputs") or {}).get("tool_calls") or []

        return Run(
            id=data["id"],
            thread_id=data.get("thread_id", thread_id),
            status=data.get("status", ""),
            tool_calls=[self._parse_tool_call(call) for call in raw_calls],
            last_error=data.get("last_error"),
        )

    def _parse_tool_call(self, data: Dict[str, Any]) -> ToolCall:
        function = data.get("function") or {}
        raw_arguments = function.get("arguments") or "{}"

        try:
            arguments = json.loads(raw_arguments)
        except json.JSONDecodeError:
            logger.warning("Malformed tool call arguments", tool_call_id=data.get("id"), arguments=raw_arguments)
            arguments = {}

        if not isinstance(arguments, dict):
            arguments = {}

        return ToolCall(
            id=data["id"],
            name=function.get("name", ""),
            arguments=arguments,
        )
