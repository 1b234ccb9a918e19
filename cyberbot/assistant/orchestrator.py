"""
Assistant run orchestration

Drives one conversational turn against the Assistants API: ensure a thread,
append the user message, start a run, poll it until it settles, and answer
any tool calls it raises along the way.
"""

import asyncio
import json
import re
from typing import Any, Dict, List, Optional

from cyberbot.exceptions import ChatTurnError, VendorAPIError
from cyberbot.tools.arguments import normalize_arguments
from cyberbot.tools.registry import ToolRegistry
from cyberbot.utils.logger import logger
from .client import AssistantClient
from .models import (
    ChatTurn,
    PollingPolicy,
    Run,
    ToolCall,
    ToolOutput,
    COMPLETED,
    FAILED,
    FAILURE_STATUSES,
    IN_PROGRESS,
    REQUIRES_ACTION,
    TURN_COMPLETED,
    TURN_FAILED,
    TURN_TIMEOUT,
)

CITATION_PATTERN = re.compile(r"【[^】†]*†[^】]*】")

FAILED_REPLY = "The assistant run failed. Please try again."
TIMEOUT_REPLY = "The assistant is taking too long to respond. Please try again."
NO_TEXT_REPLY = "No valid response."
FETCH_FAILED_REPLY = "Failed to fetch response."


def strip_citations(text: str) -> str:
    """Remove vendor citation markers such as 【3:1†source】."""
    return CITATION_PATTERN.sub("", text)


def extract_reply(messages: List[Dict[str, Any]]) -> Optional[str]:
    """Return the text of the newest assistant message, citations removed."""
    assistant_message = next((m for m in messages if m.get("role") == "assistant"), None)
    if not assistant_message:
        return None

    content = assistant_message.get("content") or []
    if not content:
        return None

    text = (content[0].get("text") or {}).get("value")
    if not text:
        return None
    return strip_citations(text)


class RunOrchestrator:
    """Runs one user turn to completion, servicing tool calls as they arrive"""

    def __init__(
        self,
        client: AssistantClient,
        registry: ToolRegistry,
        assistant_id: str,
        policy: Optional[PollingPolicy] = None,
    ):
        self.client = client
        self.registry = registry
        self.assistant_id = assistant_id
        self.policy = policy or PollingPolicy()

    async def run_turn(self, message: str, thread_id: Optional[str] = None) -> ChatTurn:
        thread_id = await self._ensure_thread(thread_id)

        try:
            await self.client.add_message(thread_id, message)
        except VendorAPIError as e:
            raise ChatTurnError("Failed to add message to thread", thread_id=thread_id, cause=e)

        try:
            run = await self.client.create_run(thread_id, self.assistant_id)
        except VendorAPIError as e:
            raise ChatTurnError("Failed to create run", thread_id=thread_id, cause=e)

        logger.info("Run created", thread_id=thread_id, run_id=run.id)

        status = await self._poll(thread_id, run.id)

        if status == COMPLETED:
            reply = await self._fetch_reply(thread_id)
            return ChatTurn(reply=reply, thread_id=thread_id, status=TURN_COMPLETED, run_id=run.id)

        if status in FAILURE_STATUSES:
            return ChatTurn(reply=FAILED_REPLY, thread_id=thread_id, status=TURN_FAILED, run_id=run.id)

        return ChatTurn(reply=TIMEOUT_REPLY, thread_id=thread_id, status=TURN_TIMEOUT, run_id=run.id)

    async def _ensure_thread(self, thread_id: Optional[str]) -> str:
        if thread_id:
            return thread_id

        try:
            thread_id = await self.client.create_thread()
        except VendorAPIError as e:
            raise ChatTurnError("Failed to create thread", cause=e)

        logger.info("Thread created", thread_id=thread_id)
        return thread_id

    async def _poll(self, thread_id: str, run_id: str) -> str:
        """Poll until the run settles or attempts run out; returns the last status seen."""
        status = IN_PROGRESS

        for attempt in range(1, self.policy.max_attempts + 1):
            await asyncio.sleep(self.policy.interval_seconds)

            try:
                run = await self.client.get_run(thread_id, run_id)
            except VendorAPIError as e:
                logger.error("Status check failed", thread_id=thread_id, run_id=run_id, error=str(e))
                return FAILED

            status = run.status
            logger.debug("Run status", run_id=run_id, status=status, attempt=attempt)

            if status == REQUIRES_ACTION and run.tool_calls:
                await self._handle_tool_calls(run)
                status = IN_PROGRESS
                continue

            if status in FAILURE_STATUSES:
                logger.error("Run failed", run_id=run_id, status=status, last_error=run.last_error)
                return status

            if status == COMPLETED:
                return status

        logger.warning("Run polling exhausted", run_id=run_id, attempts=self.policy.max_attempts)
        return status

    async def _handle_tool_calls(self, run: Run) -> None:
        logger.info("Processing tool calls", run_id=run.id, count=len(run.tool_calls))

        outputs = []
        for tool_call in run.tool_calls:
            result = await self._execute_tool_call(tool_call)
            outputs.append(ToolOutput(tool_call_id=tool_call.id, output=json.dumps(result)))

        try:
            await self.client.submit_tool_outputs(run.thread_id, run.id, outputs)
        except VendorAPIError as e:
            raise ChatTurnError("Failed to submit tool outputs", thread_id=run.thread_id, cause=e)

    async def _execute_tool_call(self, tool_call: ToolCall) -> Any:
        arguments = normalize_arguments(tool_call.arguments)
        logger.info("Tool call", function_name=tool_call.name, arguments=arguments)

        try:
            result = await self.registry.dispatch(tool_call.name, arguments)
        except Exception as e:
            logger.error("Tool call failed", function_name=tool_call.name, error=str(e), exc_info=True)
            return {"error": str(e) or "Function call failed"}

        has_error = isinstance(result, dict) and "error" in result
        logger.info("Tool call finished", function_name=tool_call.name, has_error=has_error)
        return result

    async def _fetch_reply(self, thread_id: str) -> str:
        try:
            messages = await self.client.list_messages(thread_id)
        except VendorAPIError as e:
            logger.error("Failed to fetch messages", thread_id=thread_id, error=str(e))
            return FETCH_FAILED_REPLY

        return extract_reply(messages) or NO_TEXT_REPLY
