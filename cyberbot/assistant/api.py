from typing import Any, AsyncGenerator, Optional, Tuple

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from cyberbot.exceptions import AssistantAPIError, ChatTurnError, ValidationError
from cyberbot.pagespeed.api import get_pagespeed_client
from cyberbot.pagespeed.client import PageSpeedClient
from cyberbot.sonarcloud.api import get_sonarcloud_client
from cyberbot.sonarcloud.client import SonarCloudClient
from cyberbot.tools.handlers import build_default_registry
from cyberbot.utils.config import config
from cyberbot.utils.logger import logger
from .client import AssistantClient
from .models import PollingPolicy
from .orchestrator import RunOrchestrator

router = APIRouter(tags=["chat"])


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: Optional[Any] = None
    thread_id: Optional[Any] = Field(None, alias="threadId")


async def get_assistant_client() -> AsyncGenerator[Optional[AssistantClient], None]:
    if not config.OPENAI_API_KEY:
        yield None
        return

    async with AssistantClient() as client:
        yield client


def get_polling_policy() -> PollingPolicy:
    return PollingPolicy(
        interval_seconds=config.RUN_POLL_INTERVAL_SECONDS,
        max_attempts=config.RUN_POLL_MAX_ATTEMPTS,
    )


def validate_chat_request(request: ChatRequest) -> Tuple[str, Optional[str]]:
    if not isinstance(request.message, str) or not request.message.strip():
        raise ValidationError("Message is required")
    if request.thread_id is not None and not isinstance(request.thread_id, str):
        raise ValidationError("threadId must be a string")
    return request.message, request.thread_id or None


def describe_assistant_error(error: Exception) -> str:
    """User-safe message for a failure that escaped the turn."""
    if isinstance(error, AssistantAPIError):
        if error.vendor_message:
            return error.vendor_message
        if error.status_code == 401:
            return "Invalid API key."
        if error.status_code == 404:
            return "Assistant not found."
    return str(error) or "Unable to reach assistant."


@router.post("/chat")
async def chat(
    request: ChatRequest,
    assistant_client: Optional[AssistantClient] = Depends(get_assistant_client),
    sonar_client: Optional[SonarCloudClient] = Depends(get_sonarcloud_client),
    pagespeed_client: PageSpeedClient = Depends(get_pagespeed_client),
    policy: PollingPolicy = Depends(get_polling_policy),
):
    logger.debug(
        "Environment check",
        has_assistant_id=bool(config.OPENAI_ASSISTANT_ID),
        has_api_key=assistant_client is not None,
        has_organization=bool(config.OPENAI_ORGANIZATION),
    )

    if assistant_client is None or not config.OPENAI_ASSISTANT_ID:
        logger.error("Missing OpenAI configuration")
        return JSONResponse({"error": "Missing OpenAI configuration"}, status_code=500)

    try:
        message, thread_id = validate_chat_request(request)
    except ValidationError as e:
        return JSONResponse({"error": e.message}, status_code=400)

    orchestrator = RunOrchestrator(
        client=assistant_client,
        registry=build_default_registry(sonar_client, pagespeed_client),
        assistant_id=config.OPENAI_ASSISTANT_ID,
        policy=policy,
    )

    try:
        turn = await orchestrator.run_turn(message, thread_id)
    except ChatTurnError as e:
        logger.error("Chat turn failed", error=e.message, thread_id=e.thread_id, cause=str(e.cause))
        body = {"error": e.message}
        if e.thread_id:
            body["threadId"] = e.thread_id
        return JSONResponse(body, status_code=500)
    except Exception as e:
        logger.error(f"Chat API error: {e}", exc_info=True)
        return JSONResponse({"error": describe_assistant_error(e)}, status_code=500)

    logger.info("Chat turn finished", thread_id=turn.thread_id, run_id=turn.run_id, outcome=turn.status)
    return {
        "reply": turn.reply,
        "threadId": turn.thread_id,
        "status": "success",
    }
