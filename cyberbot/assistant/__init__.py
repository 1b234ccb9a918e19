from .client import AssistantClient
from .models import ChatTurn, PollingPolicy, Run, ToolCall, ToolOutput
from .orchestrator import RunOrchestrator, extract_reply, strip_citations

__all__ = [
    "AssistantClient",
    "ChatTurn",
    "PollingPolicy",
    "Run",
    "ToolCall",
    "ToolOutput",
    "RunOrchestrator",
    "extract_reply",
    "strip_citations",
]
