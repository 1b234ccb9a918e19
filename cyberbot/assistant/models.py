"""
Data models for assistant runs and tool calls
"""

from typing import Optional, List, Dict, Any
from dataclasses import dataclass, field


# Run statuses reported by the Assistants API
QUEUED = "queued"
IN_PROGRESS = "in_progress"
REQUIRES_ACTION = "requires_action"
COMPLETED = "completed"
FAILED = "failed"
CANCELLED = "cancelled"
EXPIRED = "expired"
INCOMPLETE = "incomplete"

# Terminal statuses that end a turn without a reply
FAILURE_STATUSES = (FAILED, CANCELLED, EXPIRED, INCOMPLETE)

# Outcome of a single turn
TURN_COMPLETED = "completed"
TURN_FAILED = "failed"
TURN_TIMEOUT = "timeout"


@dataclass
class ToolCall:
    """A function call requested by a run in the requires_action state"""
    id: str
    name: str
    arguments: Dict[str, Any]


@dataclass
class ToolOutput:
    """Result of a tool call, submitted back to the run"""
    tool_call_id: str
    output: str

    def to_payload(self) -> Dict[str, str]:
        return {"tool_call_id": self.tool_call_id, "output": self.output}


@dataclass
class Run:
    """An assistant invocation against a thread"""
    id: str
    thread_id: str
    status: str
    tool_calls: List[ToolCall] = field(default_factory=list)
    last_error: Optional[Dict[str, Any]] = None


@dataclass
class PollingPolicy:
    """How often and how many times a run status is checked"""
    interval_seconds: float = 1.0
    max_attempts: int = 30


@dataclass
class ChatTurn:
    """Result of one conversational turn"""
    reply: str
    thread_id: str
    status: str = TURN_COMPLETED
    run_id: Optional[str] = None
