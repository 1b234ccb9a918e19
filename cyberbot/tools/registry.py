from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from cyberbot.utils.logger import logger

ToolHandler = Callable[[Dict[str, Any]], Awaitable[Any]]


class ToolName(str, Enum):
    """Functions the assistant is configured to call."""
    VALIDATE_GITHUB_REPO = "validate_github_repo"
    GET_CODE_ANALYSIS = "get_code_analysis"
    ANALYZE_WEBSITE_PERFORMANCE = "analyze_website_performance"


class ToolRegistry:
    """Registry mapping assistant function names to handler coroutines.

    Adding a tool only requires registering it here; the run orchestrator
    never needs to know which tools exist.

    Attributes:
        tools (Dict[str, Dict[str, Any]]): handler and optional schema per function name
    """

    def __init__(self):
        """Initialize a new ToolRegistry instance."""
        self.tools: Dict[str, Dict[str, Any]] = {}
        logger.debug("Initialized new ToolRegistry instance")

    def register(self, name: Union[ToolName, str], handler: ToolHandler, schema: Optional[Dict[str, Any]] = None) -> None:
        """Register a handler under a function name.

        Args:
            name: Function name as the assistant will request it
            handler: Coroutine taking the (normalized) argument dict
            schema: Optional function definition advertised to the assistant
        """
        key = name.value if isinstance(name, ToolName) else name
        if key in self.tools:
            logger.warning("Replacing registered tool", function_name=key)

        self.tools[key] = {"handler": handler, "schema": schema}
        logger.debug("Registered tool", function_name=key)

    def is_registered(self, name: str) -> bool:
        return name in self.tools

    def registered_names(self) -> List[str]:
        return list(self.tools.keys())

    def get_schemas(self) -> List[Dict[str, Any]]:
        """Get function definitions for every tool that has one."""
        return [tool["schema"] for tool in self.tools.values() if tool["schema"] is not None]

    async def dispatch(self, name: str, args: Dict[str, Any]) -> Any:
        """Invoke the handler registered for ``name``.

        Unknown names produce an error payload instead of raising, so every
        tool call in a batch still gets an output. Handler exceptions propagate.
        """
        tool = self.tools.get(name)
        if tool is None:
            logger.warning("Tool not found", function_name=name, registered=self.registered_names())
            return {"error": f"Unknown function: {name}"}

        return await tool["handler"](args)
