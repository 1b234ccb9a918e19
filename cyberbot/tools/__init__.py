from .arguments import PARAM_MAPPINGS, normalize_arguments
from .registry import ToolName, ToolRegistry

__all__ = ["PARAM_MAPPINGS", "normalize_arguments", "ToolName", "ToolRegistry"]
