from sports.proxy.core.tools.invoker import ToolInvoker
from sports.proxy.core.tools.local import (
    LOCAL_TOOL_NAMES,
    LOCAL_TOOLS,
    call_local_tool,
    is_local_tool,
    validate_arguments,
)

__all__ = [
    "ToolInvoker",
    "LOCAL_TOOL_NAMES",
    "LOCAL_TOOLS",
    "call_local_tool",
    "is_local_tool",
    "validate_arguments",
]
