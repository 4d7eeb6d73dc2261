"""Tool execution engine that dispatches calls to registered tools."""

import logging
import time
from typing import Any, Dict, Optional

from erp_tools.infra.error_handler import ToolNotFound
from erp_tools.models.context import RequestContext
from erp_tools.models.tool import ToolDefinition, ToolResult

logger = logging.getLogger(__name__)


async def execute_tool_call(
    tools: Dict[str, ToolDefinition],
    name: str,
    args: Optional[Dict[str, Any]] = None,
    request_context: Optional[RequestContext] = None,
) -> ToolResult:
    """
    Execute a tool call by name.

    Tools report their own failures as error results, so this never raises
    for a registered tool.

    Args:
        tools: Registry built by build_tools()
        name: Tool name
        args: Tool arguments
        request_context: Per-invocation context (delegated credential)

    Returns:
        ToolResult (an error result when the tool is unknown)
    """
    tool = tools.get(name)
    if tool is None:
        error = ToolNotFound(f"Unknown tool: {name}")
        logger.warning(error.message, extra={"tool_name": name, "error_category": error.category.value})
        return ToolResult.error(f"Error: {error.message}")

    request_id = request_context.request_id if request_context else None
    start_time = time.time()
    result = await tool(args or {}, request_context)
    latency_ms = int((time.time() - start_time) * 1000)

    # SECURITY: Never log arguments or tokens, only the outcome
    logger.info(
        f"Tool {name} completed",
        extra={
            "tool_name": name,
            "request_id": request_id,
            "latency_ms": latency_ms,
            "is_error": bool(result.is_error),
        },
    )
    return result
