"""Tool registry for the ERP tools."""

from typing import Any, Dict, List, Optional

import httpx

from erp_tools.infra.config import ServerConfig, config
from erp_tools.models.tool import ToolDefinition
from erp_tools.tools import TOOL_BUILDERS


def build_tools(
    server_config: Optional[ServerConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict[str, ToolDefinition]:
    """
    Build every tool against one configuration.

    Args:
        server_config: Configuration (defaults to the process config)
        transport: Optional httpx transport shared by all tools (tests)

    Returns:
        Tool name -> ToolDefinition, in registration order

    Raises:
        ValueError: Two factories produced the same tool name
    """
    server_config = server_config or config
    tools: Dict[str, ToolDefinition] = {}
    for builder in TOOL_BUILDERS:
        tool = builder(server_config, transport=transport)
        if tool.name in tools:
            raise ValueError(f"Duplicate tool name: {tool.name}")
        tools[tool.name] = tool
    return tools


def list_tool_metadata(tools: Optional[Dict[str, ToolDefinition]] = None) -> List[Dict[str, Any]]:
    """Name and metadata of each registered tool."""
    tools = tools if tools is not None else build_tools()
    return [tool.describe() for tool in tools.values()]
