"""Direct tool invocation API router."""

from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from erp_tools.api.dependencies import get_request_context, get_tools
from erp_tools.api.models import InvokeToolRequest, ToolListResponse
from erp_tools.models.context import RequestContext
from erp_tools.models.tool import ToolDefinition
from erp_tools.services.tool_execution_engine import execute_tool_call
from erp_tools.services.tool_registry import list_tool_metadata

router = APIRouter(prefix="/tools")


@router.get("", response_model=ToolListResponse, tags=["Tools"])
async def list_tools(tools: Dict[str, ToolDefinition] = Depends(get_tools)):
    """List registered tools with their input and output schemas."""
    descriptions = list_tool_metadata(tools)
    return {"tools": descriptions, "count": len(descriptions)}


@router.post("/{name}", tags=["Tools"])
async def invoke_tool(
    name: str,
    body: Optional[InvokeToolRequest] = None,
    tools: Dict[str, ToolDefinition] = Depends(get_tools),
    request_context: RequestContext = Depends(get_request_context),
):
    """
    Invoke a tool by name.

    Tool failures come back as a 200 with `isError: true`; only an unknown
    tool name is an HTTP error.
    """
    if name not in tools:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown tool: {name}")

    result = await execute_tool_call(tools, name, body.arguments if body else {}, request_context)
    return result.to_payload()
