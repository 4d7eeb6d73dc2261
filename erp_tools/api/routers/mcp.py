"""JSON-RPC 2.0 endpoint exposing the tools as tools/list and tools/call."""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from erp_tools.api.dependencies import get_request_context, get_tools
from erp_tools.api.models import (
    JSONRPC_INVALID_PARAMS,
    JSONRPC_INVALID_REQUEST,
    JSONRPC_METHOD_NOT_FOUND,
    JSONRPC_PARSE_ERROR,
    JsonRpcRequest,
)
from erp_tools.models.context import RequestContext
from erp_tools.models.tool import ToolDefinition
from erp_tools.services.tool_execution_engine import execute_tool_call
from erp_tools.services.tool_registry import list_tool_metadata

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(request_id: Any, code: int, message: str) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}}


def _result(request_id: Any, result: Dict[str, Any]) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


@router.post("/mcp", tags=["MCP"])
async def handle_jsonrpc(
    request: Request,
    tools: Dict[str, ToolDefinition] = Depends(get_tools),
    request_context: RequestContext = Depends(get_request_context),
):
    """
    Handle a JSON-RPC 2.0 request.

    Supported methods: tools/list, tools/call. Errors are returned in the
    JSON-RPC envelope with HTTP 200.
    """
    try:
        payload = await request.json()
    except ValueError:
        return _error(None, JSONRPC_PARSE_ERROR, "Parse error")

    if not isinstance(payload, dict):
        return _error(None, JSONRPC_INVALID_REQUEST, "Invalid Request")

    try:
        rpc = JsonRpcRequest.model_validate(payload)
    except ValueError:
        return _error(payload.get("id"), JSONRPC_INVALID_REQUEST, "Invalid Request")

    if rpc.method == "tools/list":
        return _result(rpc.id, {"tools": list_tool_metadata(tools)})

    if rpc.method == "tools/call":
        name = rpc.params.get("name")
        arguments = rpc.params.get("arguments") or {}
        if not isinstance(name, str) or not isinstance(arguments, dict):
            return _error(rpc.id, JSONRPC_INVALID_PARAMS, "Invalid params: expected name and arguments")
        result = await execute_tool_call(tools, name, arguments, request_context)
        return _result(rpc.id, result.to_payload())

    logger.warning("Unknown JSON-RPC method", extra={"method": rpc.method})
    return _error(rpc.id, JSONRPC_METHOD_NOT_FOUND, f"Method not found: {rpc.method}")
