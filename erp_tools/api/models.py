"""API request/response models."""

from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Tools Models
# ============================================================================

class InvokeToolRequest(BaseModel):
    """Request body for invoking a tool directly."""
    arguments: Dict[str, Any] = Field(default_factory=dict, description="Tool arguments (camelCase keys)")


class ToolDescription(BaseModel):
    """One entry of the tool listing."""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    title: str
    description: str
    input_schema: Dict[str, Any] = Field(..., alias="inputSchema")
    output_schema: Dict[str, Any] = Field(..., alias="outputSchema")


class ToolListResponse(BaseModel):
    """Response model for listing tools."""
    tools: List[ToolDescription]
    count: int


# ============================================================================
# JSON-RPC Models
# ============================================================================

JSONRPC_PARSE_ERROR = -32700
JSONRPC_INVALID_REQUEST = -32600
JSONRPC_METHOD_NOT_FOUND = -32601
JSONRPC_INVALID_PARAMS = -32602


class JsonRpcRequest(BaseModel):
    """JSON-RPC 2.0 request envelope."""
    jsonrpc: str = Field(default="2.0")
    id: Optional[Union[str, int]] = None
    method: str
    params: Dict[str, Any] = Field(default_factory=dict)

