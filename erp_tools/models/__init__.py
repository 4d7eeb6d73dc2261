from .backend import QueryRequest, QueryResponse, Record
from .context import AuthInfo, RequestContext
from .tool import TextContent, ToolDefinition, ToolMetadata, ToolResult

__all__ = [
    "QueryRequest",
    "QueryResponse",
    "Record",
    "AuthInfo",
    "RequestContext",
    "TextContent",
    "ToolDefinition",
    "ToolMetadata",
    "ToolResult",
]
