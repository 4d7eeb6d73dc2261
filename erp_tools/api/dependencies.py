"""FastAPI dependencies for the tool routers."""

from typing import Dict

from fastapi import Request

from erp_tools.infra.auth import request_context_from_headers
from erp_tools.models.context import RequestContext
from erp_tools.models.tool import ToolDefinition


def get_tools(request: Request) -> Dict[str, ToolDefinition]:
    """Tool registry built at application startup."""
    return request.app.state.tools


def get_request_context(request: Request) -> RequestContext:
    """Per-request context carrying the delegated credential, if any."""
    return request_context_from_headers(
        request.headers,
        request.app.state.server_config,
        request_id=getattr(request.state, "request_id", None),
    )
