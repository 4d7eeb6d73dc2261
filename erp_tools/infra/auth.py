"""Outbound credential resolution and header construction."""

from types import MappingProxyType
from typing import Mapping, Optional

from erp_tools.infra.config import ServerConfig
from erp_tools.models.context import RequestContext

DOWNSTREAM_TOKEN_HEADER = "X-Downstream-Token"
REDACTED = "Bearer ***"


def _present(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def resolve_token(
    request_context: Optional[RequestContext],
    server_config: ServerConfig,
) -> Optional[str]:
    """
    Resolve the bearer credential for outbound backend calls.

    Precedence: the request-scoped delegated token, then the static configured
    token. Returns None when neither is set; callers then send no
    Authorization header at all.

    Args:
        request_context: Context of the current invocation (may be None)
        server_config: Process-wide server configuration

    Returns:
        Token string or None
    """
    if request_context is not None:
        delegated = _present(request_context.auth_info.downstream_token)
        if delegated:
            return delegated
    return _present(server_config.backend_access_token)


def build_headers(
    token: Optional[str],
    user_agent: str,
    content_type: Optional[str] = None,
    accept: str = "application/json",
) -> Mapping[str, str]:
    """
    Build an immutable header set for one outbound request.

    Args:
        token: Resolved bearer token, or None to omit Authorization
        user_agent: Configured User-Agent string
        content_type: Optional Content-Type (leave None for multipart bodies)
        accept: Accept header value

    Returns:
        Read-only mapping of header names to values
    """
    headers = {
        "Accept": accept,
        "User-Agent": user_agent,
    }
    if content_type:
        headers["Content-Type"] = content_type
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return MappingProxyType(headers)


def redact_headers(headers: Mapping[str, str]) -> dict:
    """Copy of headers safe to log or echo back (credential masked)."""
    # SECURITY: Never log secrets or tokens
    return {
        name: (REDACTED if name.lower() == "authorization" else value)
        for name, value in headers.items()
    }


def request_context_from_headers(
    headers: Mapping[str, str],
    server_config: ServerConfig,
    request_id: Optional[str] = None,
) -> RequestContext:
    """
    Build a RequestContext from inbound host request headers.

    The delegated token is read from X-Downstream-Token. An inbound
    `Authorization: Bearer ...` is forwarded only when the server is
    configured to trust it (trust_inbound_bearer).
    """
    token = _present(headers.get(DOWNSTREAM_TOKEN_HEADER))
    if token is None and server_config.trust_inbound_bearer:
        authorization = headers.get("Authorization") or ""
        scheme, _, credential = authorization.partition(" ")
        if scheme.lower() == "bearer":
            token = _present(credential)
    return RequestContext.with_token(token, request_id=request_id)
