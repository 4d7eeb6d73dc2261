"""Error types for tool execution and backend calls.

Every failure a tool can report is a ToolError. Handlers catch them at the
tool boundary and turn them into an error ToolResult; nothing here retries.
"""

from typing import Any, Dict, Optional
from enum import Enum


class ErrorCategory(str, Enum):
    """Categories of errors for reporting."""
    VALIDATION = "validation"  # Input failed the declared schema
    NOT_FOUND = "not_found"  # Queried entity has zero matching rows
    MISSING_LINK = "missing_link"  # Expected foreign key absent on a record
    NETWORK = "network"  # Connection refused, DNS, timeout
    API_ERROR = "api_error"  # Non-2xx response from the backend
    SERVICE_ERROR = "service_error"  # 2xx response carrying a service failure
    NO_CONTENT = "no_content"  # Every content retrieval strategy came back empty
    UNKNOWN_TOOL = "unknown_tool"
    UNKNOWN = "unknown"


class ToolError(Exception):
    """Base exception for failures reported through the tool error envelope."""

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(self, message: str, diagnostics: Optional[Dict[str, Any]] = None):
        self.message = message
        self.diagnostics = diagnostics
        super().__init__(message)


class ValidationError(ToolError):
    """Input validation errors."""
    category = ErrorCategory.VALIDATION


class NotFound(ToolError):
    """A lookup returned no rows."""
    category = ErrorCategory.NOT_FOUND

    def __init__(self, message: str, entity_name: Optional[str] = None, entity_id: Optional[str] = None):
        self.entity_name = entity_name
        self.entity_id = entity_id
        super().__init__(message)


class MissingLink(ToolError):
    """A record lacks the foreign key needed for the next lookup."""
    category = ErrorCategory.MISSING_LINK

    def __init__(self, message: str, entity_id: Optional[str] = None, field: Optional[str] = None):
        self.entity_id = entity_id
        self.field = field
        super().__init__(message)


class NoRetrievableContent(ToolError):
    """All content resolution strategies were exhausted without text."""
    category = ErrorCategory.NO_CONTENT

    def __init__(self, content_id: str, data_resource_type_id: Optional[str] = None):
        self.content_id = content_id
        self.data_resource_type_id = data_resource_type_id
        super().__init__(
            f"No text content found for contentId: {content_id} (Type: {data_resource_type_id})"
        )


class ToolNotFound(ToolError):
    """Requested tool name is not registered."""
    category = ErrorCategory.UNKNOWN_TOOL


class BackendError(ToolError):
    """Base class for failures talking to the ERP backend."""
    category = ErrorCategory.API_ERROR


class BackendUnavailable(BackendError):
    """Transport-level failure (connection refused, timeout, TLS)."""
    category = ErrorCategory.NETWORK


class BackendHttpError(BackendError):
    """Backend answered with a non-success HTTP status."""
    category = ErrorCategory.API_ERROR

    def __init__(self, message: str, status_code: int, diagnostics: Optional[Dict[str, Any]] = None):
        self.status_code = status_code
        super().__init__(message, diagnostics=diagnostics)


class BackendServiceError(BackendError):
    """Backend answered 2xx but the body reports a failure or is unusable."""
    category = ErrorCategory.SERVICE_ERROR


def describe_error(error: Exception) -> str:
    """Human-readable message for an error envelope."""
    if isinstance(error, ToolError):
        return error.message
    return str(error) or type(error).__name__
