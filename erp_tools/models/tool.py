"""Canonical tool definition and result models."""

from typing import Any, Awaitable, Callable, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

from erp_tools.models.context import RequestContext


class TextContent(BaseModel):
    """One human-readable content block of a tool result."""
    type: Literal["text"] = "text"
    text: str


class ToolResult(BaseModel):
    """Outcome of one tool invocation.

    Exactly one variant is produced: success carries structuredContent, error
    carries isError=True. Use the success()/error() constructors.
    """
    model_config = ConfigDict(populate_by_name=True)

    content: List[TextContent] = Field(default_factory=list)
    structured_content: Optional[Dict[str, Any]] = Field(default=None, alias="structuredContent")
    is_error: Optional[bool] = Field(default=None, alias="isError")

    @classmethod
    def success(cls, structured_content: Dict[str, Any], text: str) -> "ToolResult":
        return cls(content=[TextContent(text=text)], structured_content=structured_content)

    @classmethod
    def error(cls, message: str, debug_text: Optional[str] = None) -> "ToolResult":
        content = []
        if debug_text:
            content.append(TextContent(text=debug_text))
        content.append(TextContent(text=message))
        return cls(content=content, is_error=True)

    @property
    def message(self) -> str:
        """Text of the last content block (the error message for failures)."""
        return self.content[-1].text if self.content else ""

    def to_payload(self) -> Dict[str, Any]:
        """Wire shape: {content, structuredContent} or {content, isError}."""
        return self.model_dump(by_alias=True, exclude_none=True)


ToolHandler = Callable[[Dict[str, Any], Optional[RequestContext]], Awaitable[ToolResult]]


class ToolMetadata(BaseModel):
    """Metadata advertised to the invoking host."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    title: str = Field(..., description="Short display title")
    description: str = Field(..., description="Tool description")
    input_schema: Dict[str, Any] = Field(..., alias="inputSchema", description="JSON Schema for arguments")
    output_schema: Dict[str, Any] = Field(..., alias="outputSchema", description="JSON Schema for structuredContent")


class ToolDefinition(BaseModel):
    """A named tool: metadata plus its async handler. Immutable once built."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Canonical tool name")
    metadata: ToolMetadata
    handler: ToolHandler = Field(..., exclude=True)

    async def __call__(
        self,
        args: Dict[str, Any],
        request_context: Optional[RequestContext] = None,
    ) -> ToolResult:
        return await self.handler(args, request_context)

    def describe(self) -> Dict[str, Any]:
        """Serializable description (name + metadata) for listings."""
        return {
            "name": self.name,
            **self.metadata.model_dump(by_alias=True),
        }
