"""Uniform tool contract: schema-validated input and output, two-shape result."""

import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Type

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from erp_tools.adapters.backend_client import BackendClient, dumps_diagnostics
from erp_tools.infra.auth import resolve_token
from erp_tools.infra.config import ServerConfig
from erp_tools.infra.error_handler import ToolError, ValidationError, describe_error
from erp_tools.models.context import RequestContext
from erp_tools.models.tool import ToolDefinition, ToolMetadata, ToolResult
from erp_tools.services.projector import dump

logger = logging.getLogger(__name__)

RunFunction = Callable[[Any, BackendClient], Awaitable[BaseModel]]
SummarizeFunction = Callable[[BaseModel, Dict[str, Any]], str]


class ToolInput(BaseModel):
    """Base for tool argument models (camelCase on the wire, unknown keys ignored)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


def format_validation_error(error: PydanticValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "input"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


def default_summary(output: BaseModel, structured: Dict[str, Any]) -> str:
    return json.dumps(structured)


def define_tool(
    server_config: ServerConfig,
    *,
    name: str,
    title: str,
    description: str,
    input_model: Type[BaseModel],
    output_model: Type[BaseModel],
    run: RunFunction,
    summarize: Optional[SummarizeFunction] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ToolDefinition:
    """
    Wrap a tool body in the uniform contract.

    The returned handler validates arguments against input_model, resolves the
    outbound credential, runs the body with a fresh BackendClient and returns
    exactly one ToolResult variant. Failures never escape the handler.

    Args:
        server_config: Process-wide configuration
        name: Tool name exposed to the host
        title: Short display title
        description: Tool description for the host
        input_model: Pydantic model for arguments
        output_model: Pydantic model the body returns
        run: async (params, client) -> output_model instance
        summarize: Optional text summary builder (defaults to compact JSON)
        transport: Optional httpx transport (tests)

    Returns:
        ToolDefinition
    """
    summarize = summarize or default_summary
    tool_logger = logger.getChild(name)

    async def handler(args: Dict[str, Any], request_context: Optional[RequestContext] = None) -> ToolResult:
        try:
            params = input_model.model_validate(args or {})
        except PydanticValidationError as e:
            error = ValidationError(f"Invalid input for {name}: {format_validation_error(e)}")
            tool_logger.info(error.message, extra={"tool_name": name, "error_category": error.category.value})
            return ToolResult.error(error.message)

        token = resolve_token(request_context, server_config)
        client = BackendClient(server_config, token=token, transport=transport, logger=tool_logger)

        try:
            output = await run(params, client)
            if not isinstance(output, output_model):
                output = output_model.model_validate(output)
        except ToolError as e:
            tool_logger.warning(
                f"Error in {name}: {describe_error(e)}",
                extra={"tool_name": name, "error_category": e.category.value},
            )
            debug_text = None
            if server_config.expose_diagnostics and e.diagnostics:
                debug_text = dumps_diagnostics(e.diagnostics)
            return ToolResult.error(f"Error: {describe_error(e)}", debug_text=debug_text)
        except Exception as e:
            # Any other failure is still reported, never raised into the host
            tool_logger.error(f"Unexpected error in {name}: {e}", exc_info=True, extra={"tool_name": name})
            return ToolResult.error(f"Error: {describe_error(e)}")

        structured = dump(output)
        return ToolResult.success(structured, summarize(output, structured))

    metadata = ToolMetadata(
        title=title,
        description=description,
        input_schema=input_model.model_json_schema(),
        output_schema=output_model.model_json_schema(by_alias=True),
    )
    return ToolDefinition(name=name, metadata=metadata, handler=handler)
