"""getContent: text of a Content record."""

from typing import Literal, Optional

import httpx
from pydantic import Field

from erp_tools.adapters.backend_client import BackendClient
from erp_tools.infra.config import ServerConfig
from erp_tools.models.records import ResolvedContent
from erp_tools.models.tool import ToolDefinition
from erp_tools.services.content_resolver import ContentResolver
from erp_tools.services.tool_contract import ToolInput, define_tool

PREVIEW_LENGTH = 500


class GetContentInput(ToolInput):
    content_id: str = Field(..., min_length=1, description="The unique identifier of the Content to retrieve.")
    config_id: Optional[str] = Field(
        default=None, description="The DataManager Config ID to optimize file saving path."
    )
    category: Optional[Literal["uploaded", "error"]] = Field(
        default=None, description="Category of the file (uploaded or error) for organization."
    )


def summarize_content(output: ResolvedContent, structured: dict) -> str:
    saved = f"Saved to: {output.saved_path}\n" if output.saved_path else ""
    preview = (output.text_data or "")[:PREVIEW_LENGTH]
    return f"Content Retrieved.\n{saved}\nPreview:\n{preview}..."


def build(server_config: ServerConfig, transport: Optional[httpx.AsyncBaseTransport] = None) -> ToolDefinition:
    async def run(params: GetContentInput, client: BackendClient) -> ResolvedContent:
        resolver = ContentResolver(client, server_config, logger=client.logger)
        return await resolver.resolve(
            params.content_id,
            config_id=params.config_id,
            category=params.category,
        )

    return define_tool(
        server_config,
        name="getContent",
        title="Get Content Text",
        description="Fetch the text content of a given Content ID (e.g. error log, text file).",
        input_model=GetContentInput,
        output_model=ResolvedContent,
        run=run,
        summarize=summarize_content,
        transport=transport,
    )


TOOL_BUILDERS = [build]
