"""Generic find-and-project tool builder."""

from typing import Any, Callable, Dict, List, Optional, Type, Union

import httpx
from pydantic import BaseModel

from erp_tools.adapters.backend_client import BackendClient
from erp_tools.infra.config import ServerConfig
from erp_tools.infra.error_handler import NotFound
from erp_tools.models.backend import QueryRequest, Record
from erp_tools.models.tool import ToolDefinition
from erp_tools.services.tool_contract import SummarizeFunction, define_tool

FilterFunction = Callable[[Any], Dict[str, Any]]
RecordProjection = Callable[[Record, Any], BaseModel]
ListProjection = Callable[[List[Record], Any], BaseModel]


def build_query_tool(
    server_config: ServerConfig,
    *,
    name: str,
    title: str,
    description: str,
    entity_name: str,
    input_model: Type[BaseModel],
    output_model: Type[BaseModel],
    filters: FilterFunction,
    project: Union[RecordProjection, ListProjection],
    limit: Union[int, Callable[[Any], int]] = 1,
    order_by: Optional[str] = None,
    many: bool = False,
    not_found: Optional[Callable[[Any], str]] = None,
    summarize: Optional[SummarizeFunction] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ToolDefinition:
    """
    Build a tool that runs one performFind and projects the result.

    In single-record mode (many=False) an empty result is a NotFound error and
    the projection receives the first doc. In list mode the projection receives
    every doc and an empty list is a normal, successful result.

    Args:
        entity_name: Backend entity to query
        filters: params -> inputFields mapping (None and "" values are dropped)
        project: (doc, params) or (docs, params) -> output_model instance
        limit: viewSize, or params -> viewSize
        order_by: Sort key passed to the backend
        many: List mode
        not_found: params -> message for an empty single-record lookup
    """

    async def run(params: Any, client: BackendClient) -> BaseModel:
        view_size = limit(params) if callable(limit) else limit
        response = await client.find(
            QueryRequest(
                entity_name=entity_name,
                filters=filters(params),
                limit=view_size,
                order_by=order_by,
            )
        )
        if many:
            return project(response.docs, params)

        record = response.first
        if record is None:
            message = not_found(params) if not_found else f"{entity_name} not found"
            raise NotFound(message, entity_name=entity_name)
        return project(record, params)

    return define_tool(
        server_config,
        name=name,
        title=title,
        description=description,
        input_model=input_model,
        output_model=output_model,
        run=run,
        summarize=summarize,
        transport=transport,
    )
