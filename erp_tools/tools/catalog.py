"""Catalog and facility tools."""

from typing import List, Optional

import httpx
from pydantic import Field

from erp_tools.adapters.backend_client import BackendClient
from erp_tools.infra.config import ServerConfig
from erp_tools.infra.error_handler import NotFound
from erp_tools.models.backend import QueryRequest, Record
from erp_tools.models.records import PickProfileGroup, PickProfileGroupList, Product
from erp_tools.models.tool import ToolDefinition
from erp_tools.services.projector import project
from erp_tools.services.query_tool import build_query_tool
from erp_tools.services.tool_contract import ToolInput, define_tool

PICK_PROFILE_VIEW_SIZE = 20


class FindProductInput(ToolInput):
    product_ref: str = Field(
        ..., alias="id", min_length=2, description="The Product ID or Internal Name to search for."
    )


class FindPickProfileGroupsInput(ToolInput):
    pick_profile_group_id: Optional[str] = Field(default=None, description="The ID of the pick profile group.")
    group_name: Optional[str] = Field(default=None, description="The name of the group.")
    description: Optional[str] = Field(default=None, description="The description of the group.")


def project_pick_profile_groups(docs: List[Record], params: FindPickProfileGroupsInput) -> PickProfileGroupList:
    return PickProfileGroupList(pick_profile_groups=[project(doc, PickProfileGroup) for doc in docs])


def build_find_product_by_id(
    server_config: ServerConfig, transport: Optional[httpx.AsyncBaseTransport] = None
) -> ToolDefinition:
    async def run(params: FindProductInput, client: BackendClient) -> Product:
        # productId first, then internalName
        for field in ("productId", "internalName"):
            response = await client.find(QueryRequest(entity_name="Product", filters={field: params.product_ref}))
            if response.first is not None:
                return project(response.first, Product)

        raise NotFound(
            f"Product not found: {params.product_ref}",
            entity_name="Product",
            entity_id=params.product_ref,
        )

    return define_tool(
        server_config,
        name="findProductById",
        title="Find Product",
        description="Find a product by its Product ID or Internal Name.",
        input_model=FindProductInput,
        output_model=Product,
        run=run,
        transport=transport,
    )


def build_find_pick_profile_groups(
    server_config: ServerConfig, transport: Optional[httpx.AsyncBaseTransport] = None
) -> ToolDefinition:
    return build_query_tool(
        server_config,
        name="findPickProfileGroups",
        title="Find Pick Profile Groups",
        description="Find pick profile groups by ID, name or description.",
        entity_name="PickProfileGroup",
        input_model=FindPickProfileGroupsInput,
        output_model=PickProfileGroupList,
        filters=lambda p: {
            "pickProfileGroupId": p.pick_profile_group_id,
            "groupName": p.group_name,
            "description": p.description,
        },
        project=project_pick_profile_groups,
        limit=PICK_PROFILE_VIEW_SIZE,
        many=True,
        transport=transport,
    )


TOOL_BUILDERS = [
    build_find_product_by_id,
    build_find_pick_profile_groups,
]
