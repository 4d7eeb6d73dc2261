"""Order tools: headers, items and linked work-effort tasks."""

import json
from datetime import datetime, timezone
from typing import Any, List, Optional

import httpx
from pydantic import Field, model_validator

from erp_tools.adapters.backend_client import BackendClient
from erp_tools.infra.config import ServerConfig
from erp_tools.models.backend import QueryRequest, Record
from erp_tools.models.records import OrderHeader, OrderItem, OrderItemList, OrderTask, OrderTaskList
from erp_tools.models.tool import ToolDefinition
from erp_tools.services.projector import project
from erp_tools.services.query_tool import build_query_tool
from erp_tools.services.tool_contract import ToolInput, define_tool

ORDER_LINES_VIEW_SIZE = 100
DEFAULT_TASK_TYPE = "RESOLVE_ONHOLD_ORDER"


class FindOrderHeaderInput(ToolInput):
    order_id: Optional[str] = Field(default=None, description="The Order ID.")
    external_id: Optional[str] = Field(default=None, description="The External Order ID.")

    @model_validator(mode="after")
    def require_identifier(self) -> "FindOrderHeaderInput":
        if not self.order_id and not self.external_id:
            raise ValueError("Please provide either orderId or externalId")
        return self


class OrderIdInput(ToolInput):
    order_id: str = Field(..., min_length=1, description="The Order ID.")


class FindOrderTasksInput(ToolInput):
    order_id: str = Field(..., min_length=1, description="The Order ID.")
    work_effort_type_id: str = Field(
        default=DEFAULT_TASK_TYPE,
        min_length=1,
        description="The type of work effort (task) to find.",
    )


def to_iso_timestamp(value: Any) -> Optional[str]:
    """Epoch milliseconds become ISO-8601 UTC; strings pass through."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, (int, float)):
        moment = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return str(value)


def project_order_items(docs: List[Record], params: OrderIdInput) -> OrderItemList:
    return OrderItemList(items=[project(doc, OrderItem) for doc in docs])


def build_find_order_header(
    server_config: ServerConfig, transport: Optional[httpx.AsyncBaseTransport] = None
) -> ToolDefinition:
    return build_query_tool(
        server_config,
        name="findOrderHeader",
        title="Find Order Header",
        description="Find an order header by Order ID or External ID.",
        entity_name="OrderHeader",
        input_model=FindOrderHeaderInput,
        output_model=OrderHeader,
        filters=lambda p: {"orderId": p.order_id, "externalId": p.external_id},
        project=lambda doc, p: project(doc, OrderHeader),
        not_found=lambda p: "Order not found.",
        summarize=lambda output, structured: json.dumps(structured, indent=2),
        transport=transport,
    )


def build_find_order_items(
    server_config: ServerConfig, transport: Optional[httpx.AsyncBaseTransport] = None
) -> ToolDefinition:
    return build_query_tool(
        server_config,
        name="findOrderItems",
        title="Find Order Items",
        description="Find all items for a specific order.",
        entity_name="OrderItem",
        input_model=OrderIdInput,
        output_model=OrderItemList,
        filters=lambda p: {"orderId": p.order_id},
        project=project_order_items,
        limit=ORDER_LINES_VIEW_SIZE,
        order_by="orderItemSeqId",
        many=True,
        transport=transport,
    )


def build_find_order_tasks(
    server_config: ServerConfig, transport: Optional[httpx.AsyncBaseTransport] = None
) -> ToolDefinition:
    async def run(params: FindOrderTasksInput, client: BackendClient) -> OrderTaskList:
        links = await client.find(
            QueryRequest(
                entity_name="OrderHeaderWorkEffort",
                filters={"orderId": params.order_id},
                limit=ORDER_LINES_VIEW_SIZE,
            )
        )

        tasks = []
        # One WorkEffort lookup per link, in link order
        for link in links.docs:
            work_effort_id = link.get("workEffortId")
            if not work_effort_id:
                continue
            response = await client.find(
                QueryRequest(entity_name="WorkEffort", filters={"workEffortId": work_effort_id})
            )
            work_effort = response.first
            if work_effort is None or work_effort.get("workEffortTypeId") != params.work_effort_type_id:
                continue
            tasks.append(
                project(
                    {**work_effort, "createdDate": to_iso_timestamp(work_effort.get("createdDate"))},
                    OrderTask,
                    work_effort_id=work_effort_id,
                )
            )

        return OrderTaskList(tasks=tasks)

    return define_tool(
        server_config,
        name="findOrderTasks",
        title="Find Order Tasks",
        description="Find tasks (WorkEfforts) associated with an order, filtered by type.",
        input_model=FindOrderTasksInput,
        output_model=OrderTaskList,
        run=run,
        transport=transport,
    )


TOOL_BUILDERS = [
    build_find_order_header,
    build_find_order_items,
    build_find_order_tasks,
]
