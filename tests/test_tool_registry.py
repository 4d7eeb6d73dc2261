"""Unit tests for the tool registry, execution engine and tool contract."""

from unittest.mock import AsyncMock

import pytest
from pydantic import BaseModel

from erp_tools.models.context import RequestContext
from erp_tools.models.tool import ToolDefinition, ToolMetadata, ToolResult
from erp_tools.services.tool_contract import ToolInput, define_tool
from erp_tools.services.tool_execution_engine import execute_tool_call
from erp_tools.services.tool_registry import build_tools, list_tool_metadata

EXPECTED_TOOLS = {
    "getLogById",
    "findDataManagerLogs",
    "listRecentErrors",
    "getLogConfig",
    "getImportSapiOrderConfig",
    "retryFailedRecord",
    "uploadFileToConfig",
    "getContent",
    "findOrderHeader",
    "findOrderItems",
    "findOrderTasks",
    "findProductById",
    "findPickProfileGroups",
}


class TestRegistry:
    """Test tool registration and metadata."""

    def test_all_tools_registered(self, server_config):
        assert set(build_tools(server_config)) == EXPECTED_TOOLS

    def test_metadata_shape(self, server_config):
        metadata = {entry["name"]: entry for entry in list_tool_metadata(build_tools(server_config))}

        log_tool = metadata["getLogById"]
        assert log_tool["title"] == "Get DataManager Log Details"
        assert "logId" in log_tool["inputSchema"]["properties"]
        assert log_tool["inputSchema"]["required"] == ["logId"]
        assert "errorRecordContentId" in log_tool["outputSchema"]["properties"]

        assert "id" in metadata["findProductById"]["inputSchema"]["properties"]


class TestExecutionEngine:
    """Test dispatch by name."""

    @pytest.mark.asyncio
    async def test_unknown_tool(self, server_config):
        result = await execute_tool_call(build_tools(server_config), "dropTables", {})

        assert result.is_error is True
        assert result.message == "Error: Unknown tool: dropTables"

    @pytest.mark.asyncio
    async def test_dispatches_with_context(self, backend, server_config):
        backend.add("OrderItem", {"orderId": "1001", "orderItemSeqId": "00001"})
        tools = build_tools(server_config, transport=backend.transport)

        result = await execute_tool_call(
            tools, "findOrderItems", {"orderId": "1001"}, RequestContext.with_token("T1", request_id="r1")
        )

        assert result.structured_content["items"][0]["orderItemSeqId"] == "00001"
        assert backend.requests[0].headers["Authorization"] == "Bearer T1"

    @pytest.mark.asyncio
    async def test_passes_arguments_and_context_to_handler(self):
        handler = AsyncMock(return_value=ToolResult.success({"ok": True}, "ok"))
        tool = ToolDefinition(
            name="probe",
            metadata=ToolMetadata(title="Probe", description="Probe", input_schema={}, output_schema={}),
            handler=handler,
        )
        context = RequestContext.with_token("T1")

        result = await execute_tool_call({"probe": tool}, "probe", None, context)

        handler.assert_awaited_once_with({}, context)
        assert result.structured_content == {"ok": True}


class EchoInput(ToolInput):
    value: str


class EchoOutput(BaseModel):
    value: str


class TestToolContract:
    """Test the uniform success/error envelope."""

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_error_result(self, server_config):
        async def run(params, client):
            raise RuntimeError("boom")

        tool = define_tool(
            server_config,
            name="explode",
            title="Explode",
            description="Always fails",
            input_model=EchoInput,
            output_model=EchoOutput,
            run=run,
        )

        result = await tool({"value": "x"})

        assert result.to_payload() == {"content": [{"type": "text", "text": "Error: boom"}], "isError": True}

    @pytest.mark.asyncio
    async def test_success_has_no_error_flag(self, server_config):
        async def run(params, client):
            return EchoOutput(value=params.value)

        tool = define_tool(
            server_config,
            name="echo",
            title="Echo",
            description="Echoes its input",
            input_model=EchoInput,
            output_model=EchoOutput,
            run=run,
        )

        payload = (await tool({"value": "hi"})).to_payload()

        assert payload == {
            "content": [{"type": "text", "text": '{"value": "hi"}'}],
            "structuredContent": {"value": "hi"},
        }
