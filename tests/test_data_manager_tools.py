"""Unit tests for the DataManager tools."""

import pytest

from erp_tools.models.context import RequestContext
from erp_tools.tools import data_manager


@pytest.fixture
def make_tool(backend, server_config):
    def _make(builder, config=None):
        return builder(config or server_config, transport=backend.transport)
    return _make


class TestGetLogById:
    """Test getLogById."""

    @pytest.mark.asyncio
    async def test_returns_log_with_error_record(self, backend, make_tool):
        backend.add("DataManagerLog", {
            "logId": "40160",
            "configId": "IMP_SAPI_ORDER",
            "statusId": "SERVICE_FAILED",
            "errorRecordContentId": "C1",
            "createdDate": 1700000000000,
        })
        tool = make_tool(data_manager.build_get_log_by_id)

        result = await tool({"logId": "40160"})

        assert result.is_error is None
        assert result.structured_content["errorRecordContentId"] == "C1"
        assert result.structured_content["createdDate"] == 1700000000000
        body = backend.find_bodies("DataManagerLog")[0]
        assert body["inputFields"] == {"logId": "40160"}
        assert body["viewSize"] == 1

    @pytest.mark.asyncio
    async def test_not_found(self, backend, make_tool):
        result = await make_tool(data_manager.build_get_log_by_id)({"logId": "1"})

        assert result.is_error is True
        assert result.message == "Error: No DataManagerLog found with ID: 1"

    @pytest.mark.asyncio
    async def test_http_500_reported(self, backend, make_tool):
        backend.fail("DataManagerLog", 500)

        result = await make_tool(data_manager.build_get_log_by_id)({"logId": "40160"})

        assert result.is_error is True
        assert "500" in result.message
        assert result.structured_content is None

    @pytest.mark.asyncio
    async def test_diagnostics_only_when_enabled(self, backend, make_tool, server_config):
        backend.fail("DataManagerLog", 500)
        context = RequestContext.with_token("secret-token")

        quiet = await make_tool(data_manager.build_get_log_by_id)({"logId": "40160"}, context)
        assert len(quiet.content) == 1

        config = server_config.model_copy(update={"expose_diagnostics": True})
        verbose = await make_tool(data_manager.build_get_log_by_id, config)({"logId": "40160"}, context)
        assert len(verbose.content) == 2
        assert verbose.content[0].text.startswith("DEBUG: URL:")
        assert "secret-token" not in verbose.content[0].text
        assert "500" in verbose.message

    @pytest.mark.asyncio
    async def test_missing_argument_rejected_before_io(self, backend, make_tool):
        result = await make_tool(data_manager.build_get_log_by_id)({})

        assert result.is_error is True
        assert "logId" in result.message
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_idempotent(self, backend, make_tool):
        backend.add("DataManagerLog", {"logId": "40160", "statusId": "SERVICE_FINISHED"})
        tool = make_tool(data_manager.build_get_log_by_id)

        first = await tool({"logId": "40160"})
        second = await tool({"logId": "40160"})

        assert first.structured_content == second.structured_content


class TestFindDataManagerLogs:
    """Test findDataManagerLogs."""

    @pytest.mark.asyncio
    async def test_filters_and_reason(self, backend, make_tool):
        backend.add(
            "DataManagerLog",
            {"logId": "1", "configId": "CFG", "statusId": "SERVICE_FAILED"},
            {"logId": "2", "configId": "OTHER", "statusId": "SERVICE_FINISHED"},
        )

        result = await make_tool(data_manager.build_find_data_manager_logs)({"configId": "CFG"})

        assert result.structured_content == {
            "logs": [{"logId": "1", "configId": "CFG", "statusId": "SERVICE_FAILED", "reason": "SERVICE_FAILED"}]
        }
        body = backend.find_bodies()[0]
        assert body["inputFields"] == {"configId": "CFG"}
        assert body["viewSize"] == 20
        assert body["orderBy"] == "-createdDate"

    @pytest.mark.asyncio
    async def test_rows_without_log_id_skipped(self, backend, make_tool):
        backend.add(
            "DataManagerLog",
            {"configId": "CFG", "statusId": "SERVICE_FAILED"},
            {"logId": "2", "configId": "CFG", "statusId": "SERVICE_FINISHED"},
        )

        result = await make_tool(data_manager.build_find_data_manager_logs)({"configId": "CFG"})

        assert result.is_error is None
        assert [log["logId"] for log in result.structured_content["logs"]] == ["2"]


class TestListRecentErrors:
    """Test listRecentErrors."""

    @pytest.mark.asyncio
    async def test_rows_without_log_id_skipped(self, backend, make_tool):
        backend.add(
            "DataManagerLog",
            {"statusId": "SERVICE_FAILED"},
            {"logId": "", "statusId": "SERVICE_CRASHED"},
            {"logId": "3", "statusId": "DM_LOG_ERROR"},
        )

        result = await make_tool(data_manager.build_list_recent_errors)({"limit": 1})

        assert result.is_error is None
        assert [log["logId"] for log in result.structured_content["logs"]] == ["3"]

    @pytest.mark.asyncio
    async def test_keeps_failures_only(self, backend, make_tool):
        backend.add(
            "DataManagerLog",
            {"logId": "1", "statusId": "SERVICE_FINISHED"},
            {"logId": "2", "statusId": "SERVICE_CRASHED"},
            {"logId": "3", "statusId": "SERVICE_FINISHED", "errorRecordContentId": "C3"},
            {"logId": "4", "statusId": "SERVICE_FINISHED", "errorRecordContentId": "   "},
            {"logId": "5", "statusId": "DM_LOG_ERROR"},
        )

        result = await make_tool(data_manager.build_list_recent_errors)({"limit": 2})

        logs = result.structured_content["logs"]
        assert [log["logId"] for log in logs] == ["2", "3"]
        assert logs[0]["reason"] == "SERVICE_CRASHED"
        # Scans at least 20 rows even for a small limit
        assert backend.find_bodies()[0]["viewSize"] == 20

    @pytest.mark.asyncio
    async def test_large_limit_scans_more(self, backend, make_tool):
        await make_tool(data_manager.build_list_recent_errors)({"limit": 50, "configId": "CFG"})

        body = backend.find_bodies()[0]
        assert body["viewSize"] == 50
        assert body["inputFields"] == {"configId": "CFG"}

    @pytest.mark.asyncio
    async def test_blank_config_id_not_sent(self, backend, make_tool):
        backend.add("DataManagerLog", {"logId": "1", "configId": "CFG", "statusId": "SERVICE_FAILED"})

        result = await make_tool(data_manager.build_list_recent_errors)({"configId": ""})

        assert [log["logId"] for log in result.structured_content["logs"]] == ["1"]
        assert backend.find_bodies()[0]["inputFields"] == {}

    @pytest.mark.asyncio
    async def test_default_limit(self, backend, make_tool):
        backend.add("DataManagerLog", *[{"logId": str(i), "statusId": "SERVICE_FAILED"} for i in range(15)])

        result = await make_tool(data_manager.build_list_recent_errors)({})

        assert len(result.structured_content["logs"]) == 10


class TestConfigs:
    """Test getLogConfig and getImportSapiOrderConfig."""

    @pytest.mark.asyncio
    async def test_get_log_config(self, backend, make_tool):
        backend.add("DataManagerConfig", {"configId": "CFG", "importServiceName": "importOrders", "priority": "5"})

        result = await make_tool(data_manager.build_get_log_config)({"configId": "CFG"})

        assert result.structured_content == {"configId": "CFG", "importServiceName": "importOrders", "priority": 5}

    @pytest.mark.asyncio
    async def test_get_log_config_not_found(self, backend, make_tool):
        result = await make_tool(data_manager.build_get_log_config)({"configId": "NOPE"})
        assert result.message == "Error: Config NOPE not found."

    @pytest.mark.asyncio
    async def test_import_config_with_runtime_data(self, backend, make_tool):
        backend.add("DataManagerConfig", {
            "configId": "IMP_SAPI_ORDER",
            "description": "SAPI orders",
            "runtimeDataId": "RT1",
            "runtimeInfo": "stale",
        })
        backend.add("RuntimeData", {"runtimeDataId": "RT1", "runtimeInfo": "<xml/>"})

        result = await make_tool(data_manager.build_get_import_sapi_order_config)({})

        assert result.structured_content == {
            "configId": "IMP_SAPI_ORDER",
            "description": "SAPI orders",
            "runtimeDataId": "RT1",
            "runtimeInfo": "<xml/>",
        }

    @pytest.mark.asyncio
    async def test_import_config_without_runtime_data(self, backend, make_tool):
        backend.add("DataManagerConfig", {"configId": "CUSTOM"})

        result = await make_tool(data_manager.build_get_import_sapi_order_config)({"configId": "CUSTOM"})

        assert result.structured_content == {"configId": "CUSTOM"}
        assert backend.find_bodies("RuntimeData") == []

    @pytest.mark.asyncio
    async def test_import_config_not_found(self, backend, make_tool):
        result = await make_tool(data_manager.build_get_import_sapi_order_config)({})
        assert result.message == "Error: Config not found: IMP_SAPI_ORDER"


class TestRetryFailedRecord:
    """Test retryFailedRecord."""

    @pytest.mark.asyncio
    async def test_returns_instructions(self, backend, make_tool):
        backend.add("DataManagerLog", {"logId": "40160", "configId": "CFG", "statusId": "SERVICE_FAILED"})

        result = await make_tool(data_manager.build_retry_failed_record)({"logId": "  40160 "})

        assert result.structured_content["canRetry"] is False
        message = result.structured_content["message"]
        assert message.startswith("Retry Context for Log 40160:")
        assert "- Config ID: CFG" in message
        assert "- Original Job ID: -" in message
        assert result.content[0].text == message

    @pytest.mark.asyncio
    async def test_unknown_log(self, backend, make_tool):
        result = await make_tool(data_manager.build_retry_failed_record)({"logId": "X"})
        assert result.message == "Error: Log X not found."


class TestUploadFileToConfig:
    """Test uploadFileToConfig."""

    @pytest.mark.asyncio
    async def test_success(self, backend, make_tool):
        result = await make_tool(data_manager.build_upload_file_to_config)(
            {"configId": "IMP_SAPI_ORDER", "file": "a,b\n", "fileName": "orders.csv"}
        )

        assert result.structured_content == {
            "configId": "IMP_SAPI_ORDER",
            "uploadFileContentId": "UP1",
            "status": "success",
        }
        assert result.content[0].text == (
            "File uploaded successfully.\nConfig ID: IMP_SAPI_ORDER\nContent ID: UP1"
        )

    @pytest.mark.asyncio
    async def test_missing_content_id_shown_as_na(self, backend, make_tool):
        backend.upload_response = {"responseMessage": "success"}

        result = await make_tool(data_manager.build_upload_file_to_config)(
            {"configId": "IMP_SAPI_ORDER", "file": "x", "fileName": "x.csv"}
        )

        assert result.content[0].text.endswith("Content ID: N/A")

    @pytest.mark.asyncio
    async def test_service_failure(self, backend, make_tool):
        backend.upload_response = {"responseMessage": "error", "errorMessage": "Bad file"}

        result = await make_tool(data_manager.build_upload_file_to_config)(
            {"configId": "IMP_SAPI_ORDER", "file": "x", "fileName": "x.csv"}
        )

        assert result.is_error is True
        assert result.message == "Error: Service returned error: Bad file"

    @pytest.mark.asyncio
    async def test_http_failure(self, backend, make_tool):
        backend.upload_status = 503

        result = await make_tool(data_manager.build_upload_file_to_config)(
            {"configId": "IMP_SAPI_ORDER", "file": "x", "fileName": "x.csv"}
        )

        assert result.is_error is True
        assert "503" in result.message
