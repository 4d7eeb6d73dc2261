"""DataManager tools: import/export logs, configs, retries and uploads."""

import logging
from typing import Annotated, Any, List, Mapping, Optional

import httpx
from pydantic import Field, StringConstraints

from erp_tools.adapters.backend_client import BackendClient
from erp_tools.infra.config import ServerConfig
from erp_tools.infra.error_handler import NotFound
from erp_tools.models.backend import QueryRequest, Record
from erp_tools.models.records import (
    DataManagerConfig,
    DataManagerLog,
    DataManagerLogList,
    DataManagerLogSummary,
    FailedLog,
    FailedLogList,
    ImportConfigSummary,
    RetryInstructions,
    UploadResult,
)
from erp_tools.models.tool import ToolDefinition
from erp_tools.services.projector import is_absent, project
from erp_tools.services.query_tool import build_query_tool
from erp_tools.services.tool_contract import ToolInput, define_tool

logger = logging.getLogger(__name__)

# Log statuses that count as failures for listRecentErrors
FAILED_LOG_STATUSES = frozenset({"SERVICE_FAILED", "SERVICE_CRASHED", "DM_LOG_ERROR"})

# The backend has no status filter we can rely on, so recent logs are scanned
# in memory; never scan fewer than this many rows.
MIN_ERROR_SCAN_SIZE = 20

DEFAULT_IMPORT_CONFIG_ID = "IMP_SAPI_ORDER"

StrippedId = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


# ============================================================================
# Inputs
# ============================================================================

class LogIdInput(ToolInput):
    log_id: str = Field(..., min_length=1, description="The unique identifier of the DataManagerLog to retrieve.")


class FindLogsInput(ToolInput):
    log_id: Optional[str] = Field(default=None, description="The ID of the log to search for.")
    config_id: Optional[str] = Field(default=None, description="The configuration ID.")
    status_id: Optional[str] = Field(default=None, description="The status of the log.")
    job_id: Optional[str] = Field(default=None, description="The job ID.")


class RecentErrorsInput(ToolInput):
    limit: int = Field(default=10, ge=1, le=500, description="Max number of logs to return.")
    config_id: Optional[str] = Field(default=None, description="Filter by a specific configuration ID.")


class ConfigIdInput(ToolInput):
    config_id: str = Field(..., min_length=1, description="The ID of the configuration.")


class ImportConfigInput(ToolInput):
    config_id: str = Field(
        default=DEFAULT_IMPORT_CONFIG_ID,
        min_length=1,
        description="The ID of the configuration. Defaults to IMP_SAPI_ORDER.",
    )


class RetryInput(ToolInput):
    log_id: StrippedId = Field(..., description="The ID of the failed log to retry.")


class UploadInput(ToolInput):
    config_id: str = Field(..., min_length=1, description="The DataManager Config ID (e.g., IMP_SAPI_ORDER).")
    file: str = Field(..., min_length=1, description="The content of the file to upload (text or base64 encoded string).")
    file_name: str = Field(
        ..., min_length=1, description="The name of the file (e.g., order.json, data.csv) used for type detection."
    )


# ============================================================================
# Projections
# ============================================================================

def is_failed_log(log: Mapping[str, Any]) -> bool:
    """Failed status, or an error record attached to the log."""
    if log.get("statusId") in FAILED_LOG_STATUSES:
        return True
    error_record = log.get("errorRecordContentId")
    return isinstance(error_record, str) and error_record.strip() != ""


def with_log_id(docs: List[Record]) -> List[Record]:
    """Drop rows without a logId; they cannot be projected into a log entry."""
    kept = [doc for doc in docs if not is_absent(doc.get("logId"))]
    if len(kept) != len(docs):
        logger.warning(
            "Skipping DataManagerLog rows without logId",
            extra={"skipped": len(docs) - len(kept)},
        )
    return kept


def project_failed_logs(docs: List[Record], params: RecentErrorsInput) -> FailedLogList:
    failed = [doc for doc in with_log_id(docs) if is_failed_log(doc)][: params.limit]
    return FailedLogList(logs=[project(doc, FailedLog, reason=doc.get("statusId")) for doc in failed])


def project_log_summaries(docs: List[Record], params: FindLogsInput) -> DataManagerLogList:
    return DataManagerLogList(
        logs=[project(doc, DataManagerLogSummary, reason=doc.get("statusId")) for doc in with_log_id(docs)]
    )


def _shown(value: Any) -> str:
    return "-" if value is None or value == "" else str(value)


def retry_instructions(log: Record, params: RetryInput) -> RetryInstructions:
    config_id = _shown(log.get("configId"))
    message = "\n".join([
        f"Retry Context for Log {params.log_id}:",
        f"- Config ID: {config_id}",
        f"- Status: {_shown(log.get('statusId'))}",
        f"- Original Job ID: {_shown(log.get('jobId'))}",
        f"- Runtime Data ID: {_shown(log.get('runtimeDataId'))}",
        "",
        "Automatic retry is not implemented.",
        "To manually retry:",
        f"1. Identify the file from 'getLogConfig' using Config ID {config_id}.",
        "2. Re-trigger the import/export service associated with that config.",
    ])
    return RetryInstructions(message=message, can_retry=False)


# ============================================================================
# Tools
# ============================================================================

def build_get_log_by_id(
    server_config: ServerConfig, transport: Optional[httpx.AsyncBaseTransport] = None
) -> ToolDefinition:
    return build_query_tool(
        server_config,
        name="getLogById",
        title="Get DataManager Log Details",
        description="Fetch details of a specific DataManagerLog by its ID.",
        entity_name="DataManagerLog",
        input_model=LogIdInput,
        output_model=DataManagerLog,
        filters=lambda p: {"logId": p.log_id},
        project=lambda doc, p: project(doc, DataManagerLog, log_id=p.log_id),
        not_found=lambda p: f"No DataManagerLog found with ID: {p.log_id}",
        transport=transport,
    )


def build_find_data_manager_logs(
    server_config: ServerConfig, transport: Optional[httpx.AsyncBaseTransport] = None
) -> ToolDefinition:
    return build_query_tool(
        server_config,
        name="findDataManagerLogs",
        title="Find DataManager Logs",
        description="Find DataManager Logs based on search criteria.",
        entity_name="DataManagerLog",
        input_model=FindLogsInput,
        output_model=DataManagerLogList,
        filters=lambda p: {
            "logId": p.log_id,
            "configId": p.config_id,
            "statusId": p.status_id,
            "jobId": p.job_id,
        },
        project=project_log_summaries,
        limit=20,
        order_by="-createdDate",
        many=True,
        transport=transport,
    )


def build_list_recent_errors(
    server_config: ServerConfig, transport: Optional[httpx.AsyncBaseTransport] = None
) -> ToolDefinition:
    return build_query_tool(
        server_config,
        name="listRecentErrors",
        title="List Recent DataManager Errors",
        description="Find recent DataManagerLogs that ended in failure or error.",
        entity_name="DataManagerLog",
        input_model=RecentErrorsInput,
        output_model=FailedLogList,
        filters=lambda p: {"configId": p.config_id},
        project=project_failed_logs,
        limit=lambda p: max(p.limit, MIN_ERROR_SCAN_SIZE),
        order_by="-createdDate",
        many=True,
        transport=transport,
    )


def build_get_log_config(
    server_config: ServerConfig, transport: Optional[httpx.AsyncBaseTransport] = None
) -> ToolDefinition:
    return build_query_tool(
        server_config,
        name="getLogConfig",
        title="Get DataManager Configuration",
        description="Fetch details of a DataManagerConfig.",
        entity_name="DataManagerConfig",
        input_model=ConfigIdInput,
        output_model=DataManagerConfig,
        filters=lambda p: {"configId": p.config_id},
        project=lambda doc, p: project(doc, DataManagerConfig, config_id=p.config_id),
        not_found=lambda p: f"Config {p.config_id} not found.",
        transport=transport,
    )


def build_get_import_sapi_order_config(
    server_config: ServerConfig, transport: Optional[httpx.AsyncBaseTransport] = None
) -> ToolDefinition:
    async def run(params: ImportConfigInput, client: BackendClient) -> ImportConfigSummary:
        # 1. DataManagerConfig
        response = await client.find(
            QueryRequest(entity_name="DataManagerConfig", filters={"configId": params.config_id})
        )
        config = response.first
        if config is None:
            raise NotFound(
                f"Config not found: {params.config_id}",
                entity_name="DataManagerConfig",
                entity_id=params.config_id,
            )

        # 2. RuntimeData, when the config points at one
        runtime_info = None
        runtime_data_id = config.get("runtimeDataId")
        if runtime_data_id:
            runtime = await client.find(
                QueryRequest(entity_name="RuntimeData", filters={"runtimeDataId": runtime_data_id})
            )
            if runtime.first is not None:
                runtime_info = runtime.first.get("runtimeInfo") or None

        summary = project(config, ImportConfigSummary, config_id=params.config_id)
        return summary.model_copy(update={"runtime_info": runtime_info})

    return define_tool(
        server_config,
        name="getImportSapiOrderConfig",
        title="Get Import SAPI Order Config",
        description="Fetch details of the DataManagerConfig for the SAPI order import job.",
        input_model=ImportConfigInput,
        output_model=ImportConfigSummary,
        run=run,
        transport=transport,
    )


def build_retry_failed_record(
    server_config: ServerConfig, transport: Optional[httpx.AsyncBaseTransport] = None
) -> ToolDefinition:
    return build_query_tool(
        server_config,
        name="retryFailedRecord",
        title="Retry Failed DataManager Log",
        description="Attempt to retry a failed DataManager job or provide instructions.",
        entity_name="DataManagerLog",
        input_model=RetryInput,
        output_model=RetryInstructions,
        filters=lambda p: {"logId": p.log_id},
        project=retry_instructions,
        not_found=lambda p: f"Log {p.log_id} not found.",
        summarize=lambda output, structured: output.message,
        transport=transport,
    )


def build_upload_file_to_config(
    server_config: ServerConfig, transport: Optional[httpx.AsyncBaseTransport] = None
) -> ToolDefinition:
    async def run(params: UploadInput, client: BackendClient) -> UploadResult:
        # The file string is sent as-is; base64 input is not decoded
        result = await client.upload_file(params.config_id, params.file_name, params.file)
        return UploadResult(
            config_id=params.config_id,
            upload_file_content_id=result.get("uploadFileContentId") or None,
            status="success",
        )

    def summarize(output: UploadResult, structured: dict) -> str:
        return (
            "File uploaded successfully.\n"
            f"Config ID: {output.config_id}\n"
            f"Content ID: {output.upload_file_content_id or 'N/A'}"
        )

    return define_tool(
        server_config,
        name="uploadFileToConfig",
        title="Upload File to DataManager Config",
        description="Uploads a file content (e.g., CSV, JSON) to a specific DataManager Config in the ERP.",
        input_model=UploadInput,
        output_model=UploadResult,
        run=run,
        summarize=summarize,
        transport=transport,
    )


TOOL_BUILDERS = [
    build_get_log_by_id,
    build_find_data_manager_logs,
    build_list_recent_errors,
    build_get_log_config,
    build_get_import_sapi_order_config,
    build_retry_failed_record,
    build_upload_file_to_config,
]
