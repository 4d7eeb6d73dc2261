"""HTTP client for the ERP backend's generic find/service API."""

import json
import logging
import time
from typing import Any, Dict, Mapping, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from erp_tools.infra.auth import build_headers, redact_headers
from erp_tools.infra.config import ServerConfig
from erp_tools.infra.error_handler import (
    BackendHttpError,
    BackendServiceError,
    BackendUnavailable,
)
from erp_tools.models.backend import QueryRequest, QueryResponse


PERFORM_FIND_PATH = "/api/performFind"
UPLOAD_AND_IMPORT_PATH = "/api/service/uploadAndImportFile"
DOWNLOAD_CSV_PATH = "/api/DownloadCsvFile"
VIEW_BINARY_PATH = "/content/control/ViewBinaryDataResource"

SERVICE_FAILURE_MESSAGES = ("error", "fail")


def check_service_response(body: Mapping[str, Any]) -> Mapping[str, Any]:
    """
    Raise BackendServiceError when a 2xx body carries a service failure.

    The backend reports service errors as `responseMessage: "error"|"fail"`
    with the detail in `errorMessage` or `errorMessageList`.
    """
    if body.get("responseMessage") in SERVICE_FAILURE_MESSAGES:
        detail = body.get("errorMessage") or body.get("errorMessageList") or "unknown error"
        if isinstance(detail, list):
            detail = "; ".join(str(item) for item in detail)
        raise BackendServiceError(f"Service returned error: {detail}")
    return body


class BackendClient:
    """Client for one tool invocation against the ERP backend.

    Holds the credential resolved for the invocation. Each call opens a
    short-lived httpx.AsyncClient with the configured timeout and TLS policy.
    Only transport and HTTP status are interpreted here; callers decide what
    an empty result or an embedded service failure means.
    """

    def __init__(
        self,
        server_config: ServerConfig,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.server_config = server_config
        self.token = token
        self.transport = transport
        self.logger = logger or logging.getLogger(__name__)

    @property
    def base_url(self) -> str:
        return self.server_config.backend_api_base

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.server_config.backend_timeout,
            verify=self.server_config.backend_verify_tls,
            transport=self.transport,
        )

    def _diagnostics(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        diagnostics: Dict[str, Any] = {
            "method": method,
            "url": url,
            "headers": redact_headers(headers),
        }
        if body is not None:
            diagnostics["body"] = body
        if params is not None:
            diagnostics["params"] = params
        return diagnostics

    async def _send(
        self,
        method: str,
        path: str,
        headers: Mapping[str, str],
        diagnostics: Dict[str, Any],
        **kwargs: Any,
    ) -> httpx.Response:
        url = f"{self.base_url}{path}"
        start_time = time.time()
        try:
            async with self._client() as client:
                response = await client.request(method, url, headers=dict(headers), **kwargs)
        except httpx.TransportError as e:
            raise BackendUnavailable(
                f"Backend unreachable at {url}: {type(e).__name__}: {e}",
                diagnostics=diagnostics,
            ) from e

        latency_ms = int((time.time() - start_time) * 1000)
        self.logger.debug(
            "Backend response",
            extra={
                "method": method,
                "url": url,
                "status_code": response.status_code,
                "latency_ms": latency_ms,
            },
        )
        return response

    async def find(self, query: QueryRequest) -> QueryResponse:
        """
        Run a performFind query.

        Args:
            query: Entity name, filters, limit and optional sort key

        Returns:
            QueryResponse (docs may be empty)

        Raises:
            BackendUnavailable: Transport failure
            BackendHttpError: Non-2xx status
            BackendServiceError: Body is not a JSON object with a docs list
        """
        body = query.to_body()
        headers = build_headers(
            self.token,
            self.server_config.backend_user_agent,
            content_type="application/json",
        )
        url = f"{self.base_url}{PERFORM_FIND_PATH}"
        diagnostics = self._diagnostics("POST", url, headers, body=body)

        self.logger.info(
            "Executing performFind",
            extra={"entity_name": query.entity_name, "url": url, "payload": body},
        )
        response = await self._send("POST", PERFORM_FIND_PATH, headers, diagnostics, json=body)

        if not response.is_success:
            raise BackendHttpError(
                f"Failed to fetch {query.entity_name}: HTTP error! status: {response.status_code}",
                status_code=response.status_code,
                diagnostics=diagnostics,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise BackendServiceError(
                f"Backend returned a non-JSON response for {query.entity_name}",
                diagnostics=diagnostics,
            ) from e

        if not isinstance(payload, dict):
            raise BackendServiceError(
                f"Unexpected response shape for {query.entity_name}",
                diagnostics=diagnostics,
            )

        try:
            return QueryResponse(docs=payload.get("docs") or [])
        except PydanticValidationError as e:
            raise BackendServiceError(
                f"Malformed docs in {query.entity_name} response",
                diagnostics=diagnostics,
            ) from e

    async def download_content(
        self,
        content_id: Optional[str] = None,
        data_resource_id: Optional[str] = None,
    ) -> str:
        """
        Download a raw content body as text.

        Uses DownloadCsvFile (by contentId) in "csv" mode and the legacy
        ViewBinaryDataResource (by dataResourceId) in "binary" mode.

        Raises:
            BackendUnavailable: Transport failure
            BackendHttpError: Non-2xx status (body preview in the message)
            ValueError: Identifier required by the configured mode is missing
        """
        if self.server_config.content_download_mode == "binary":
            if not data_resource_id:
                raise ValueError("dataResourceId is required for binary downloads")
            path = VIEW_BINARY_PATH
            params = {"dataResourceId": data_resource_id}
        else:
            if not content_id:
                raise ValueError("contentId is required for CSV downloads")
            path = DOWNLOAD_CSV_PATH
            params = {"contentId": content_id}

        headers = build_headers(
            self.token,
            self.server_config.backend_user_agent,
            accept="*/*",
        )
        url = f"{self.base_url}{path}"
        diagnostics = self._diagnostics("GET", url, headers, params=params)

        self.logger.info("Attempting remote content fetch", extra={"url": url, "params": params})
        response = await self._send("GET", path, headers, diagnostics, params=params)

        if not response.is_success:
            # A redirect to the login page shows up here; keep a preview for debugging
            preview = response.text[:200]
            raise BackendHttpError(
                f"Remote fetch failed: {response.status_code} {response.reason_phrase}. "
                f"Response preview: {preview}",
                status_code=response.status_code,
                diagnostics=diagnostics,
            )
        return response.text

    async def upload_file(self, config_id: str, file_name: str, content: str) -> Dict[str, Any]:
        """
        Upload file content to a DataManager config via uploadAndImportFile.

        Returns:
            Decoded JSON body (embedded service failures already raised)

        Raises:
            BackendUnavailable, BackendHttpError, BackendServiceError
        """
        # Content-Type is left to httpx so the multipart boundary is set
        headers = build_headers(self.token, self.server_config.backend_user_agent)
        url = f"{self.base_url}{UPLOAD_AND_IMPORT_PATH}"
        form = {"configId": config_id, "_uploadedFile_fileName": file_name}
        diagnostics = self._diagnostics(
            "POST",
            url,
            headers,
            body={**form, "uploadedFile": f"<{len(content)} chars>"},
        )

        self.logger.info(
            "Uploading file to config",
            extra={"config_id": config_id, "file_name": file_name, "url": url},
        )
        response = await self._send(
            "POST",
            UPLOAD_AND_IMPORT_PATH,
            headers,
            diagnostics,
            data=form,
            files={"uploadedFile": (file_name, content.encode("utf-8"), "application/octet-stream")},
        )

        if not response.is_success:
            raise BackendHttpError(
                f"Service call failed: {response.status_code} {response.reason_phrase} - {response.text}",
                status_code=response.status_code,
                diagnostics=diagnostics,
            )

        try:
            result = response.json()
        except ValueError as e:
            raise BackendServiceError(
                "Upload service returned a non-JSON response",
                diagnostics=diagnostics,
            ) from e
        if not isinstance(result, dict):
            raise BackendServiceError("Unexpected upload response shape", diagnostics=diagnostics)

        check_service_response(result)
        return result


def dumps_diagnostics(diagnostics: Dict[str, Any]) -> str:
    """Render diagnostics as the DEBUG text block used in error envelopes."""
    lines = [f"DEBUG: URL: {diagnostics.get('url')}"]
    lines.append(f"HEADERS: {json.dumps(diagnostics.get('headers', {}), indent=2)}")
    if "body" in diagnostics:
        lines.append(f"BODY: {json.dumps(diagnostics['body'])}")
    if "params" in diagnostics:
        lines.append(f"PARAMS: {json.dumps(diagnostics['params'])}")
    return "\n".join(lines)
