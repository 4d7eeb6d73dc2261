"""Pytest configuration and fixtures."""

import json
import os
from typing import Any, Callable, Dict, List, Optional, Union

import httpx
import pytest
from dotenv import load_dotenv

# Load test environment variables
load_dotenv()

# Set test environment
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "true")

from erp_tools.infra.config import ServerConfig  # noqa: E402

BACKEND_BASE = "https://erp.test/rest/s1"

Docs = Union[List[Dict[str, Any]], Callable[[Dict[str, Any]], List[Dict[str, Any]]]]


class FakeBackend:
    """In-memory stand-in for the ERP backend, served through httpx.MockTransport.

    performFind returns the registered docs of the requested entity whose
    fields equal every inputField, truncated to viewSize.
    """

    def __init__(self):
        self.entities: Dict[str, Docs] = {}
        self.failures: Dict[str, int] = {}
        self.download_status = 404
        self.download_body = ""
        self.upload_status = 200
        self.upload_response: Dict[str, Any] = {"uploadFileContentId": "UP1"}
        self.requests: List[httpx.Request] = []

    def add(self, entity_name: str, *docs: Dict[str, Any]) -> "FakeBackend":
        self.entities.setdefault(entity_name, []).extend(docs)
        return self

    def fail(self, entity_name: str, status_code: int) -> "FakeBackend":
        self.failures[entity_name] = status_code
        return self

    def serve_download(self, body: str, status_code: int = 200) -> "FakeBackend":
        self.download_body = body
        self.download_status = status_code
        return self

    def find_bodies(self, entity_name: Optional[str] = None) -> List[Dict[str, Any]]:
        bodies = [
            json.loads(request.content)
            for request in self.requests
            if request.url.path.endswith("/api/performFind")
        ]
        if entity_name is None:
            return bodies
        return [body for body in bodies if body["entityName"] == entity_name]

    def requests_to(self, path_suffix: str) -> List[httpx.Request]:
        return [request for request in self.requests if request.url.path.endswith(path_suffix)]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path.endswith("/api/performFind"):
            body = json.loads(request.content)
            entity_name = body["entityName"]
            if entity_name in self.failures:
                return httpx.Response(self.failures[entity_name], text="Internal Server Error")
            source = self.entities.get(entity_name, [])
            docs = source(body["inputFields"]) if callable(source) else [
                doc for doc in source
                if all(doc.get(key) == value for key, value in body["inputFields"].items())
            ]
            return httpx.Response(200, json={"docs": docs[: body["viewSize"]]})

        if path.endswith("/api/DownloadCsvFile") or path.endswith("/ViewBinaryDataResource"):
            return httpx.Response(self.download_status, text=self.download_body)

        if path.endswith("/api/service/uploadAndImportFile"):
            return httpx.Response(self.upload_status, json=self.upload_response)

        return httpx.Response(404, text="Not Found")

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def backend():
    """Fresh fake backend per test."""
    return FakeBackend()


@pytest.fixture
def server_config(tmp_path):
    """Configuration pointing at the fake backend, with no static token."""
    return ServerConfig(
        backend_api_base=BACKEND_BASE,
        backend_access_token=None,
        runtime_search_root=tmp_path,
    )
