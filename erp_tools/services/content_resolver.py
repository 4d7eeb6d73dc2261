"""Resolve a Content id to its text.

Content -> DataResource -> typed text fetch, with a raw download fallback and
optional best-effort persistence under a local "runtime" directory.
"""

import logging
from pathlib import Path
from typing import Dict, Optional

from erp_tools.adapters.backend_client import BackendClient
from erp_tools.infra.config import ServerConfig
from erp_tools.infra.error_handler import (
    BackendError,
    MissingLink,
    NoRetrievableContent,
    NotFound,
)
from erp_tools.models.backend import QueryRequest, Record
from erp_tools.models.records import ResolvedContent
from erp_tools.services.projector import is_absent

INLINE_TEXT_TYPES = frozenset({"ELECTRONIC_TEXT", "SHORT_TEXT"})
FILE_BACKED_TYPES = frozenset({"OFBIZ_FILE", "LOCAL_FILE"})

DEFAULT_CATEGORY = "uploaded"

MIME_EXTENSIONS: Dict[str, str] = {
    "text/csv": ".csv",
    "application/csv": ".csv",
    "application/json": ".json",
    "text/xml": ".xml",
    "application/xml": ".xml",
    "application/pdf": ".pdf",
}


def extension_for(mime_type: Optional[str]) -> str:
    return MIME_EXTENSIONS.get(mime_type or "", ".txt")


def find_runtime_dir(start: Path, dir_name: str = "runtime") -> Optional[Path]:
    """Walk from start up to the filesystem root looking for a dir_name directory."""
    start = start.resolve()
    for directory in (start, *start.parents):
        candidate = directory / dir_name
        if candidate.is_dir():
            return candidate
    return None


def _is_safe_component(value: str) -> bool:
    return bool(value) and value not in (".", "..") and "/" not in value and "\\" not in value


class ContentResolver:
    """Content resolution chain for one invocation."""

    def __init__(
        self,
        client: BackendClient,
        server_config: ServerConfig,
        logger: Optional[logging.Logger] = None,
    ):
        self.client = client
        self.server_config = server_config
        self.logger = logger or logging.getLogger(__name__)

    async def _find_one(self, entity_name: str, filters: Dict[str, str]) -> Optional[Record]:
        response = await self.client.find(QueryRequest(entity_name=entity_name, filters=filters, limit=1))
        return response.first

    async def resolve(
        self,
        content_id: str,
        config_id: Optional[str] = None,
        category: Optional[str] = None,
    ) -> ResolvedContent:
        """
        Resolve content_id to normalized text.

        Args:
            content_id: Content to retrieve
            config_id: DataManager config id; when set the text is also saved locally
            category: "uploaded" or "error", used in the save directory name

        Returns:
            ResolvedContent

        Raises:
            NotFound: Content or DataResource lookup returned no rows
            MissingLink: Content has no dataResourceId
            NoRetrievableContent: Typed fetch and download both produced no text
            BackendError: A Content/DataResource/ElectronicText query failed
        """
        content = await self._find_one("Content", {"contentId": content_id})
        if content is None:
            raise NotFound(f"Content not found: {content_id}", entity_name="Content", entity_id=content_id)

        data_resource_id = content.get("dataResourceId")
        if is_absent(data_resource_id):
            raise MissingLink(
                f"No dataResourceId for Content: {content_id}",
                entity_id=content_id,
                field="dataResourceId",
            )

        data_resource = await self._find_one("DataResource", {"dataResourceId": data_resource_id})
        if data_resource is None:
            raise NotFound(
                f"DataResource not found for ID: {data_resource_id}",
                entity_name="DataResource",
                entity_id=data_resource_id,
            )

        data_resource_type_id = data_resource.get("dataResourceTypeId")
        text_data = await self.fetch_typed_text(data_resource_type_id, data_resource_id)

        # The typed path always wins; the download only runs when it produced nothing
        if not text_data:
            text_data = await self.download_text(content_id, data_resource_id)

        if not text_data:
            raise NoRetrievableContent(content_id, data_resource_type_id)

        mime_type = content.get("mimeTypeId") or data_resource.get("mimeTypeId") or None

        saved_path = None
        if config_id:
            saved_path = self.persist_text(
                text_data,
                content_id=content_id,
                config_id=config_id,
                category=category or DEFAULT_CATEGORY,
                mime_type=mime_type,
            )

        return ResolvedContent(
            content_id=content_id,
            data_resource_id=data_resource_id,
            text_data=text_data,
            mime_type=mime_type,
            saved_path=saved_path,
        )

    async def fetch_typed_text(self, data_resource_type_id: Optional[str], data_resource_id: str) -> str:
        """
        Fetch text through the entity API for inline text types.

        An ElectronicText query that returns no rows yields "" so the caller can
        fall back. File-backed and unknown types have no entity-level text.
        """
        if data_resource_type_id in INLINE_TEXT_TYPES:
            record = await self._find_one("ElectronicText", {"dataResourceId": data_resource_id})
            if record is None:
                self.logger.info(
                    "No ElectronicText row for data resource",
                    extra={"data_resource_id": data_resource_id},
                )
                return ""
            return record.get("textData") or ""

        if data_resource_type_id in FILE_BACKED_TYPES:
            self.logger.info(
                "File-backed data resource; deferring to download endpoint",
                extra={"data_resource_id": data_resource_id, "data_resource_type_id": data_resource_type_id},
            )
        else:
            self.logger.info(
                "Data resource type has no entity-level text",
                extra={"data_resource_id": data_resource_id, "data_resource_type_id": data_resource_type_id},
            )
        return ""

    async def download_text(self, content_id: str, data_resource_id: str) -> str:
        """Raw download fallback. Failures are logged and yield ""."""
        try:
            return await self.client.download_content(content_id=content_id, data_resource_id=data_resource_id)
        except BackendError as e:
            self.logger.warning(
                f"Remote fetch error: {e.message}",
                extra={"content_id": content_id, "error_category": e.category.value},
            )
            return ""

    def persist_text(
        self,
        text_data: str,
        content_id: str,
        config_id: str,
        category: str,
        mime_type: Optional[str] = None,
    ) -> Optional[str]:
        """
        Save text under {runtime}/{category}File_{configId}/{contentId}{ext}.

        Best-effort: a missing anchor directory, an unsafe name or an OSError
        is logged and returns None.
        """
        if not all(_is_safe_component(part) for part in (content_id, config_id, category)):
            self.logger.warning(
                "Refusing to persist content with unsafe path component",
                extra={"content_id": content_id, "config_id": config_id, "category": category},
            )
            return None

        runtime_dir = find_runtime_dir(
            self.server_config.runtime_search_root,
            self.server_config.runtime_dir_name,
        )
        if runtime_dir is None:
            self.logger.warning(
                f'Could not find "{self.server_config.runtime_dir_name}" directory in parent hierarchy.',
                extra={"search_root": str(self.server_config.runtime_search_root)},
            )
            return None

        target_dir = runtime_dir / f"{category}File_{config_id}"
        target = target_dir / f"{content_id}{extension_for(mime_type)}"
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            target.write_text(text_data, encoding="utf-8")
        except OSError as e:
            self.logger.warning(
                f"Failed to save content: {e}",
                extra={"content_id": content_id, "path": str(target)},
            )
            return None

        self.logger.info(f"Saved content to: {target}", extra={"content_id": content_id})
        return str(target)
