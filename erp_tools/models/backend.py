"""Wire models for the backend's generic find API."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

# Raw backend record: untyped until it passes through the projector.
Record = Dict[str, Any]


class QueryRequest(BaseModel):
    """A single performFind call."""
    model_config = ConfigDict(frozen=True)

    entity_name: str = Field(..., description="Backend entity, e.g. 'DataManagerLog'")
    filters: Dict[str, Any] = Field(default_factory=dict, description="Field -> value; None and blank values are dropped")
    limit: int = Field(default=1, ge=1, description="viewSize sent to the backend")
    order_by: Optional[str] = Field(default=None, description="Sort key, '-' prefix for descending")

    def to_body(self) -> Dict[str, Any]:
        """Request body for POST /api/performFind."""
        body: Dict[str, Any] = {
            "entityName": self.entity_name,
            "noConditionFind": "Y",
            "inputFields": {key: value for key, value in self.filters.items() if value is not None and value != ""},
            "viewSize": self.limit,
        }
        if self.order_by:
            body["orderBy"] = self.order_by
        return body


class QueryResponse(BaseModel):
    """Decoded performFind response. Empty docs means not found, not an error."""
    docs: List[Record] = Field(default_factory=list)

    @property
    def first(self) -> Optional[Record]:
        return self.docs[0] if self.docs else None
