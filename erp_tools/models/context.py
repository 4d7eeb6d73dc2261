"""Per-invocation request context."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class AuthInfo(BaseModel):
    """Credentials forwarded by the invoking host."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    downstream_token: Optional[str] = Field(
        default=None,
        alias="downstreamToken",
        description="Delegated bearer token for the backend; wins over the static token",
    )


class RequestContext(BaseModel):
    """Context supplied fresh with every tool invocation. Never retained."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    auth_info: AuthInfo = Field(default_factory=AuthInfo, alias="authInfo")
    request_id: Optional[str] = None

    @classmethod
    def with_token(cls, token: Optional[str], request_id: Optional[str] = None) -> "RequestContext":
        return cls(auth_info=AuthInfo(downstream_token=token), request_id=request_id)
