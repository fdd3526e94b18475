"""Bunny.net storage credential check models."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HostTestResult(_CamelModel):
    """Outcome of listing the storage zone root on one storage host."""

    host: str = Field(..., description="Storage API hostname")
    success: bool = Field(...)
    status: Optional[int] = Field(None, description="HTTP status, absent on network errors")
    message: str = Field(...)


class CredentialTestRequest(_CamelModel):
    """Credentials typed into the admin settings screen. Never persisted."""

    storage_zone: str = Field(default="")
    api_key: str = Field(default="")


class CredentialReport(_CamelModel):
    """Diagnostics for a storage zone / API key pair."""

    has_api_key: bool = Field(default=False)
    has_storage_zone: bool = Field(default=False)
    storage_zone_name: Optional[str] = Field(None)
    api_key_length: int = Field(default=0)
    api_key_preview: Optional[str] = Field(None, description="First/last 4 chars")
    host_tests: list[HostTestResult] = Field(default_factory=list)
    recommended_host: Optional[str] = Field(None, description="First host that worked")
    note: Optional[str] = Field(None)
