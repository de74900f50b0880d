"""Pydantic models for request/response payloads."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .items import parse_asset_types


class SearchQuery(BaseModel):
    """Normalized client query, immutable for the life of one request."""

    model_config = ConfigDict(frozen=True)

    limit: int = 30
    cursor: str | None = None
    keyword: str | None = None
    asset_types: str | None = Field(default=None, description="CSV of asset type ids")
    sort_type: str = "3"
    sort_aggregation: str = "5"
    sales_type_filter: str = "1"
    category: str | None = None
    subcategory: str | None = None

    @property
    def allowed_asset_types(self) -> frozenset[int]:
        return parse_asset_types(self.asset_types)


class ErrorDetail(BaseModel):
    message: str
    detail: str | None = None


class ErrorEnvelope(BaseModel):
    errors: list[ErrorDetail]


class HealthResponse(BaseModel):
    status: str
    auth_configured: bool
    upstream: str
