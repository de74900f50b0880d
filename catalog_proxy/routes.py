"""Declarative per-route options for the proxy pipeline."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RouteOptions:
    name: str
    sort_type: str = "3"
    sort_aggregation: str = "5"
    sales_type_filter: str = "1"
    forward_asset_types: bool = False
    forward_category: bool = False
    cache_max_age: int = 10
    stale_while_revalidate: int = 30

    @property
    def cache_control(self) -> str:
        return f"s-maxage={self.cache_max_age}, stale-while-revalidate={self.stale_while_revalidate}"


SEARCH_ROUTE = RouteOptions(
    name="assets",
    forward_asset_types=True,
    forward_category=True,
)
BUNDLES_ROUTE = RouteOptions(
    name="bundles",
    cache_max_age=30,
    stale_while_revalidate=120,
)
