"""Client parameter normalization and upstream parameter mapping.

Everything here is pure: the route layer hands over the raw query string
mapping and gets back a :class:`~catalog_proxy.models.SearchQuery`, which in
turn maps onto the catalog's own parameter names.
"""
from __future__ import annotations

import math
from typing import Dict, Mapping

import httpx

from .models import SearchQuery
from .routes import RouteOptions

DEFAULT_LIMIT = 30


def normalize_limit(value: object) -> int:
    """Bucket a requested page size into the tiers the catalog accepts (10, 28, 30)."""
    try:
        n = float(value) if value not in (None, "") else DEFAULT_LIMIT
    except (TypeError, ValueError):
        n = DEFAULT_LIMIT
    if math.isnan(n):
        n = DEFAULT_LIMIT
    if n <= 10:
        return 10
    if n <= 28:
        return 28
    return 30


def _opt(params: Mapping[str, str], name: str) -> str | None:
    value = params.get(name)
    return str(value) if value else None


def build_query(params: Mapping[str, str], route: RouteOptions) -> SearchQuery:
    sort_agg = params.get("sortAgg") or params.get("sortAggregation")
    return SearchQuery(
        limit=normalize_limit(params.get("limit")),
        cursor=_opt(params, "cursor"),
        keyword=_opt(params, "keyword"),
        asset_types=_opt(params, "assetTypes") if route.forward_asset_types else None,
        sort_type=str(params.get("sortType") or route.sort_type),
        sort_aggregation=str(sort_agg or route.sort_aggregation),
        sales_type_filter=str(params.get("salesTypeFilter") or route.sales_type_filter),
        category=_opt(params, "category") if route.forward_category else None,
        subcategory=_opt(params, "subcategory") if route.forward_category else None,
    )


def upstream_params(query: SearchQuery) -> Dict[str, str]:
    """Map a normalized query onto the catalog API's parameter names."""
    mapped = {
        "SortType": query.sort_type,
        "SortAggregation": query.sort_aggregation,
        "SalesTypeFilter": query.sales_type_filter,
        "Limit": str(query.limit),
    }
    optional = {
        "Cursor": query.cursor,
        "Keyword": query.keyword,
        "AssetTypes": query.asset_types,
        "Category": query.category,
        "Subcategory": query.subcategory,
    }
    mapped.update({key: value for key, value in optional.items() if value})
    return mapped


def build_url(base: str, params: Mapping[str, str]) -> str:
    return str(httpx.URL(base, params=dict(params)))
