"""Query normalization and upstream parameter mapping."""

import httpx
import pytest
from pydantic import ValidationError

from catalog_proxy.params import build_query, build_url, normalize_limit, upstream_params
from catalog_proxy.routes import BUNDLES_ROUTE, SEARCH_ROUTE


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, 30),
        ("", 30),
        ("abc", 30),
        ("nan", 30),
        ("5", 10),
        ("0", 10),
        ("-3", 10),
        ("10", 10),
        ("11", 28),
        ("15", 28),
        ("28", 28),
        ("28.5", 30),
        ("29", 30),
        ("500", 30),
        (15, 28),
    ],
)
def test_normalize_limit_buckets(value, expected):
    """Any requested size lands in one of the 10/28/30 tiers."""

    assert normalize_limit(value) == expected


def test_build_query_applies_route_defaults():
    """Absent parameters fall back to the route's sort and sales codes."""

    query = build_query({}, SEARCH_ROUTE)

    assert query.limit == 30
    assert (query.sort_type, query.sort_aggregation, query.sales_type_filter) == ("3", "5", "1")
    assert query.cursor is None and query.keyword is None
    assert query.allowed_asset_types == frozenset()


def test_build_query_accepts_both_sort_aggregation_spellings():
    """sortAgg and sortAggregation are aliases; sortAgg wins."""

    assert build_query({"sortAggregation": "1"}, SEARCH_ROUTE).sort_aggregation == "1"
    assert build_query({"sortAgg": "2", "sortAggregation": "1"}, SEARCH_ROUTE).sort_aggregation == "2"


def test_bundle_route_ignores_asset_types_and_category():
    """Bundles carry no asset type, so the bundle route drops those filters."""

    query = build_query({"assetTypes": "41", "category": "11", "subcategory": "19"}, BUNDLES_ROUTE)

    assert query.asset_types is None
    assert query.category is None and query.subcategory is None


def test_query_is_immutable():
    """A built query cannot be changed mid-request."""

    query = build_query({"keyword": "hat"}, SEARCH_ROUTE)

    with pytest.raises(ValidationError):
        query.keyword = "shoes"


def test_upstream_params_maps_names_and_skips_empty():
    """Client names map to catalog names; unset optionals are left out."""

    query = build_query(
        {"keyword": "red hat", "cursor": "abc", "assetTypes": "8,41", "limit": "12", "subcategory": "19"},
        SEARCH_ROUTE,
    )

    assert upstream_params(query) == {
        "SortType": "3",
        "SortAggregation": "5",
        "SalesTypeFilter": "1",
        "Limit": "28",
        "Cursor": "abc",
        "Keyword": "red hat",
        "AssetTypes": "8,41",
        "Subcategory": "19",
    }


def test_build_url_encodes_params():
    """Keywords with spaces survive URL encoding."""

    url = httpx.URL(build_url("https://catalog.test/v1/search/items/details", {"Keyword": "red hat", "Limit": "10"}))

    assert url.path == "/v1/search/items/details"
    assert url.params["Keyword"] == "red hat"
    assert url.params["Limit"] == "10"
