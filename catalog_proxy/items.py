"""Tolerant accessors over catalog items.

The catalog is inconsistent about field casing and shape: the asset type may be
``assetType`` (sometimes an object with an ``id``), ``assetTypeId``,
``AssetTypeId`` and so on. Everything that needs to look inside an item goes
through the helpers below.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Sequence

logger = logging.getLogger(__name__)

ASSET_TYPE_FIELDS: Sequence[str] = (
    "assetType",
    "assetTypeId",
    "AssetTypeId",
    "AssetType",
    "asset_type_id",
)
NESTED_ID_FIELDS: Sequence[str] = ("id", "Id", "ID")
ITEM_TYPE_FIELDS: Sequence[str] = ("itemType", "ItemType")


def parse_asset_types(csv: str | None) -> frozenset[int]:
    """Parse a ``"8,41,42"`` style list into a set of non-negative ints."""
    if not csv:
        return frozenset()
    allowed = set()
    for chunk in csv.split(","):
        value = _coerce_int(chunk.strip())
        if value is not None:
            allowed.add(value)
    return frozenset(allowed)


def _coerce_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float):
        return int(value) if value.is_integer() and value >= 0 else None
    if isinstance(value, str):
        text = value.strip()
        if text.isdecimal():
            return int(text)
    return None


def resolve_asset_type_id(item: Any) -> int | None:
    """Return the first coercible asset type id found on ``item``."""
    if not isinstance(item, dict):
        return None
    for field in ASSET_TYPE_FIELDS:
        if field not in item:
            continue
        value = item[field]
        if isinstance(value, dict):
            value = next((value[key] for key in NESTED_ID_FIELDS if key in value), None)
        resolved = _coerce_int(value)
        if resolved is not None:
            return resolved
    return None


def item_type(item: Any) -> str | None:
    if not isinstance(item, dict):
        return None
    for field in ITEM_TYPE_FIELDS:
        value = item.get(field)
        if isinstance(value, str) and value:
            return value.lower()
    return None


def filter_by_asset_types(items: Iterable[Any], allowed: frozenset[int]) -> List[Any]:
    """Keep plain assets whose type is in ``allowed``; bundles never pass."""
    kept = []
    for item in items:
        if item_type(item) not in (None, "asset"):
            continue
        if resolve_asset_type_id(item) in allowed:
            kept.append(item)
    return kept


def contains_bundles(items: Iterable[Any]) -> bool:
    return any(item_type(item) == "bundle" for item in items)


def result_items(payload: Any) -> list | None:
    """Return the ``data`` collection of a catalog response, if it has one."""
    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        return payload["data"]
    return None
