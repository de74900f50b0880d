"""Terminal client that reuses the in-process proxy pipeline."""
from __future__ import annotations

import argparse
import json
from typing import Iterable

from catalog_proxy.config import settings
from catalog_proxy.items import item_type, resolve_asset_type_id, result_items
from catalog_proxy.params import build_query
from catalog_proxy.proxy import ProxyResult, proxy_search, resolve_bundles
from catalog_proxy.routes import BUNDLES_ROUTE, SEARCH_ROUTE
from catalog_proxy.upstream import close_upstream, get_upstream

GREEN = "\033[92m"
RED = "\033[91m"
RESET = "\033[0m"


def pretty_print_result(label: str, result: ProxyResult) -> None:
    color = GREEN if 200 <= result.status < 300 else RED
    print(f"{label} | status: {color}{result.status}{RESET} | {result.content_type}")
    try:
        payload = json.loads(result.body)
    except ValueError:
        print(result.body.decode("utf-8", errors="replace")[:500])
        return
    items = result_items(payload)
    if items is None:
        print(json.dumps(payload, indent=2, ensure_ascii=False)[:2000])
        return
    for idx, item in enumerate(items, start=1):
        if not isinstance(item, dict):
            continue
        print(
            f"  {idx:02d}. {item.get('id')} | {item_type(item) or '-'} | "
            f"type={resolve_asset_type_id(item)} | {item.get('name')}"
        )
    if isinstance(payload, dict):
        if payload.get("nextPageCursor"):
            print(f"  next cursor: {payload['nextPageCursor']}")
        if payload.get("_proxyWarning"):
            print(f"  {RED}warning: {payload['_proxyWarning']}{RESET}")


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="CLI client for the catalog proxy")
    parser.add_argument("keyword", nargs="?", default="", help="Keyword to search for")
    parser.add_argument("--bundles", action="store_true", help="Resolve bundles instead of assets")
    parser.add_argument("--limit", default=None, help="Page size (bucketed to 10, 28 or 30)")
    parser.add_argument("--asset-types", default=None, help="CSV of asset type ids to keep")
    parser.add_argument("--cursor", default=None, help="Pagination cursor from a previous page")
    args = parser.parse_args(list(argv) if argv is not None else None)

    raw = {
        "keyword": args.keyword,
        "limit": args.limit,
        "assetTypes": args.asset_types,
        "cursor": args.cursor,
    }
    params = {key: value for key, value in raw.items() if value}
    route, handler = (BUNDLES_ROUTE, resolve_bundles) if args.bundles else (SEARCH_ROUTE, proxy_search)
    query = build_query(params, route)
    try:
        result = handler(query, get_upstream(), settings)
    finally:
        close_upstream()
    pretty_print_result(f"{route.name}: {args.keyword or '*'}", result)
    return 0 if 200 <= result.status < 300 else 1


if __name__ == "__main__":
    raise SystemExit(main())
