"""Fetch-and-shape step for the two proxy routes.

Both handlers take an already normalized :class:`SearchQuery`, talk to the
catalog through :class:`UpstreamClient`, and return a :class:`ProxyResult`
that the FastAPI layer turns into a response.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, List

from .config import Settings
from .errors import TransportError
from .items import contains_bundles, filter_by_asset_types, result_items
from .models import ErrorDetail, ErrorEnvelope, SearchQuery
from .params import build_url, upstream_params
from .upstream import JSON_CONTENT_TYPE, UpstreamClient, UpstreamResponse

logger = logging.getLogger(__name__)

BUNDLE_WARNING_FIELD = "_proxyWarning"
BUNDLE_WARNING = "No candidate returned Bundle items"


@dataclass(frozen=True)
class ProxyResult:
    status: int
    content_type: str
    body: bytes
    cacheable: bool = False


@dataclass(frozen=True)
class UpstreamCandidate:
    label: str
    url: str


def _dump(payload: Any) -> bytes:
    return json.dumps(payload, ensure_ascii=False).encode("utf-8")


def _error_result(status: int, message: str, detail: str | None = None) -> ProxyResult:
    envelope = ErrorEnvelope(errors=[ErrorDetail(message=message, detail=detail)])
    return ProxyResult(status, "application/json", _dump(envelope.model_dump(exclude_none=True)))


def _passthrough(response: UpstreamResponse, *, cacheable: bool) -> ProxyResult:
    return ProxyResult(
        response.status_code,
        response.content_type or JSON_CONTENT_TYPE,
        response.content,
        cacheable=cacheable,
    )


def proxy_search(query: SearchQuery, client: UpstreamClient, cfg: Settings) -> ProxyResult:
    url = build_url(cfg.catalog_details_url, upstream_params(query))
    try:
        response = client.get(url)
    except TransportError as exc:
        return _error_result(502, "Upstream fetch failed", str(exc))

    parsed, payload = response.parse_json()
    if not parsed:
        logger.info("search: non-JSON upstream body (status=%s), passing through", response.status_code)
        return _passthrough(response, cacheable=True)

    allowed = query.allowed_asset_types
    items = result_items(payload)
    if not allowed or items is None:
        return _passthrough(response, cacheable=True)

    kept = filter_by_asset_types(items, allowed)
    logger.info(
        "search: asset filter allowed=%s kept=%s/%s",
        sorted(allowed),
        len(kept),
        len(items),
    )
    filtered = {**payload, "data": kept}
    return ProxyResult(response.status_code, JSON_CONTENT_TYPE, _dump(filtered), cacheable=True)


def bundle_candidates(query: SearchQuery, cfg: Settings) -> List[UpstreamCandidate]:
    """Ordered ways of asking the catalog for bundles; the first that works wins."""
    base = upstream_params(query)
    return [
        UpstreamCandidate("details", build_url(cfg.catalog_details_url, {"ItemType": "Bundle", **base})),
        UpstreamCandidate("details-lowercase", build_url(cfg.catalog_details_url, {"itemType": "Bundle", **base})),
        UpstreamCandidate(
            "details-category",
            build_url(
                cfg.catalog_details_url,
                {"ItemType": "Bundle", **base, "Category": cfg.bundle_category_hint},
            ),
        ),
        UpstreamCandidate("search", build_url(cfg.catalog_search_url, {"ItemType": "Bundle", **base})),
    ]


def resolve_bundles(query: SearchQuery, client: UpstreamClient, cfg: Settings) -> ProxyResult:
    last_json: Any = None
    have_json = False
    last_response: UpstreamResponse | None = None
    last_error: TransportError | None = None

    for candidate in bundle_candidates(query, cfg):
        try:
            response = client.get(candidate.url)
        except TransportError as exc:
            logger.info("bundles: candidate %s failed: %s", candidate.label, exc)
            last_error = exc
            continue
        last_response = response
        parsed, payload = response.parse_json()
        if parsed:
            have_json, last_json = True, payload
        if not response.ok or not parsed:
            logger.info(
                "bundles: candidate %s skipped (status=%s json=%s)",
                candidate.label,
                response.status_code,
                parsed,
            )
            continue
        items = result_items(payload) or []
        if contains_bundles(items):
            logger.info("bundles: candidate %s accepted (%s items)", candidate.label, len(items))
            return ProxyResult(200, JSON_CONTENT_TYPE, response.content, cacheable=True)
        logger.info("bundles: candidate %s returned no bundle items", candidate.label)

    if have_json:
        logger.warning("bundles: no candidate returned bundle items, serving degraded response")
        if isinstance(last_json, dict):
            degraded = {**last_json, BUNDLE_WARNING_FIELD: BUNDLE_WARNING}
        else:
            degraded = {"data": last_json, BUNDLE_WARNING_FIELD: BUNDLE_WARNING}
        return ProxyResult(200, JSON_CONTENT_TYPE, _dump(degraded), cacheable=True)
    if last_response is not None:
        return _passthrough(last_response, cacheable=False)
    if last_error is not None:
        return _error_result(502, "Upstream fetch failed", str(last_error))
    return _error_result(502, "Proxy error")
