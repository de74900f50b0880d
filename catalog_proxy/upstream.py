"""HTTP client for the upstream catalog API.

The client is synchronous; route handlers run it through ``asyncio.to_thread``.
Every transport-level failure (connection refused, DNS, timeout) surfaces as a
single :class:`~catalog_proxy.errors.TransportError`.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from time import perf_counter
from typing import Any, Tuple

import httpx

from .config import Settings, settings
from .errors import TransportError

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json; charset=utf-8"


@dataclass(frozen=True)
class UpstreamResponse:
    status_code: int
    content_type: str | None
    content: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def parse_json(self) -> Tuple[bool, Any]:
        """Best-effort parse; returns ``(parsed, value)``."""
        try:
            return True, json.loads(self.content)
        except ValueError:
            return False, None


class UpstreamClient:
    """Catalog HTTP client.

    ``upstream_timeout_seconds`` bounds each phase of a call (connect, read,
    write, pool) and is also an overall deadline for the whole call, checked
    between body chunks.
    """

    def __init__(self, cfg: Settings, transport: httpx.BaseTransport | None = None) -> None:
        self._deadline_seconds = cfg.upstream_timeout_seconds
        self._client = httpx.Client(
            timeout=cfg.upstream_timeout_seconds,
            transport=transport,
            follow_redirects=True,
            headers={
                "Content-Type": "application/json",
                "User-Agent": cfg.user_agent,
                "Accept": "application/json,text/plain,*/*",
            },
        )

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    def get(self, url: str) -> UpstreamResponse:
        logger.debug("upstream GET %s", url)
        started = perf_counter()
        deadline = started + self._deadline_seconds
        try:
            with self._client.stream("GET", url) as response:
                chunks = []
                for chunk in response.iter_bytes():
                    if perf_counter() > deadline:
                        raise TransportError(f"Upstream call exceeded {self._deadline_seconds}s deadline")
                    chunks.append(chunk)
        except httpx.HTTPError as exc:
            logger.warning("upstream GET failed after %.1fms: %s", (perf_counter() - started) * 1000, exc)
            raise TransportError(str(exc) or exc.__class__.__name__) from exc
        except TransportError as exc:
            logger.warning("upstream GET aborted after %.1fms: %s", (perf_counter() - started) * 1000, exc)
            raise
        took_ms = (perf_counter() - started) * 1000
        logger.info("upstream GET status=%s took=%.1fms", response.status_code, took_ms)
        return UpstreamResponse(
            status_code=response.status_code,
            content_type=response.headers.get("content-type"),
            content=b"".join(chunks),
        )

    def close(self) -> None:
        self._client.close()


@lru_cache(maxsize=1)
def get_upstream() -> UpstreamClient:
    logger.info("Creating upstream client (timeout=%ss)", settings.upstream_timeout_seconds)
    return UpstreamClient(settings)


def close_upstream() -> None:
    """Close the shared client, if one was ever created."""
    if get_upstream.cache_info().currsize:
        get_upstream().close()
        get_upstream.cache_clear()
        logger.info("Upstream client closed")
