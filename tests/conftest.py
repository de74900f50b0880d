"""Shared fixtures: settings and a scripted fake catalog."""
from __future__ import annotations

from typing import Callable, List, Union

import httpx
import pytest

from catalog_proxy.config import Settings
from catalog_proxy.upstream import UpstreamClient

DETAILS_URL = "https://catalog.test/v1/search/items/details"
SEARCH_URL = "https://catalog.test/v1/search/items"

Scripted = Union[httpx.Response, Exception]


class FakeCatalog:
    """Replays scripted responses in order and records every request."""

    def __init__(self, responses: List[Scripted]) -> None:
        self.responses = list(responses)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        scripted = self.responses.pop(0)
        if isinstance(scripted, Exception):
            raise scripted
        return scripted

    @property
    def calls(self) -> int:
        return len(self.requests)


@pytest.fixture
def cfg() -> Settings:
    return Settings(
        auth_token="s3cret",
        catalog_details_url=DETAILS_URL,
        catalog_search_url=SEARCH_URL,
        bundle_category_hint="17",
        upstream_timeout_seconds=1.0,
    )


@pytest.fixture
def make_upstream(cfg: Settings) -> Callable[[List[Scripted]], tuple]:
    def factory(responses: List[Scripted]) -> tuple:
        fake = FakeCatalog(responses)
        return UpstreamClient(cfg, transport=httpx.MockTransport(fake)), fake

    return factory
