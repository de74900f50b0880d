"""FastAPI application wiring the catalog proxy routes."""
from __future__ import annotations

import asyncio
import logging
from typing import Callable

from fastapi import Depends, FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .auth import require_auth
from .config import Settings, get_settings, settings
from .errors import AuthError, MethodError
from .models import HealthResponse, SearchQuery
from .params import build_query
from .proxy import ProxyResult, proxy_search, resolve_bundles
from .routes import BUNDLES_ROUTE, SEARCH_ROUTE, RouteOptions
from .upstream import UpstreamClient, close_upstream, get_upstream

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVEL = logging.getLevelName(settings.log_level.upper())

logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT, force=True)
for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "httpx"):
    logging.getLogger(name).setLevel(LOG_LEVEL)

logger = logging.getLogger(__name__)
logger.info("Logging configured at %s", settings.log_level.upper())

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, X-Auth",
}
DISALLOWED_METHODS = ["POST", "PUT", "PATCH", "DELETE"]

Handler = Callable[[SearchQuery, UpstreamClient, Settings], ProxyResult]

app = FastAPI(title="Catalog Proxy")


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> Response:
    logger.info("Rejected unauthorized %s %s", request.method, request.url.path)
    return PlainTextResponse("Unauthorized", status_code=401, headers=CORS_HEADERS)


def _method_not_allowed() -> Response:
    return JSONResponse(
        {"error": "Method not allowed"},
        status_code=405,
        headers={**CORS_HEADERS, "Allow": "GET, OPTIONS"},
    )


@app.exception_handler(MethodError)
async def method_error_handler(request: Request, exc: MethodError) -> Response:
    return _method_not_allowed()


@app.exception_handler(StarletteHTTPException)
async def starlette_http_error_handler(request: Request, exc: StarletteHTTPException) -> Response:
    # Router-level 405s (HEAD, TRACE, ...) get the same reply as explicit ones.
    if exc.status_code == 405:
        logger.info("Rejected %s %s", request.method, request.url.path)
        return _method_not_allowed()
    return await http_exception_handler(request, exc)


@app.on_event("shutdown")
async def shutdown_event() -> None:
    close_upstream()


def _to_response(result: ProxyResult, route: RouteOptions) -> Response:
    headers = {**CORS_HEADERS, "Content-Type": result.content_type}
    if result.cacheable:
        headers["Cache-Control"] = route.cache_control
    return Response(content=result.body, status_code=result.status, headers=headers)


async def _run(request: Request, route: RouteOptions, handler: Handler, client: UpstreamClient, cfg: Settings) -> Response:
    query = build_query(request.query_params, route)
    logger.debug("%s query=%s", route.name, query)
    result = await asyncio.to_thread(handler, query, client, cfg)
    logger.info("%s keyword=%r limit=%s -> status=%s", route.name, query.keyword, query.limit, result.status)
    return _to_response(result, route)


@app.get("/health", response_model=HealthResponse)
async def health(cfg: Settings = Depends(get_settings)) -> HealthResponse:
    return HealthResponse(
        status="ok",
        auth_configured=bool(cfg.auth_token),
        upstream=cfg.catalog_details_url,
    )


@app.get("/api/assets", dependencies=[Depends(require_auth)])
async def assets(
    request: Request,
    client: UpstreamClient = Depends(get_upstream),
    cfg: Settings = Depends(get_settings),
) -> Response:
    return await _run(request, SEARCH_ROUTE, proxy_search, client, cfg)


@app.get("/api/bundles", dependencies=[Depends(require_auth)])
async def bundles(
    request: Request,
    client: UpstreamClient = Depends(get_upstream),
    cfg: Settings = Depends(get_settings),
) -> Response:
    return await _run(request, BUNDLES_ROUTE, resolve_bundles, client, cfg)


async def preflight() -> Response:
    return Response(status_code=204, headers=CORS_HEADERS)


async def method_not_allowed(request: Request) -> Response:
    raise MethodError(request.method)


for path in ("/api/assets", "/api/bundles"):
    app.add_api_route(path, preflight, methods=["OPTIONS"], include_in_schema=False)
    app.add_api_route(path, method_not_allowed, methods=DISALLOWED_METHODS, include_in_schema=False)
