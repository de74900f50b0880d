"""Shared-secret header check."""
from __future__ import annotations

import logging

from fastapi import Depends, Header

from .config import Settings, get_settings
from .errors import AuthError

logger = logging.getLogger(__name__)

AUTH_HEADER = "X-Auth"


def authorize(presented: str | None, secret: str | None) -> bool:
    """Fail closed: an unset secret rejects everything."""
    if not secret:
        return False
    return presented == secret


def require_auth(
    x_auth: str | None = Header(default=None, alias=AUTH_HEADER),
    cfg: Settings = Depends(get_settings),
) -> None:
    if not cfg.auth_token:
        logger.warning("AUTH_TOKEN is not configured; rejecting request")
    if not authorize(x_auth, cfg.auth_token):
        raise AuthError("Unauthorized")
