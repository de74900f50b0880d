"""Exceptions raised along the proxy request path."""
from __future__ import annotations


class ProxyError(Exception):
    """Base class for errors that terminate a proxied request."""


class AuthError(ProxyError):
    """Missing or invalid ``X-Auth`` credential."""


class MethodError(ProxyError):
    """HTTP method other than GET/OPTIONS."""

    def __init__(self, method: str) -> None:
        super().__init__(f"Method {method} not allowed")
        self.method = method


class TransportError(ProxyError):
    """The upstream catalog could not be reached (connection error, timeout)."""
