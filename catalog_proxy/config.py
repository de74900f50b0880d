"""Application configuration and constants."""
from __future__ import annotations

import os
from dataclasses import dataclass


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None else default


@dataclass(frozen=True)
class Settings:
    """Simple settings container with environment variable overrides."""

    auth_token: str = _get_env("AUTH_TOKEN", "")
    catalog_details_url: str = _get_env(
        "CATALOG_DETAILS_URL", "https://catalog.roblox.com/v1/search/items/details"
    )
    catalog_search_url: str = _get_env("CATALOG_SEARCH_URL", "https://catalog.roblox.com/v1/search/items")
    # Catalog "Characters" category, where bundles are listed.
    bundle_category_hint: str = _get_env("BUNDLE_CATEGORY_HINT", "17")
    upstream_timeout_seconds: float = float(_get_env("UPSTREAM_TIMEOUT_SECONDS", "5"))
    user_agent: str = _get_env("UPSTREAM_USER_AGENT", "Mozilla/5.0 (compatible; CatalogProxy/1.0)")
    log_level: str = _get_env("LOG_LEVEL", "INFO")


settings = Settings()


def get_settings() -> Settings:
    return settings
