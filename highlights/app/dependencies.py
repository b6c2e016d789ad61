from __future__ import annotations

from functools import lru_cache

from highlights.app.config import AppSettings, load_settings
from highlights.app.services.catalogue_service import CatalogueService
from highlights.app.services.match_cache import MatchCache
from highlights.app.services.upstream_client import HighlightsFetcher
from highlights.app.telemetry import TelemetryClient, build_telemetry_client


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return load_settings()


@lru_cache(maxsize=1)
def get_telemetry() -> TelemetryClient:
    settings = get_settings()
    return build_telemetry_client(
        enabled=settings.telemetry_enabled,
        sink=settings.telemetry_sink,
    )


@lru_cache(maxsize=1)
def get_match_cache() -> MatchCache:
    settings = get_settings()
    return MatchCache(
        HighlightsFetcher(
            url=settings.upstream_url,
            timeout_seconds=settings.upstream_timeout_seconds,
        ),
        ttl_seconds=settings.cache_ttl_seconds,
        telemetry=get_telemetry(),
    )


@lru_cache(maxsize=1)
def get_catalogue_service() -> CatalogueService:
    settings = get_settings()
    return CatalogueService(
        cache=get_match_cache(),
        page_size=settings.page_size,
        home_limit=settings.home_limit,
    )


def reset_cached_dependencies() -> None:
    get_catalogue_service.cache_clear()
    get_match_cache.cache_clear()
    get_telemetry.cache_clear()
    get_settings.cache_clear()
