from __future__ import annotations

from functools import lru_cache

from curator.app.config import AppSettings, load_settings
from curator.app.services.content_fetch_service import ContentFetchService
from curator.app.services.remote_client import RemoteClient
from curator.app.services.tag_catalog_service import TagCatalogService
from curator.app.services.tag_reconciliation_service import TagReconciliationService
from curator.app.telemetry import TelemetryClient, build_telemetry_client


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
def get_reconciliation_service() -> TagReconciliationService:
    return TagReconciliationService(telemetry=get_telemetry())


def build_remote_client() -> RemoteClient:
    # Not cached: the underlying httpx.AsyncClient is bound to one event loop.
    settings = get_settings()
    return RemoteClient(
        base_url=settings.server_url,
        timeout_seconds=settings.http_timeout_seconds,
        user_agent=settings.user_agent,
    )


def build_tag_catalog_service(client: RemoteClient) -> TagCatalogService:
    return TagCatalogService(client=client, page_size=get_settings().tags_page_size)


def build_content_fetch_service(client: RemoteClient) -> ContentFetchService:
    return ContentFetchService(client=client, telemetry=get_telemetry())


def reset_cached_dependencies() -> None:
    get_reconciliation_service.cache_clear()
    get_telemetry.cache_clear()
    get_settings.cache_clear()
