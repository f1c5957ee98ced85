from typing import Annotated
from urllib.parse import parse_qs
import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from iptv_directory.config import settings
from iptv_directory.dependencies import (
    get_query_service,
    get_refresher,
    get_scheduler,
    get_snapshot_store,
)
from iptv_directory.schemas import CatalogResponse, Meta, MetaResponse, StreamResponse
from iptv_directory.services.query_service import (
    ALL_GENRES,
    UNKNOWN_CHANNEL_NAME,
    DirectoryQueryService,
)
from iptv_directory.services.refresh_service import DirectoryRefresher
from iptv_directory.services.scheduler_service import DirectoryScheduler
from iptv_directory.services.snapshot_store import SnapshotStore


logger = logging.getLogger(__name__)

main_router = APIRouter()

CATALOG_TYPE = "tv"


def _catalog_id() -> str:
    return settings.addon_id.rsplit(".", 1)[-1]


@main_router.get("/manifest.json")
async def manifest(
    query_service: Annotated[DirectoryQueryService, Depends(get_query_service)]
) -> dict:
    """Add-on manifest; genre options follow the live category set"""
    return {
        "id": settings.addon_id,
        "version": settings.addon_version,
        "name": settings.addon_name,
        "description": settings.addon_description,
        "logo": settings.addon_logo,
        "resources": ["catalog", "stream", "meta"],
        "types": [CATALOG_TYPE],
        "catalogs": [
            {
                "type": CATALOG_TYPE,
                "id": _catalog_id(),
                "name": settings.addon_name,
                "extra": [{"name": "genre", "options": query_service.genres()}],
            }
        ],
        "idPrefixes": ["channel-"],
    }


@main_router.get("/catalog/{content_type}/{catalog_id}.json", response_model=CatalogResponse)
async def catalog(
    content_type: str,
    catalog_id: str,
    query_service: Annotated[DirectoryQueryService, Depends(get_query_service)]
) -> CatalogResponse:
    if content_type != CATALOG_TYPE:
        return CatalogResponse(metas=[])
    return query_service.list_channels(ALL_GENRES)


def _raw_extra(request: Request) -> str:
    """
    Undecoded extra segment of a catalog request

    The routed `{extra}` parameter is already percent-decoded, which turns
    an encoded "&", "+" or "/" inside a genre into a separator. The raw path
    keeps the encoding, so `parse_qs` decodes it exactly once.
    """
    raw_path = request.scope.get("raw_path") or request.url.path.encode()
    path = raw_path.decode("latin-1").split("?", 1)[0]
    # "", "catalog", content_type, catalog_id, extra
    parts = path.split("/", 4)
    extra = parts[4] if len(parts) == 5 else ""
    return extra.removesuffix(".json")


@main_router.get("/catalog/{content_type}/{catalog_id}/{extra:path}.json", response_model=CatalogResponse)
async def catalog_with_extra(
    content_type: str,
    catalog_id: str,
    extra: str,
    request: Request,
    query_service: Annotated[DirectoryQueryService, Depends(get_query_service)]
) -> CatalogResponse:
    """
    Catalog filtered by the `genre` extra

    Args:
        extra: URL-encoded extra arguments, e.g. "genre=News%20%26%20Weather"
    """
    if content_type != CATALOG_TYPE:
        return CatalogResponse(metas=[])

    genre_values = parse_qs(_raw_extra(request)).get("genre")
    genre = genre_values[0].strip() if genre_values and genre_values[0].strip() else ALL_GENRES
    return query_service.list_channels(genre)


@main_router.get("/stream/{content_type}/{channel_id}.json", response_model=StreamResponse)
async def stream(
    content_type: str,
    channel_id: str,
    query_service: Annotated[DirectoryQueryService, Depends(get_query_service)]
) -> StreamResponse:
    if content_type != CATALOG_TYPE:
        return StreamResponse(streams=[])
    return query_service.describe_stream(channel_id)


@main_router.get("/meta/{content_type}/{channel_id}.json", response_model=MetaResponse)
async def meta(
    content_type: str,
    channel_id: str,
    query_service: Annotated[DirectoryQueryService, Depends(get_query_service)]
) -> MetaResponse:
    if content_type != CATALOG_TYPE:
        return MetaResponse(meta=Meta(id=channel_id, name=UNKNOWN_CHANNEL_NAME))
    return query_service.describe_channel(channel_id)


@main_router.get("/health")
async def health_check(
    store: Annotated[SnapshotStore, Depends(get_snapshot_store)],
    scheduler: Annotated[DirectoryScheduler, Depends(get_scheduler)],
) -> dict:
    """Health check endpoint"""
    snapshot = store.current()
    next_run = scheduler.get_next_run_time()
    return {
        "status": "ok",
        "scheduler_running": scheduler.is_running(),
        "next_refresh": next_run.isoformat() if next_run else None,
        "channels": len(snapshot.channels),
        "categories": len(snapshot.categories),
        "programmes": snapshot.programme_count,
        "fetched_at": snapshot.fetched_at.isoformat() if snapshot.fetched_at else None,
    }


@main_router.post("/refresh")
async def trigger_refresh(
    refresher: Annotated[DirectoryRefresher, Depends(get_refresher)]
) -> dict:
    """
    Manually trigger a directory refresh

    This will download and ingest both feeds and publish a new snapshot
    """
    logger.info("Manual directory refresh triggered via API")
    result = await refresher.refresh()

    if result.get("status") == "failed":
        raise HTTPException(status_code=502, detail=result)

    return result
