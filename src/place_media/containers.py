"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from place_media.adapters.google_places_client import GooglePlacesPhotoClient
from place_media.adapters.pexels_client import PexelsClient
from place_media.adapters.supabase_photo_repository import SupabasePhotoRepository
from place_media.adapters.supabase_place_repository import SupabasePlaceRepository
from place_media.adapters.supabase_storage_uploader import SupabaseStorageUploader
from place_media.adapters.unsplash_client import UnsplashClient
from place_media.adapters.wikimedia_client import WikimediaCommonsClient
from place_media.config import Settings
from place_media.services.backfill import PhotoBackfillService
from place_media.services.media import BlobUploader, MediaOrchestrator


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    uploader: BlobUploader
    media_orchestrator: MediaOrchestrator
    backfill_service: PhotoBackfillService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    photo_repository = SupabasePhotoRepository(supabase_client)
    place_repository = SupabasePlaceRepository(supabase_client)
    uploader = SupabaseStorageUploader(
        supabase_client, bucket=resolved_settings.photo_bucket
    )
    places_client = GooglePlacesPhotoClient.create(
        resolved_settings.google_maps_api_key
    )
    unsplash_client = UnsplashClient.create(
        resolved_settings.unsplash_access_key,
        requests_per_window=resolved_settings.unsplash_requests_per_window,
        window_seconds=resolved_settings.unsplash_window_seconds,
    )
    wikimedia_client = WikimediaCommonsClient.create(
        enabled=resolved_settings.enable_media_wikimedia,
        user_agent=resolved_settings.http_user_agent,
    )
    pexels_client = PexelsClient.create(resolved_settings.pexels_api_key)
    media_orchestrator = MediaOrchestrator(
        cache=photo_repository,
        uploader=uploader,
        places=places_client,
        stock_a=unsplash_client,
        commons=wikimedia_client,
        stock_b=pexels_client,
        image_width=resolved_settings.image_width,
        provider_timeout_seconds=resolved_settings.provider_timeout_seconds,
        resolve_deadline_seconds=resolved_settings.resolve_deadline_seconds,
        deduplicate_inflight=resolved_settings.deduplicate_inflight,
    )
    backfill_service = PhotoBackfillService(
        repository=place_repository,
        orchestrator=media_orchestrator,
    )

    async def close_resources() -> None:
        await places_client.close()
        await unsplash_client.close()
        await wikimedia_client.close()
        await pexels_client.close()

    return AppContainer(
        settings=resolved_settings,
        uploader=uploader,
        media_orchestrator=media_orchestrator,
        backfill_service=backfill_service,
        close_resources=close_resources,
    )
