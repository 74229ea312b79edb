"""FastAPI application factory."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status

from place_media.api.admin import router as admin_router
from place_media.api.models import PhotoResponse, RateLimitResponse, RateLimitsResponse
from place_media.app_logging import configure_logging
from place_media.containers import AppContainer
from place_media.domain.errors import NoImageAvailable
from place_media.domain.photos import EntityType


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            await asyncio.to_thread(app.state.container.uploader.ensure_bucket)
        except Exception:
            logger.exception("Failed to ensure photo storage bucket")
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/photos/rate-limits")
    async def rate_limits(request: Request) -> RateLimitsResponse:
        """Return client-side provider quotas."""
        state_container: AppContainer = request.app.state.container
        statuses = state_container.media_orchestrator.rate_limit_status()
        return RateLimitsResponse(
            providers={
                source: RateLimitResponse(
                    remaining=limit.remaining,
                    total=limit.total,
                    reset_at=limit.reset_at,
                )
                for source, limit in statuses.items()
            }
        )

    @app.get("/photos/{entity_type}/{entity_id}")
    async def get_photo(  # noqa: PLR0913
        entity_type: EntityType,
        entity_id: str,
        name: str,
        request: Request,
        country: str | None = None,
        photo_reference: str | None = None,
        force_refresh: bool = False,
    ) -> PhotoResponse:
        """Resolve the display photo for a place."""
        state_container: AppContainer = request.app.state.container
        try:
            photo = await state_container.media_orchestrator.resolve(
                entity_type=entity_type,
                entity_id=entity_id,
                entity_name=name,
                country=country,
                photo_reference=photo_reference,
                force_refresh=force_refresh,
            )
        except NoImageAvailable as exc:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
            ) from exc
        return PhotoResponse(
            url=photo.url,
            source=photo.source,
            attribution=photo.attribution,
            cached=photo.cached,
        )

    return app
