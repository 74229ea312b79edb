"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from place_media.api.models import BackfillResponse
from place_media.domain.photos import EntityType  # noqa: TC001

if TYPE_CHECKING:
    from place_media.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.post("/photos/backfill/{entity_type}", dependencies=[Depends(require_admin)])
async def backfill_photos(entity_type: EntityType, request: Request) -> BackfillResponse:
    """Resolve photos for every place of a type that has none yet."""
    container: AppContainer = request.app.state.container
    summary = await container.backfill_service.populate(entity_type)
    return BackfillResponse(
        entity_type=summary.entity_type.value,
        succeeded=summary.succeeded,
        skipped=summary.skipped,
        failed=summary.failed,
    )
