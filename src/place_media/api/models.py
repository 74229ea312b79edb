"""Response models for the photo API."""

from datetime import datetime

from pydantic import BaseModel

from place_media.domain.photos import PhotoSource


class PhotoResponse(BaseModel):
    """Resolved photo as served to the web client."""

    url: str
    source: PhotoSource
    attribution: str | None = None
    cached: bool


class RateLimitResponse(BaseModel):
    """Client-side quota of a single provider."""

    remaining: int
    total: int
    reset_at: datetime


class RateLimitsResponse(BaseModel):
    """Quota of every provider that tracks one."""

    providers: dict[str, RateLimitResponse]


class BackfillResponse(BaseModel):
    """Counts from a backfill run."""

    entity_type: str
    succeeded: int
    skipped: int
    failed: int
