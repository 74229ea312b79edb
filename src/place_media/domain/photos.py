"""Domain models for place photos."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum


class EntityType(str, Enum):
    """Kinds of travel places that can carry a photo."""

    DESTINATION = "destination"
    ATTRACTION = "attraction"
    RESTAURANT = "restaurant"
    ACCOMMODATION = "accommodation"


class PhotoSource(str, Enum):
    """Photo providers, in no particular order."""

    PLACES = "places"
    STOCK_A = "stockA"
    COMMONS = "commons"
    STOCK_B = "stockB"


@dataclass(frozen=True)
class PhotoRecord:
    """Cached outcome of a successful photo resolution."""

    entity_type: EntityType
    entity_id: str
    source: PhotoSource
    external_id: str
    source_ref: str
    cached_url: str
    attribution: str
    license: str | None = None
    is_primary: bool = True
    inserted_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))


@dataclass(frozen=True)
class PhotoQuery:
    """What a provider is asked to find."""

    text: str | None = None
    photo_reference: str | None = None
    width: int = 1920


@dataclass(frozen=True)
class ImageResult:
    """Raw image bytes returned by a provider."""

    content: bytes
    content_type: str
    external_id: str | None = None
    metadata: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class Attribution:
    """Display credit for a provider image."""

    text: str
    url: str | None = None
    license: str | None = None


@dataclass(frozen=True)
class RateLimitStatus:
    """Client-side quota snapshot for a provider."""

    remaining: int
    total: int
    reset_at: datetime


@dataclass(frozen=True)
class ResolvedPhoto:
    """Photo returned to callers."""

    url: str
    source: PhotoSource
    attribution: str | None
    cached: bool


@dataclass(frozen=True)
class PlaceRef:
    """A place that may need a photo."""

    entity_type: EntityType
    entity_id: str
    name: str
    country: str | None = None
    photo_reference: str | None = None
