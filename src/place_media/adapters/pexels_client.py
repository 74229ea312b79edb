"""Pexels photo search adapter."""

from dataclasses import dataclass, field

import httpx

from place_media.adapters.provider_http import (
    as_dict,
    first_dict,
    get_image,
    get_json,
)
from place_media.domain.errors import NotFound, ProviderDisabled
from place_media.domain.photos import (
    Attribution,
    ImageResult,
    PhotoQuery,
    PhotoSource,
    RateLimitStatus,
)

_BASE_URL = "https://api.pexels.com/v1"


@dataclass
class PexelsClient:
    """Search Pexels and download the top result."""

    api_key: str | None
    http_client: httpx.AsyncClient
    base_url: str = _BASE_URL
    size: str = "large"
    source: PhotoSource = field(default=PhotoSource.STOCK_B, init=False)

    @classmethod
    def create(cls, api_key: str | None) -> "PexelsClient":
        """Create a Pexels client with a managed httpx session."""
        return cls(api_key=api_key, http_client=httpx.AsyncClient())

    def is_enabled(self) -> bool:
        """Pexels needs an API key."""
        return bool(self.api_key)

    async def fetch_image(self, query: PhotoQuery) -> ImageResult:
        """Search photos for the query text and download the first hit."""
        if not self.is_enabled():
            raise ProviderDisabled(self.source)
        if not query.text:
            raise NotFound(self.source, "Pexels search needs a query")

        payload = await get_json(
            self.source,
            self.http_client,
            f"{self.base_url}/search",
            params={"query": query.text, "per_page": 1},
            headers={"Authorization": str(self.api_key)},
        )
        photo = first_dict(payload.get("photos"))
        if photo is None:
            raise NotFound(self.source, f"No Pexels photos found for: {query.text}")

        sources = as_dict(photo.get("src"))
        image_url = sources.get(self.size) or sources.get("original")
        if not image_url:
            raise NotFound(self.source, "Pexels result has no image URL")
        content, content_type = await get_image(
            self.source, self.http_client, str(image_url)
        )
        photo_id = photo.get("id")
        return ImageResult(
            content=content,
            content_type=content_type,
            external_id=str(photo_id) if photo_id is not None else None,
            metadata={
                "photographer": photo.get("photographer"),
                "photographer_url": photo.get("photographer_url"),
            },
        )

    def get_attribution(self, image: ImageResult) -> Attribution:
        """Credit the photographer and Pexels."""
        photographer = image.metadata.get("photographer")
        return Attribution(
            text=f"Photo by {photographer} on Pexels" if photographer else "Pexels",
            url=str(image.metadata.get("photographer_url") or "https://www.pexels.com"),
            license="Pexels License",
        )

    def get_rate_limit_status(self) -> RateLimitStatus | None:
        """Pexels quota is enforced server-side only."""
        return None

    async def report_use(self, image: ImageResult) -> None:
        """Pexels has no usage notification."""

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
