"""Unsplash photo search adapter."""

from dataclasses import dataclass, field

import httpx

from place_media.adapters.provider_http import (
    as_dict,
    first_dict,
    get_image,
    get_json,
)
from place_media.domain.errors import NotFound, ProviderDisabled, RateLimited
from place_media.domain.photos import (
    Attribution,
    ImageResult,
    PhotoQuery,
    PhotoSource,
    RateLimitStatus,
)
from place_media.services.rate_limit import SlidingWindowRateLimiter

_BASE_URL = "https://api.unsplash.com"


@dataclass
class UnsplashClient:
    """Search Unsplash and download the top result.

    The free tier allows 50 requests per hour, tracked client-side by the
    injected limiter.
    """

    access_key: str | None
    http_client: httpx.AsyncClient
    rate_limiter: SlidingWindowRateLimiter
    base_url: str = _BASE_URL
    source: PhotoSource = field(default=PhotoSource.STOCK_A, init=False)

    @classmethod
    def create(
        cls,
        access_key: str | None,
        requests_per_window: int = 50,
        window_seconds: int = 3600,
    ) -> "UnsplashClient":
        """Create an Unsplash client with a managed httpx session."""
        return cls(
            access_key=access_key,
            http_client=httpx.AsyncClient(),
            rate_limiter=SlidingWindowRateLimiter(
                max_requests=requests_per_window, window_seconds=window_seconds
            ),
        )

    def is_enabled(self) -> bool:
        """Unsplash needs an access key."""
        return bool(self.access_key)

    async def fetch_image(self, query: PhotoQuery) -> ImageResult:
        """Search photos for the query text and download the first hit."""
        if not self.is_enabled():
            raise ProviderDisabled(self.source)
        if not query.text:
            raise NotFound(self.source, "Unsplash search needs a query")
        if not self.rate_limiter.allows():
            reset_at = self.rate_limiter.status().reset_at
            raise RateLimited(
                self.source,
                f"Unsplash rate limit exceeded. Resets at {reset_at.isoformat()}",
            )

        payload = await get_json(
            self.source,
            self.http_client,
            f"{self.base_url}/search/photos",
            params={"query": query.text, "per_page": 1},
            headers=self._auth_headers(),
        )
        self.rate_limiter.record()
        photo = first_dict(payload.get("results"))
        if photo is None:
            raise NotFound(self.source, f"No Unsplash photos found for: {query.text}")

        urls = as_dict(photo.get("urls"))
        raw_url = urls.get("raw")
        image_url = f"{raw_url}&w={query.width}" if raw_url else urls.get("regular")
        if not image_url:
            raise NotFound(self.source, "Unsplash result has no image URL")
        content, content_type = await get_image(
            self.source, self.http_client, str(image_url)
        )
        user = as_dict(photo.get("user"))
        return ImageResult(
            content=content,
            content_type=content_type,
            external_id=photo.get("id"),
            metadata={
                "user": user.get("name"),
                "user_url": as_dict(user.get("links")).get("html"),
                "download_location": as_dict(photo.get("links")).get(
                    "download_location"
                ),
            },
        )

    def get_attribution(self, image: ImageResult) -> Attribution:
        """Credit the photographer as Unsplash guidelines require."""
        user = image.metadata.get("user")
        return Attribution(
            text=f"Photo by {user}" if user else "Unsplash",
            url=str(image.metadata.get("user_url") or "https://unsplash.com"),
            license="Unsplash License",
        )

    def get_rate_limit_status(self) -> RateLimitStatus | None:
        """Return the client-side hourly quota."""
        return self.rate_limiter.status()

    async def report_use(self, image: ImageResult) -> None:
        """Trigger the download endpoint Unsplash requires when a photo is used."""
        download_location = image.metadata.get("download_location")
        if not download_location:
            return
        await get_json(
            self.source,
            self.http_client,
            str(download_location),
            headers=self._auth_headers(),
            timeout=10,
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    def _auth_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Client-ID {self.access_key}",
            "Accept-Version": "v1",
        }
