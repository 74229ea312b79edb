"""Google Places photo adapter."""

import re
from dataclasses import dataclass, field

import httpx

from place_media.adapters.provider_http import (
    as_dict,
    first_dict,
    get_image,
    get_json,
)
from place_media.domain.errors import (
    AuthError,
    NotFound,
    ProviderDisabled,
    RateLimited,
)
from place_media.domain.photos import (
    Attribution,
    ImageResult,
    PhotoQuery,
    PhotoSource,
    RateLimitStatus,
)

_BASE_URL = "https://maps.googleapis.com/maps/api/place"
_HREF_PATTERN = re.compile(r'href="([^"]+)"')
_TEXT_PATTERN = re.compile(r">([^<]+)<")


@dataclass
class GooglePlacesPhotoClient:
    """Fetch place photos by photo reference, or by place text search."""

    api_key: str | None
    http_client: httpx.AsyncClient
    base_url: str = _BASE_URL
    source: PhotoSource = field(default=PhotoSource.PLACES, init=False)

    @classmethod
    def create(cls, api_key: str | None) -> "GooglePlacesPhotoClient":
        """Create a Places client with a managed httpx session."""
        return cls(api_key=api_key, http_client=httpx.AsyncClient())

    def is_enabled(self) -> bool:
        """Places needs a Maps API key."""
        return bool(self.api_key)

    async def fetch_image(self, query: PhotoQuery) -> ImageResult:
        """Download the referenced photo, searching for one if only text is given."""
        if not self.is_enabled():
            raise ProviderDisabled(self.source)
        reference = query.photo_reference
        html_attributions: list[str] = []
        if not reference and query.text:
            reference, html_attributions = await self._find_place_photo(query.text)
        if not reference:
            raise NotFound(
                self.source, f"No Places photo found for: {query.text or '<no query>'}"
            )

        content, content_type = await get_image(
            self.source,
            self.http_client,
            f"{self.base_url}/photo",
            params={
                "photo_reference": reference,
                "maxwidth": query.width,
                "key": self.api_key,
            },
        )
        return ImageResult(
            content=content,
            content_type=content_type,
            external_id=reference,
            metadata={"html_attributions": html_attributions},
        )

    def get_attribution(self, image: ImageResult) -> Attribution:
        """Use the first HTML attribution Google returned, if any."""
        text = "Google"
        url = None
        html_attributions = image.metadata.get("html_attributions") or []
        if isinstance(html_attributions, list) and html_attributions:
            first = str(html_attributions[0])
            text_match = _TEXT_PATTERN.search(first)
            url_match = _HREF_PATTERN.search(first)
            if text_match:
                text = text_match.group(1)
            if url_match:
                url = url_match.group(1)
        return Attribution(text=text, url=url, license="Google Maps Platform Terms")

    def get_rate_limit_status(self) -> RateLimitStatus | None:
        """Google enforces quota server-side only."""
        return None

    async def report_use(self, image: ImageResult) -> None:
        """Google has no usage notification."""

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _find_place_photo(self, text: str) -> tuple[str | None, list[str]]:
        payload = await get_json(
            self.source,
            self.http_client,
            f"{self.base_url}/findplacefromtext/json",
            params={
                "input": text,
                "inputtype": "textquery",
                "fields": "photos,place_id,name",
                "key": self.api_key,
            },
        )
        status = payload.get("status")
        if status == "REQUEST_DENIED":
            raise AuthError(self.source, f"Places search denied for: {text}")
        if status == "OVER_QUERY_LIMIT":
            raise RateLimited(self.source, f"Places quota exhausted searching: {text}")
        candidates = payload.get("candidates")
        if status != "OK" or not isinstance(candidates, list):
            return None, []
        for candidate in candidates:
            first = first_dict(as_dict(candidate).get("photos"))
            if first is None or not first.get("photo_reference"):
                continue
            html_attributions = first.get("html_attributions")
            return (
                str(first["photo_reference"]),
                html_attributions if isinstance(html_attributions, list) else [],
            )
        return None, []
