"""Wikimedia Commons image search adapter."""

import re
from dataclasses import dataclass, field

import httpx

from place_media.adapters.provider_http import (
    as_dict,
    first_dict,
    get_image,
    get_json,
)
from place_media.domain.errors import NetworkError, NotFound, ProviderDisabled
from place_media.domain.photos import (
    Attribution,
    ImageResult,
    PhotoQuery,
    PhotoSource,
    RateLimitStatus,
)

_API_URL = "https://commons.wikimedia.org/w/api.php"
_FILE_NAMESPACE = 6
_TAG_PATTERN = re.compile(r"<[^>]+>")


@dataclass
class WikimediaCommonsClient:
    """Search the Commons File namespace and download a scaled thumbnail."""

    enabled: bool
    http_client: httpx.AsyncClient
    api_url: str = _API_URL
    source: PhotoSource = field(default=PhotoSource.COMMONS, init=False)

    @classmethod
    def create(cls, enabled: bool, user_agent: str) -> "WikimediaCommonsClient":
        """Create a Commons client; Wikimedia asks for a descriptive User-Agent."""
        return cls(
            enabled=enabled,
            http_client=httpx.AsyncClient(headers={"User-Agent": user_agent}),
        )

    def is_enabled(self) -> bool:
        """Commons is free; it is gated by a feature flag only."""
        return self.enabled

    async def fetch_image(self, query: PhotoQuery) -> ImageResult:
        """Find the best matching file and download it."""
        if not self.is_enabled():
            raise ProviderDisabled(self.source)
        if not query.text:
            raise NotFound(self.source, "Commons search needs a query")

        search = await get_json(
            self.source,
            self.http_client,
            self.api_url,
            params={
                "action": "query",
                "list": "search",
                "srsearch": query.text,
                "srnamespace": _FILE_NAMESPACE,
                "srlimit": 1,
                "format": "json",
            },
        )
        hit = first_dict(as_dict(search.get("query")).get("search"))
        if hit is None:
            raise NotFound(
                self.source, f"No images found on Wikimedia Commons for: {query.text}"
            )
        if not hit.get("title"):
            raise NetworkError(self.source, "Commons search hit has no title")
        title = str(hit["title"])

        info = await get_json(
            self.source,
            self.http_client,
            self.api_url,
            params={
                "action": "query",
                "titles": title,
                "prop": "imageinfo",
                "iiprop": "url|extmetadata",
                "iiurlwidth": query.width,
                "format": "json",
            },
        )
        pages = as_dict(as_dict(info.get("query")).get("pages"))
        image_info = None
        for page in pages.values():
            image_info = first_dict(as_dict(page).get("imageinfo"))
            if image_info is not None:
                break
        if image_info is None:
            raise NotFound(self.source, f"File info not found on Commons: {title}")

        image_url = image_info.get("thumburl") or image_info.get("url")
        if not image_url:
            raise NotFound(self.source, f"Commons file has no URL: {title}")
        content, content_type = await get_image(
            self.source, self.http_client, str(image_url)
        )
        extmetadata = as_dict(image_info.get("extmetadata"))
        return ImageResult(
            content=content,
            content_type=content_type,
            external_id=title,
            metadata={
                "file": title,
                "description_url": image_info.get("descriptionurl"),
                "artist": _metadata_value(extmetadata, "Artist"),
                "license": _metadata_value(extmetadata, "LicenseShortName"),
            },
        )

    def get_attribution(self, image: ImageResult) -> Attribution:
        """Credit the author when Commons names one, else the file itself."""
        file_title = image.metadata.get("file")
        artist = image.metadata.get("artist")
        if artist:
            text = f"{artist} via Wikimedia Commons"
        else:
            text = str(file_title or "Wikimedia Commons")
        url = image.metadata.get("description_url")
        if not url and file_title:
            url = f"https://commons.wikimedia.org/wiki/{str(file_title).replace(' ', '_')}"
        return Attribution(
            text=text,
            url=str(url or "https://commons.wikimedia.org"),
            license=str(image.metadata.get("license") or "Various CC licenses"),
        )

    def get_rate_limit_status(self) -> RateLimitStatus | None:
        """Commons publishes no client quota."""
        return None

    async def report_use(self, image: ImageResult) -> None:
        """Commons has no usage notification."""

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _metadata_value(extmetadata: dict[str, object], key: str) -> str | None:
    """Return a plain-text extmetadata value."""
    entry = extmetadata.get(key)
    if not isinstance(entry, dict):
        return None
    value = entry.get("value")
    if not value:
        return None
    cleaned = _TAG_PATTERN.sub("", str(value)).strip()
    return cleaned or None
