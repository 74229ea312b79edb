"""Photo resolution across external providers with a durable cache."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol
from uuid import uuid4

from place_media.domain.errors import (
    MediaError,
    NetworkError,
    NoImageAvailable,
    ProviderFetchFailed,
    UploadFailed,
)
from place_media.domain.photos import (
    Attribution,
    EntityType,
    ImageResult,
    PhotoQuery,
    PhotoRecord,
    PhotoSource,
    RateLimitStatus,
    ResolvedPhoto,
)

_logger = logging.getLogger(__name__)


class PhotoProvider(Protocol):
    """Uniform capability implemented by every photo provider adapter."""

    source: PhotoSource

    def is_enabled(self) -> bool:
        """Return True if credentials or feature flags allow network calls."""

    async def fetch_image(self, query: PhotoQuery) -> ImageResult:
        """Find and download an image, raising ProviderFetchFailed on failure."""

    def get_attribution(self, image: ImageResult) -> Attribution:
        """Derive display credit from a fetched image without I/O."""

    def get_rate_limit_status(self) -> RateLimitStatus | None:
        """Return client-side quota state, if the provider tracks one."""

    async def report_use(self, image: ImageResult) -> None:
        """Notify the provider that a fetched image is being displayed."""


class PhotoCache(Protocol):
    """Persistence interface for resolved photo records."""

    def get_primary(self, entity_type: EntityType, entity_id: str) -> PhotoRecord | None:
        """Return the primary photo for an entity, if present."""

    def upsert(self, record: PhotoRecord) -> None:
        """Insert or replace the record for its (entity_type, entity_id)."""


class BlobUploader(Protocol):
    """Durable object storage for image bytes."""

    def ensure_bucket(self) -> None:
        """Create the target bucket if it does not exist."""

    def upload(
        self,
        content: bytes,
        content_type: str,
        source: PhotoSource,
        entity_type: EntityType,
        entity_id: str,
    ) -> str:
        """Store image bytes under a fresh key and return the public URL."""


@dataclass(frozen=True)
class ResolveRequest:
    """Inputs of a single resolution."""

    entity_type: EntityType
    entity_id: str
    entity_name: str
    country: str | None = None
    photo_reference: str | None = None

    @property
    def search_query(self) -> str:
        """Entity name disambiguated by country when known."""
        if self.country:
            return f"{self.entity_name} {self.country}"
        return self.entity_name


@dataclass(frozen=True)
class WaterfallStep:
    """One provider call in the resolution order."""

    provider: PhotoProvider
    query: PhotoQuery
    source_ref: str


@dataclass(frozen=True)
class ProviderAttempt:
    """Outcome of one waterfall step: a photo or the error that stopped it."""

    source: PhotoSource
    photo: ResolvedPhoto | None = None
    error: MediaError | None = None


@dataclass
class MediaOrchestrator:
    """Resolve a representative photo for a place.

    Providers are tried one at a time in a fixed order (Places, Unsplash,
    Wikimedia Commons, Pexels) and the first success is uploaded to object
    storage and cached as the entity's primary photo.
    """

    cache: PhotoCache
    uploader: BlobUploader
    places: PhotoProvider
    stock_a: PhotoProvider
    commons: PhotoProvider
    stock_b: PhotoProvider
    image_width: int = 1920
    provider_timeout_seconds: float | None = 15.0
    resolve_deadline_seconds: float | None = 45.0
    deduplicate_inflight: bool = True
    _inflight: dict[tuple[EntityType, str], "asyncio.Task[ResolvedPhoto]"] = field(
        default_factory=dict, init=False, repr=False
    )

    @property
    def providers(self) -> list[PhotoProvider]:
        """Providers in waterfall order."""
        return [self.places, self.stock_a, self.commons, self.stock_b]

    async def resolve(  # noqa: PLR0913
        self,
        entity_type: EntityType,
        entity_id: str,
        entity_name: str,
        country: str | None = None,
        photo_reference: str | None = None,
        force_refresh: bool = False,
    ) -> ResolvedPhoto:
        """Return a cached photo or run the provider waterfall."""
        if not force_refresh:
            cached = await asyncio.to_thread(
                self.cache.get_primary, entity_type, entity_id
            )
            if cached is not None and cached.cached_url:
                return ResolvedPhoto(
                    url=cached.cached_url,
                    source=cached.source,
                    attribution=cached.attribution or None,
                    cached=True,
                )

        request = ResolveRequest(
            entity_type=entity_type,
            entity_id=entity_id,
            entity_name=entity_name,
            country=country,
            photo_reference=photo_reference,
        )
        if force_refresh or not self.deduplicate_inflight:
            return await self._run_waterfall(request)
        return await self._join_inflight(request)

    def rate_limit_status(self) -> dict[str, RateLimitStatus]:
        """Return quota state for providers that track one."""
        statuses: dict[str, RateLimitStatus] = {}
        for provider in self.providers:
            status = provider.get_rate_limit_status()
            if status is not None:
                statuses[provider.source.value] = status
        return statuses

    def plan(self, request: ResolveRequest) -> list[WaterfallStep]:
        """Build the ordered list of enabled provider steps for a request."""
        steps: list[WaterfallStep] = []
        if request.photo_reference:
            steps.append(
                WaterfallStep(
                    provider=self.places,
                    query=PhotoQuery(
                        photo_reference=request.photo_reference,
                        width=self.image_width,
                    ),
                    source_ref=request.photo_reference,
                )
            )
        search_query = request.search_query
        for provider, text in (
            (self.stock_a, search_query),
            (self.commons, search_query),
            (self.stock_b, request.entity_name),
        ):
            steps.append(
                WaterfallStep(
                    provider=provider,
                    query=PhotoQuery(text=text, width=self.image_width),
                    source_ref=text,
                )
            )
        return [step for step in steps if step.provider.is_enabled()]

    async def _join_inflight(self, request: ResolveRequest) -> ResolvedPhoto:
        key = (request.entity_type, request.entity_id)
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.create_task(self._run_waterfall(request))
            self._inflight[key] = task

            def _forget(done: "asyncio.Task[ResolvedPhoto]") -> None:
                if self._inflight.get(key) is done:
                    del self._inflight[key]
                # Retrieve the result even when every waiter was cancelled.
                if not done.cancelled():
                    done.exception()

            task.add_done_callback(_forget)
        else:
            _logger.info(
                "Joining in-flight photo resolution for %s/%s",
                request.entity_type.value,
                request.entity_id,
            )
        return await asyncio.shield(task)

    async def _run_waterfall(self, request: ResolveRequest) -> ResolvedPhoto:
        loop = asyncio.get_running_loop()
        deadline = (
            loop.time() + self.resolve_deadline_seconds
            if self.resolve_deadline_seconds is not None
            else None
        )
        for step in self.plan(request):
            if deadline is not None and loop.time() >= deadline:
                _logger.warning(
                    "Photo resolution deadline reached for %s/%s before %s",
                    request.entity_type.value,
                    request.entity_id,
                    step.provider.source.value,
                )
                break
            attempt = await self._attempt(step, request, deadline)
            if attempt.photo is not None:
                return attempt.photo
        raise NoImageAvailable(
            request.entity_type, request.entity_id, request.entity_name
        )

    async def _attempt(
        self, step: WaterfallStep, request: ResolveRequest, deadline: float | None
    ) -> ProviderAttempt:
        provider = step.provider
        source = provider.source
        try:
            async with asyncio.timeout(self._fetch_timeout(deadline)):
                image = await provider.fetch_image(step.query)
        except TimeoutError:
            error = NetworkError(source, f"{source.value} timed out")
            self._log_failure(request, error)
            return ProviderAttempt(source=source, error=error)
        except ProviderFetchFailed as exc:
            self._log_failure(request, exc)
            return ProviderAttempt(source=source, error=exc)
        except Exception as exc:
            _logger.exception(
                "Photo provider %s raised unexpectedly for %s/%s",
                source.value,
                request.entity_type.value,
                request.entity_id,
            )
            error = NetworkError(source, f"{source.value} failed: {exc!r}")
            return ProviderAttempt(source=source, error=error)

        try:
            cached_url = await asyncio.to_thread(
                self.uploader.upload,
                image.content,
                image.content_type,
                source,
                request.entity_type,
                request.entity_id,
            )
        except UploadFailed as exc:
            _logger.warning(
                "Upload of %s photo for %s/%s failed: %s",
                source.value,
                request.entity_type.value,
                request.entity_id,
                exc,
            )
            return ProviderAttempt(source=source, error=exc)

        attribution = provider.get_attribution(image)
        await self._report_use(provider, image)
        if source is PhotoSource.PLACES:
            external_id = step.source_ref
        else:
            external_id = image.external_id or uuid4().hex
        await self._write_cache(
            PhotoRecord(
                entity_type=request.entity_type,
                entity_id=request.entity_id,
                source=source,
                external_id=external_id,
                source_ref=step.source_ref,
                cached_url=cached_url,
                attribution=attribution.text,
                license=attribution.license,
                is_primary=True,
            )
        )
        _logger.info(
            "Resolved %s/%s photo from %s",
            request.entity_type.value,
            request.entity_id,
            source.value,
        )
        return ProviderAttempt(
            source=source,
            photo=ResolvedPhoto(
                url=cached_url,
                source=source,
                attribution=attribution.text,
                cached=False,
            ),
        )

    def _fetch_timeout(self, deadline: float | None) -> float | None:
        timeouts: list[float] = []
        if self.provider_timeout_seconds is not None:
            timeouts.append(self.provider_timeout_seconds)
        if deadline is not None:
            timeouts.append(max(0.0, deadline - asyncio.get_running_loop().time()))
        return min(timeouts) if timeouts else None

    async def _report_use(self, provider: PhotoProvider, image: ImageResult) -> None:
        try:
            await provider.report_use(image)
        except ProviderFetchFailed as exc:
            _logger.warning(
                "Failed to report %s photo use (%s): %s",
                provider.source.value,
                exc.reason,
                exc,
            )

    async def _write_cache(self, record: PhotoRecord) -> None:
        try:
            await asyncio.to_thread(self.cache.upsert, record)
        except Exception:
            _logger.exception(
                "Failed to cache %s photo for %s/%s",
                record.source.value,
                record.entity_type.value,
                record.entity_id,
            )

    @staticmethod
    def _log_failure(request: ResolveRequest, error: ProviderFetchFailed) -> None:
        _logger.warning(
            "Photo provider %s failed for %s/%s (%s): %s",
            error.source.value,
            request.entity_type.value,
            request.entity_id,
            error.reason,
            error,
        )
