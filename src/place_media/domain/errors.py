"""Errors raised while resolving place photos."""

from place_media.domain.photos import EntityType, PhotoSource


class MediaError(Exception):
    """Base class for media resolution errors."""


class ProviderDisabled(MediaError):
    """Provider is missing credentials or its feature flag."""

    def __init__(self, source: PhotoSource) -> None:
        super().__init__(f"{source.value} provider is not enabled")
        self.source = source


class ProviderFetchFailed(MediaError):
    """A provider could not return an image."""

    reason = "failed"

    def __init__(self, source: PhotoSource, message: str) -> None:
        super().__init__(message)
        self.source = source


class NotFound(ProviderFetchFailed):
    """Provider has no matching image."""

    reason = "not_found"


class RateLimited(ProviderFetchFailed):
    """Provider quota is exhausted."""

    reason = "rate_limited"


class AuthError(ProviderFetchFailed):
    """Provider rejected the configured credentials."""

    reason = "auth_error"


class NetworkError(ProviderFetchFailed):
    """Transport failure or unexpected provider response."""

    reason = "network_error"


class UploadFailed(MediaError):
    """Fetched bytes could not be stored in the object store."""


class CacheWriteFailed(MediaError):
    """Photo record could not be written to the cache."""


class NoImageAvailable(MediaError):
    """Every enabled provider failed, or none are enabled."""

    def __init__(
        self, entity_type: EntityType, entity_id: str, entity_name: str
    ) -> None:
        super().__init__(f"No image source available for {entity_name}")
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.entity_name = entity_name
