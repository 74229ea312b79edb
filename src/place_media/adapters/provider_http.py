"""Shared HTTP helpers for photo provider adapters."""

import httpx

from place_media.domain.errors import AuthError, NetworkError, NotFound, RateLimited
from place_media.domain.photos import PhotoSource

_HTTP_NOT_FOUND = 404
_HTTP_TOO_MANY_REQUESTS = 429
_AUTH_STATUSES = {401, 403}


def raise_for_provider_status(source: PhotoSource, response: httpx.Response) -> None:
    """Raise the matching ProviderFetchFailed for a non-2xx response."""
    if response.is_success:
        return
    status_code = response.status_code
    message = f"{source.value} API error: {status_code}"
    if status_code == _HTTP_TOO_MANY_REQUESTS:
        raise RateLimited(source, message)
    if status_code in _AUTH_STATUSES:
        # Unsplash reports an exhausted hourly quota as 403.
        if response.headers.get("x-ratelimit-remaining") == "0":
            raise RateLimited(source, message)
        raise AuthError(source, message)
    if status_code == _HTTP_NOT_FOUND:
        raise NotFound(source, message)
    raise NetworkError(source, message)


async def get_json(
    source: PhotoSource,
    http_client: httpx.AsyncClient,
    url: str,
    *,
    params: dict[str, object] | None = None,
    headers: dict[str, str] | None = None,
    timeout: float = 15,
) -> dict[str, object]:
    """GET a provider endpoint and return its JSON body."""
    response = await _send(source, http_client, url, params, headers, timeout)
    try:
        payload = response.json()
    except ValueError as exc:
        raise NetworkError(source, f"{source.value} sent invalid JSON") from exc
    if not isinstance(payload, dict):
        raise NetworkError(source, f"{source.value} sent an unexpected payload")
    return payload


async def get_image(
    source: PhotoSource,
    http_client: httpx.AsyncClient,
    url: str,
    *,
    params: dict[str, object] | None = None,
    headers: dict[str, str] | None = None,
    timeout: float = 20,
) -> tuple[bytes, str]:
    """Download image bytes and return them with their content type."""
    response = await _send(source, http_client, url, params, headers, timeout)
    if not response.content:
        raise NotFound(source, f"{source.value} returned an empty image")
    return response.content, content_type_of(response)


def content_type_of(response: httpx.Response) -> str:
    """Return the response content type without parameters."""
    raw = response.headers.get("content-type") or "image/jpeg"
    return raw.split(";", 1)[0].strip() or "image/jpeg"


async def _send(  # noqa: PLR0913
    source: PhotoSource,
    http_client: httpx.AsyncClient,
    url: str,
    params: dict[str, object] | None,
    headers: dict[str, str] | None,
    timeout: float,
) -> httpx.Response:
    try:
        response = await http_client.get(
            url, params=params, headers=headers, timeout=timeout, follow_redirects=True
        )
    except (httpx.RequestError, httpx.InvalidURL) as exc:
        raise NetworkError(source, f"{source.value} request failed: {exc}") from exc
    raise_for_provider_status(source, response)
    return response


def as_dict(value: object) -> dict[str, object]:
    """Return ``value`` if it is a JSON object, else an empty one."""
    return value if isinstance(value, dict) else {}


def first_dict(value: object) -> dict[str, object] | None:
    """Return the first element of a JSON array if it is an object."""
    if isinstance(value, list) and value and isinstance(value[0], dict):
        return value[0]
    return None
