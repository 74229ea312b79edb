"""Supabase Storage uploader for resolved photos."""

import logging
from dataclasses import dataclass
from uuid import uuid4

import httpx
from supabase import Client, StorageException

from place_media.domain.errors import UploadFailed
from place_media.domain.photos import EntityType, PhotoSource
from place_media.services.media import BlobUploader

_logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
    "image/svg+xml": "svg",
}


@dataclass
class SupabaseStorageUploader(BlobUploader):
    """Store photo bytes in a public Supabase Storage bucket."""

    client: Client
    bucket: str = "location-photos"

    def ensure_bucket(self) -> None:
        """Create the public bucket unless it already exists."""
        existing = {bucket.name for bucket in self.client.storage.list_buckets()}
        if self.bucket in existing:
            return
        try:
            self.client.storage.create_bucket(self.bucket, options={"public": True})
        except StorageException as exc:
            if "already exists" not in str(exc).lower():
                raise
            return
        _logger.info("Created storage bucket %s", self.bucket)

    def upload(
        self,
        content: bytes,
        content_type: str,
        source: PhotoSource,
        entity_type: EntityType,
        entity_id: str,
    ) -> str:
        """Upload bytes under a fresh key and return their public URL."""
        key = build_object_key(content_type, source, entity_type, entity_id)
        storage = self.client.storage.from_(self.bucket)
        try:
            storage.upload(
                key,
                content,
                file_options={"content-type": content_type, "upsert": "false"},
            )
            return storage.get_public_url(key)
        except (StorageException, httpx.HTTPError) as exc:
            raise UploadFailed(f"Failed to upload {key}: {exc}") from exc


def build_object_key(
    content_type: str, source: PhotoSource, entity_type: EntityType, entity_id: str
) -> str:
    """Return ``<entity_type>/<entity_id>/<source>-<random>.<ext>``."""
    return (
        f"{entity_type.value}/{entity_id}/{source.value}-{uuid4().hex}"
        f".{_extension_for(content_type)}"
    )


def _extension_for(content_type: str) -> str:
    """Map a MIME type to a file extension, defaulting to jpg."""
    normalized = content_type.split(";", 1)[0].strip().lower()
    if normalized in _EXTENSIONS:
        return _EXTENSIONS[normalized]
    subtype = normalized.split("/", 1)[-1]
    return subtype if subtype.isalnum() else "jpg"
