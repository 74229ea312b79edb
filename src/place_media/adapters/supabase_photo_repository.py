"""Supabase-backed photo cache."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from place_media.domain.errors import CacheWriteFailed
from place_media.domain.photos import EntityType, PhotoRecord, PhotoSource
from place_media.services.media import PhotoCache

_TABLE = "location_photos"


@dataclass
class SupabasePhotoRepository(PhotoCache):
    """Supabase implementation of the photo cache.

    Rows are keyed by (entity_type, entity_id); the table needs a unique
    index on that pair for the upsert to replace instead of duplicate.
    """

    client: Client
    table_name: str = _TABLE

    def get_primary(self, entity_type: EntityType, entity_id: str) -> PhotoRecord | None:
        """Return the primary photo row for an entity."""
        response = (
            self.client.table(self.table_name)
            .select("*")
            .eq("entity_type", entity_type.value)
            .eq("entity_id", entity_id)
            .eq("is_primary", True)
            .order("inserted_at", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_record(response.data[0])

    def upsert(self, record: PhotoRecord) -> None:
        """Insert or replace the entity's photo row."""
        response = (
            self.client.table(self.table_name)
            .upsert(
                {
                    "entity_type": record.entity_type.value,
                    "entity_id": record.entity_id,
                    "source": record.source.value,
                    "external_id": record.external_id,
                    "source_ref": record.source_ref,
                    "url": record.cached_url,
                    "cached_url": record.cached_url,
                    "attribution": record.attribution,
                    "license": record.license,
                    "is_primary": record.is_primary,
                    "inserted_at": record.inserted_at.isoformat(),
                },
                on_conflict="entity_type,entity_id",
            )
            .execute()
        )
        if not response.data:
            raise CacheWriteFailed(
                f"Failed to cache photo for {record.entity_type.value}/{record.entity_id}"
            )


def _parse_record(row: dict[str, object]) -> PhotoRecord:
    """Parse a location photo row into a domain model."""
    inserted_raw = row.get("inserted_at")
    inserted_at = (
        datetime.fromisoformat(inserted_raw)
        if isinstance(inserted_raw, str) and inserted_raw
        else datetime.now(tz=UTC)
    )
    return PhotoRecord(
        entity_type=EntityType(str(row["entity_type"])),
        entity_id=str(row["entity_id"]),
        source=PhotoSource(str(row["source"])),
        external_id=str(row.get("external_id") or ""),
        source_ref=str(row.get("source_ref") or ""),
        cached_url=str(row.get("cached_url") or ""),
        attribution=str(row.get("attribution") or ""),
        license=row.get("license"),
        is_primary=bool(row.get("is_primary")),
        inserted_at=inserted_at,
    )
