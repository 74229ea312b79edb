"""Bulk population of place photos."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from place_media.domain.errors import NoImageAvailable
from place_media.domain.photos import EntityType, PlaceRef
from place_media.services.media import MediaOrchestrator

_logger = logging.getLogger(__name__)


class PlaceRepository(Protocol):
    """Read access to the places that may need photos."""

    def list_places(self, entity_type: EntityType) -> list[PlaceRef]:
        """Return every place of the given type."""


@dataclass(frozen=True)
class BackfillSummary:
    """Counts from a backfill run."""

    entity_type: EntityType
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0


@dataclass
class PhotoBackfillService:
    """Resolve photos for every place of a type that has none yet."""

    repository: PlaceRepository
    orchestrator: MediaOrchestrator

    async def populate(self, entity_type: EntityType) -> BackfillSummary:
        """Resolve missing photos one place at a time."""
        places = await asyncio.to_thread(self.repository.list_places, entity_type)
        _logger.info("Backfilling photos for %s %s rows", len(places), entity_type.value)
        succeeded = skipped = failed = 0
        for place in places:
            existing = await asyncio.to_thread(
                self.orchestrator.cache.get_primary, place.entity_type, place.entity_id
            )
            if existing is not None:
                skipped += 1
                continue
            try:
                result = await self.orchestrator.resolve(
                    entity_type=place.entity_type,
                    entity_id=place.entity_id,
                    entity_name=place.name,
                    country=place.country,
                    photo_reference=place.photo_reference,
                )
            except NoImageAvailable as exc:
                _logger.warning("Backfill failed for %s: %s", place.name, exc)
                failed += 1
                continue
            _logger.info("Photo cached from %s: %s", result.source.value, place.name)
            succeeded += 1
        return BackfillSummary(
            entity_type=entity_type,
            succeeded=succeeded,
            skipped=skipped,
            failed=failed,
        )
