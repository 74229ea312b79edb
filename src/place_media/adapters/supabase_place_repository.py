"""Supabase repository for places that need photos."""

from dataclasses import dataclass

from supabase import Client

from place_media.domain.photos import EntityType, PlaceRef
from place_media.services.backfill import PlaceRepository

_TABLES = {
    EntityType.DESTINATION: "destinations",
    EntityType.ATTRACTION: "attractions",
    EntityType.RESTAURANT: "restaurants",
    EntityType.ACCOMMODATION: "accommodations",
}


@dataclass
class SupabasePlaceRepository(PlaceRepository):
    """Read place rows from the travel tables."""

    client: Client

    def list_places(self, entity_type: EntityType) -> list[PlaceRef]:
        """Return every place of the given type."""
        response = self.client.table(_TABLES[entity_type]).select("*").execute()
        places: list[PlaceRef] = []
        for row in response.data or []:
            name = row.get("name")
            if not name:
                continue
            places.append(
                PlaceRef(
                    entity_type=entity_type,
                    entity_id=str(row["id"]),
                    name=str(name),
                    country=row.get("country"),
                    photo_reference=row.get("photo_reference"),
                )
            )
        return places
