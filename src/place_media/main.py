"""Command-line photo backfill."""

import argparse
import asyncio
import sys

from place_media.app_logging import configure_logging
from place_media.config import parse_entity_types
from place_media.containers import AppContainer, build_container
from place_media.domain.photos import EntityType
from place_media.services.backfill import BackfillSummary


async def run_backfill(
    container: AppContainer, entity_types: list[EntityType]
) -> list[BackfillSummary]:
    """Backfill each entity type in turn and release resources afterwards."""
    try:
        await asyncio.to_thread(container.uploader.ensure_bucket)
        return [
            await container.backfill_service.populate(entity_type)
            for entity_type in entity_types
        ]
    finally:
        await container.close_resources()


def main(argv: list[str] | None = None) -> int:
    """Populate missing place photos."""
    parser = argparse.ArgumentParser(
        prog="place-media-backfill",
        description="Resolve and cache photos for places that have none.",
    )
    parser.add_argument(
        "entity_types",
        nargs="*",
        type=EntityType,
        help="Entity types to backfill (default: BACKFILL_ENTITY_TYPES).",
    )
    args = parser.parse_args(argv)
    container = build_container()
    configure_logging(container.settings.log_level)
    entity_types = args.entity_types or [
        EntityType(value)
        for value in parse_entity_types(container.settings.backfill_entity_types)
    ]
    summaries = asyncio.run(run_backfill(container, entity_types))
    for summary in summaries:
        print(
            f"{summary.entity_type.value}: succeeded={summary.succeeded} "
            f"skipped={summary.skipped} failed={summary.failed}"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
