"""Tests for container wiring."""

import asyncio

from place_media.adapters.pexels_client import PexelsClient
from place_media.adapters.unsplash_client import UnsplashClient
from place_media.containers import build_container


def test_build_container_wires_waterfall(settings) -> None:
    container = build_container(settings)
    orchestrator = container.media_orchestrator

    assert isinstance(orchestrator.stock_a, UnsplashClient)
    assert isinstance(orchestrator.stock_b, PexelsClient)
    assert orchestrator.commons.is_enabled() is False
    assert orchestrator.deduplicate_inflight is True
    assert container.backfill_service.orchestrator is orchestrator
    asyncio.run(container.close_resources())


def test_build_container_enables_configured_providers(settings) -> None:
    configured = settings.model_copy(
        update={
            "unsplash_access_key": "access",
            "enable_media_wikimedia": True,
            "provider_timeout_seconds": 5.0,
        }
    )
    container = build_container(configured)
    orchestrator = container.media_orchestrator

    assert orchestrator.stock_a.is_enabled() is True
    assert orchestrator.commons.is_enabled() is True
    assert orchestrator.places.is_enabled() is False
    assert orchestrator.provider_timeout_seconds == 5.0
    asyncio.run(container.close_resources())
