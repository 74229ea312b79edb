"""Tests for the backfill command."""

from place_media import main as main_module
from place_media.domain.photos import EntityType, PlaceRef


def test_main_backfills_default_entity_types(
    container, place_repository, uploader, monkeypatch, capsys
) -> None:
    place_repository.places.append(
        PlaceRef(
            entity_type=EntityType.ATTRACTION,
            entity_id="a-1",
            name="Louvre",
            country="France",
        )
    )
    monkeypatch.setattr(main_module, "build_container", lambda: container)

    exit_code = main_module.main([])

    captured = capsys.readouterr()
    assert exit_code == 0
    assert "attraction: succeeded=1 skipped=0 failed=0" in captured.out
    assert uploader.bucket_checks == 1


def test_main_accepts_explicit_entity_types(container, monkeypatch, capsys) -> None:
    monkeypatch.setattr(main_module, "build_container", lambda: container)

    main_module.main(["destination", "restaurant"])

    lines = capsys.readouterr().out.strip().splitlines()
    assert lines == [
        "destination: succeeded=0 skipped=0 failed=0",
        "restaurant: succeeded=0 skipped=0 failed=0",
    ]
