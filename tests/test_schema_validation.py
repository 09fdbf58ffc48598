from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path

import pytest

from stickervillage.engine.serialize import snapshot
from stickervillage.engine.types import AddResourceEffect
from stickervillage.engine.village import new_village
from stickervillage.paths import get_paths
from stickervillage.services.content import ContentError, ContentService, parse_buildings


def _content() -> ContentService:
    paths = get_paths()
    return ContentService(paths.data_dir, paths.schema_dir)


def _copy_data(tmp_path: Path) -> Path:
    data_dir = tmp_path / "data"
    shutil.copytree(get_paths().data_dir, data_dir)
    return data_dir


def test_content_schemas_validate() -> None:
    _content().validate_all()


def test_default_bundle() -> None:
    bundle = _content().load_bundle()
    assert bundle.config.level_id == "default"
    assert bundle.config.player_hand_size == 5
    assert bundle.cards.get("builder") is not None
    assert bundle.stickers.get("hammer_small").value_for("construction") == 1  # type: ignore[union-attr]
    assert bundle.buildings.get("town_hall").constructed_from_start  # type: ignore[union-attr]
    assert bundle.buildings.get("sawmill").limit is None  # type: ignore[union-attr]


def test_level_overrides_base_settings() -> None:
    bundle = _content().load_bundle("frontier")
    cfg = bundle.config
    assert cfg.player_hand_size == 4
    assert cfg.invasion_speed_per_turn == 2
    assert cfg.deck_limit == 20
    assert [s.unique_id for s in cfg.building_slots] == ["center", "square", "palisade"]

    v = new_village(bundle.cards, bundle.stickers, bundle.buildings, bundle.recruit_cards, cfg)
    assert v.board.building_in_slot("center") == "sawmill"
    assert v.board.building_in_slot("square") == "town_hall"
    assert v.hand.size() == 4


def test_unknown_level_raises() -> None:
    with pytest.raises(ContentError, match="Unknown level"):
        _content().load_bundle("atlantis")


def test_schema_violation_is_reported(tmp_path: Path) -> None:
    data_dir = _copy_data(tmp_path)
    stickers = json.loads((data_dir / "stickers.json").read_text(encoding="utf-8"))
    stickers[0]["cost"] = "cheap"
    (data_dir / "stickers.json").write_text(json.dumps(stickers), encoding="utf-8")

    content = ContentService(data_dir, data_dir / "schemas")
    with pytest.raises(ContentError, match="Schema validation failed"):
        content.load_stickers()


def test_broken_reference_is_reported(tmp_path: Path) -> None:
    data_dir = _copy_data(tmp_path)
    cards = json.loads((data_dir / "cards.json").read_text(encoding="utf-8"))
    cards[0]["starting_stickers"] = ["glitter"]
    (data_dir / "cards.json").write_text(json.dumps(cards), encoding="utf-8")

    content = ContentService(data_dir, data_dir / "schemas")
    with pytest.raises(ContentError, match="unknown sticker glitter"):
        content.load_bundle()


def test_missing_file_is_reported(tmp_path: Path) -> None:
    data_dir = _copy_data(tmp_path)
    (data_dir / "buildings.json").unlink()
    content = ContentService(data_dir, data_dir / "schemas")
    with pytest.raises(ContentError, match="Missing content file"):
        content.load_buildings()


def test_unknown_building_effect_is_skipped(caplog: pytest.LogCaptureFixture) -> None:
    raw = [
        {
            "id": "watchtower",
            "name": "Watchtower",
            "cost": {"construction": 2},
            "effects": [
                {"type": "delay_invasion", "amount": 2},
                {"type": "add_resource", "when": "on_day_start", "resource": "power", "amount": 1},
            ],
        }
    ]
    with caplog.at_level(logging.WARNING):
        catalog = parse_buildings(raw)
    tower = catalog.get("watchtower")
    assert tower is not None
    assert tower.effects == (AddResourceEffect(type="add_resource", when="on_day_start", resource="power", amount=1),)
    assert "delay_invasion" in caplog.text


def test_snapshot_includes_slot_locations() -> None:
    bundle = _content().load_bundle()
    v = new_village(bundle.cards, bundle.stickers, bundle.buildings, bundle.recruit_cards, bundle.config)
    slots = {s["unique_id"]: s for s in snapshot(v)["building_slots"]}  # type: ignore[attr-defined,index]
    assert slots["center"]["location"] == {"x": 480.0, "y": 300.0}
    assert slots["center"]["already_constructed"] == "town_hall"
