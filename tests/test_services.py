from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from stickervillage.cli import main
from stickervillage.engine.village import VillageConfig, new_village
from stickervillage.engine.types import BuildingCatalog, CardCatalog, RecruitCardCatalog, StickerCatalog
from stickervillage.services.storage import JsonFileStore, MemoryStore
from stickervillage.services.telemetry import TelemetryService


# -------- Storage --------


def test_json_store_round_trip(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path / "save")
    assert store.load("best_day", 0) == 0
    assert not store.exists("best_day")

    store.save("best_day", 7)
    store.save("settings", {"volume": 0.5, "levels": ["meadow"]})
    assert store.exists("best_day")
    assert store.load("best_day") == 7
    assert store.load("settings") == {"volume": 0.5, "levels": ["meadow"]}
    assert (tmp_path / "save" / "sticker_village_best_day.json").exists()

    store.remove("best_day")
    store.remove("best_day")
    assert not store.exists("best_day")

    store.clear_all()
    assert not store.exists("settings")


def test_json_store_corrupt_entry_falls_back(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    store = JsonFileStore(tmp_path)
    (tmp_path / "sticker_village_snapshot.json").write_text("{not json", encoding="utf-8")
    with caplog.at_level(logging.ERROR):
        assert store.load("snapshot", {"empty": True}) == {"empty": True}
    assert "failed to load" in caplog.text


def test_memory_store_does_not_share_state() -> None:
    store = MemoryStore()
    value = {"cards": ["villager"]}
    store.save("deck", value)
    value["cards"].append("builder")

    loaded = store.load("deck")
    assert loaded == {"cards": ["villager"]}
    store.clear_all()
    assert store.load("deck", "gone") == "gone"


# -------- Telemetry --------


def test_telemetry_tracks_game_start(tmp_path: Path) -> None:
    telemetry = TelemetryService(tmp_path / "telemetry.jsonl")
    new_village(
        CardCatalog(cards={}),
        StickerCatalog(stickers={}),
        BuildingCatalog(buildings={}),
        RecruitCardCatalog(recruit_cards={}),
        VillageConfig(level_id="meadow"),
        tracker=telemetry,
    )
    records = telemetry.read_all()
    assert [r["type"] for r in records] == ["game_start"]
    assert records[0]["payload"] == {"event_category": "game_flow", "level_id": "meadow"}


# -------- CLI --------


def test_cli_validate() -> None:
    assert main(["validate"]) == 0


def test_cli_simulate_writes_userdata(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--userdata", str(tmp_path), "simulate", "--days", "3", "--seed", "1"]) == 0

    out = capsys.readouterr().out
    assert "day   1" in out
    snap = json.loads((tmp_path / "sticker_village_snapshot_default.json").read_text(encoding="utf-8"))
    assert snap["day"] == 4
    assert json.loads((tmp_path / "sticker_village_best_day_default.json").read_text(encoding="utf-8")) == 4
    types = [json.loads(line)["type"] for line in (tmp_path / "telemetry.jsonl").read_text(encoding="utf-8").splitlines()]
    assert types[0] == "game_start"
    assert "deck_shuffled" in types


def test_cli_simulate_unknown_level(tmp_path: Path) -> None:
    assert main(["--userdata", str(tmp_path), "simulate", "--level", "atlantis"]) == 1
