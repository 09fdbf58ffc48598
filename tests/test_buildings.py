from __future__ import annotations

import pytest

from stickervillage.engine.buildings import BuildingMenu, BuildingSlot, BuildingSlotBoard
from stickervillage.engine.cards import Card
from stickervillage.engine.deck import CardDeck
from stickervillage.engine.effects import DailyGrants, EffectResolver
from stickervillage.engine.errors import (
    ReentrantConstructionError,
    UnknownBuildingError,
    UnknownSlotError,
)
from stickervillage.engine.events import BuildingConstructed, EventChannel, MenuStateChanged
from stickervillage.engine.ledger import ResourceLedger
from stickervillage.engine.recruitment import RecruitmentPool
from stickervillage.engine.types import (
    AddResourceEffect,
    BuildingCatalog,
    BuildingCost,
    BuildingDefinition,
    IncreaseDeckLimitEffect,
    MakeRecruitableEffect,
)

CATALOG = BuildingCatalog(
    buildings={
        "sawmill": BuildingDefinition(
            id="sawmill",
            name="Sawmill",
            cost=BuildingCost(construction=3),
            effects=(
                AddResourceEffect(type="add_resource", when="on_day_start", resource="construction", amount=2),
            ),
        ),
        "agency": BuildingDefinition(
            id="agency",
            name="Agency",
            cost=BuildingCost(construction=2),
            limit=1,
            effects=(MakeRecruitableEffect(type="make_recruitable", recruits=("builder", "tinkerer")),),
        ),
        "warehouse": BuildingDefinition(
            id="warehouse",
            name="Warehouse",
            cost=BuildingCost(construction=1),
            effects=(IncreaseDeckLimitEffect(type="increase_deck_limit", amount=5),),
        ),
        "hall": BuildingDefinition(
            id="hall",
            name="Hall",
            cost=BuildingCost(),
            limit=1,
            constructed_from_start=True,
            effects=(AddResourceEffect(type="add_resource", when="on_day_start", resource="power", amount=1),),
        ),
    }
)


class _Rig:
    def __init__(self, slots: list[BuildingSlot]) -> None:
        self.events = EventChannel()
        self.pool = RecruitmentPool()
        self.grants = DailyGrants()
        self.deck: CardDeck[Card] = CardDeck(deck_limit=10)
        self.board = BuildingSlotBoard(
            CATALOG,
            slots,
            EffectResolver(self.pool, self.grants, self.deck),
            self.events,
        )


def _slots(*ids: str) -> list[BuildingSlot]:
    everything = ["sawmill", "agency", "warehouse"]
    return [BuildingSlot(unique_id=i, available_for_construction=list(everything)) for i in ids]


def test_limited_building_cannot_be_built_twice() -> None:
    rig = _Rig(_slots("s1", "s2"))
    assert rig.board.construct_building("agency", "s1") is True
    assert rig.board.can_construct_in("agency", "s2") is False
    assert rig.board.construct_building("agency", "s2") is False

    built = rig.events.history(BuildingConstructed)
    assert [(e.building_id, e.slot_id) for e in built] == [("agency", "s1")]
    assert rig.board.building_in_slot("s2") is None
    assert rig.board.constructed_count("agency") == 1


def test_effects_apply_before_construction_is_announced() -> None:
    rig = _Rig(_slots("s1"))
    seen: list[bool] = []
    rig.events.subscribe(BuildingConstructed, lambda e: seen.append(rig.pool.is_recruitable("tinkerer")))
    rig.board.construct_building("agency", "s1")
    assert seen == [True]
    assert rig.pool.list() == ["builder", "tinkerer"]


def test_sawmill_registers_daily_grant() -> None:
    rig = _Rig(_slots("s1", "s2"))
    rig.board.construct_building("sawmill", "s1")
    rig.board.construct_building("sawmill", "s2")
    assert rig.grants.totals() == {"construction": 4}

    ledger = ResourceLedger(rig.events)
    rig.grants.apply(ledger)
    assert ledger.construction == 4


def test_warehouse_raises_deck_limit() -> None:
    rig = _Rig(_slots("s1"))
    rig.board.construct_building("warehouse", "s1")
    assert rig.deck.deck_limit == 15


def test_unknown_slot_and_building_raise() -> None:
    rig = _Rig(_slots("s1"))
    with pytest.raises(UnknownSlotError):
        rig.board.construct_building("sawmill", "nowhere")
    with pytest.raises(UnknownBuildingError):
        rig.board.construct_building("castle", "s1")
    assert rig.board.constructed_buildings() == []


def test_building_is_only_allowed_in_listed_slots() -> None:
    rig = _Rig([BuildingSlot(unique_id="river", available_for_construction=["sawmill"])])
    assert rig.board.can_construct_in("warehouse", "river") is False
    assert [s.unique_id for s in rig.board.available_slots_for("sawmill")] == ["river"]
    rig.board.construct_building("sawmill", "river")
    assert rig.board.can_construct_in("sawmill", "river") is False
    assert rig.board.available_slots_for("sawmill") == []


def test_constructing_from_a_handler_is_rejected() -> None:
    rig = _Rig(_slots("s1", "s2", "s3"))
    unsubscribe = rig.events.subscribe(
        BuildingConstructed,
        lambda e: rig.board.construct_building("sawmill", "s2"),
    )
    with pytest.raises(ReentrantConstructionError):
        rig.board.construct_building("warehouse", "s1")
    unsubscribe()

    # The guard is released once the outer construction unwinds.
    assert rig.board.construct_building("sawmill", "s3") is True
    assert rig.board.building_in_slot("s2") is None


def test_initial_constructions() -> None:
    slots = [
        BuildingSlot(unique_id="center", already_constructed="sawmill", available_for_construction=["sawmill"]),
        BuildingSlot(unique_id="square", available_for_construction=["hall"]),
    ]
    rig = _Rig(slots)
    assert rig.board.get_slot("center").already_constructed is None

    built = rig.board.construct_initial()
    assert built == ["sawmill", "hall"]
    assert rig.board.building_in_slot("center") == "sawmill"
    assert rig.board.building_in_slot("square") == "hall"
    assert rig.grants.totals() == {"construction": 2, "power": 1}
    assert rig.board.construct_initial() == []


def test_start_building_without_a_slot_is_unslotted() -> None:
    rig = _Rig(_slots("s1"))
    assert rig.board.construct_initial() == ["hall"]
    assert rig.board.is_constructed("hall")
    assert rig.board.building_in_slot("s1") is None
    assert rig.events.history(BuildingConstructed)[0].slot_id is None


def test_menu_state_events() -> None:
    events = EventChannel()
    menu = BuildingMenu(events)
    menu.open("s1")
    menu.open("s2")
    assert menu.slot_id == "s2"
    menu.close()
    menu.close()
    assert [e.open for e in events.history(MenuStateChanged)] == [True, False]
