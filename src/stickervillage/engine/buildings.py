from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from .effects import EffectResolver
from .errors import ReentrantConstructionError, UnknownBuildingError, UnknownSlotError
from .events import BuildingConstructed, EventChannel, MenuStateChanged
from .types import BuildingCatalog, BuildingDefinition

logger = logging.getLogger(__name__)


@dataclass
class BuildingSlot:
    unique_id: str
    already_constructed: str | None = None
    available_for_construction: list[str] = field(default_factory=list)

    @staticmethod
    def from_dict(d: Mapping[str, object]) -> "BuildingSlot":
        uid = d.get("unique_id")
        if not isinstance(uid, str):
            raise UnknownSlotError("Building slot without unique_id")
        built = d.get("already_constructed")
        available = d.get("available_for_construction", [])
        return BuildingSlot(
            unique_id=uid,
            already_constructed=built if isinstance(built, str) else None,
            available_for_construction=[str(b) for b in available] if isinstance(available, list) else [],
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "unique_id": self.unique_id,
            "already_constructed": self.already_constructed,
            "available_for_construction": list(self.available_for_construction),
        }


@dataclass(frozen=True)
class BuildingSlotLocation:
    x: float
    y: float
    slot_unique_id: str

    @staticmethod
    def from_dict(d: Mapping[str, object]) -> "BuildingSlotLocation":
        x = d.get("x", 0)
        y = d.get("y", 0)
        return BuildingSlotLocation(
            x=float(x) if isinstance(x, (int, float)) else 0.0,
            y=float(y) if isinstance(y, (int, float)) else 0.0,
            slot_unique_id=str(d.get("slot_unique_id", "")),
        )


class BuildingSlotBoard:
    """Placement slots of the village and the buildings standing in them.

    ``construct_building`` does not check whether the slot is already
    occupied; callers consult ``can_construct_in`` (or the slot state) first.
    """

    def __init__(
        self,
        catalog: BuildingCatalog,
        slots: Iterable[BuildingSlot],
        resolver: EffectResolver,
        events: EventChannel,
        locations: Iterable[BuildingSlotLocation] = (),
    ) -> None:
        self.catalog = catalog
        self._resolver = resolver
        self._events = events
        self._slots: dict[str, BuildingSlot] = {}
        self._locations = list(locations)
        # Slots listed as already constructed in level data are built later by
        # ``construct_initial``, so they start empty here.
        self._pending_initial: list[tuple[str, str]] = []
        for slot in slots:
            if slot.already_constructed:
                self._pending_initial.append((slot.already_constructed, slot.unique_id))
            self._slots[slot.unique_id] = BuildingSlot(
                unique_id=slot.unique_id,
                already_constructed=None,
                available_for_construction=list(slot.available_for_construction),
            )
        self._slot_to_building: dict[str, str] = {}
        self._counts: dict[str, int] = {}
        self._unslotted: list[str] = []
        self._resolving = False

    # -------- Queries --------
    @property
    def is_resolving(self) -> bool:
        return self._resolving

    def slots(self) -> list[BuildingSlot]:
        return list(self._slots.values())

    def locations(self) -> list[BuildingSlotLocation]:
        return list(self._locations)

    def get_slot(self, slot_id: str) -> BuildingSlot:
        slot = self._slots.get(slot_id)
        if slot is None:
            raise UnknownSlotError(f"Unknown building slot: {slot_id}")
        return slot

    def location_of(self, slot_id: str) -> BuildingSlotLocation | None:
        for loc in self._locations:
            if loc.slot_unique_id == slot_id:
                return loc
        return None

    def building_in_slot(self, slot_id: str) -> str | None:
        return self._slot_to_building.get(slot_id)

    def definition(self, building_id: str) -> BuildingDefinition:
        definition = self.catalog.get(building_id)
        if definition is None:
            raise UnknownBuildingError(f"Unknown building: {building_id}")
        return definition

    def constructed_count(self, building_id: str) -> int:
        return self._counts.get(building_id, 0)

    def is_constructed(self, building_id: str) -> bool:
        return self.constructed_count(building_id) > 0

    def constructed_buildings(self) -> list[str]:
        return list(self._slot_to_building.values()) + list(self._unslotted)

    def limit_reached(self, building_id: str) -> bool:
        limit = self.definition(building_id).limit
        return limit is not None and self.constructed_count(building_id) >= limit

    def can_construct_in(self, building_id: str, slot_id: str) -> bool:
        slot = self.get_slot(slot_id)
        if slot.already_constructed is not None:
            return False
        if building_id not in slot.available_for_construction:
            return False
        return not self.limit_reached(building_id)

    def available_slots_for(self, building_id: str) -> list[BuildingSlot]:
        return [
            s
            for s in self._slots.values()
            if s.already_constructed is None and building_id in s.available_for_construction
        ]

    # -------- Construction --------
    def construct_building(self, building_id: str, slot_id: str | None) -> bool:
        if self._resolving:
            raise ReentrantConstructionError(
                f"Cannot construct {building_id} while another construction is resolving"
            )
        definition = self.definition(building_id)
        if self.limit_reached(building_id):
            return False

        slot = self.get_slot(slot_id) if slot_id is not None else None

        self._resolving = True
        try:
            if slot is not None:
                slot.already_constructed = building_id
                self._slot_to_building[slot.unique_id] = building_id
            else:
                self._unslotted.append(building_id)
            self._counts[building_id] = self._counts.get(building_id, 0) + 1
            self._resolver.resolve(building_id, definition.effects)
            logger.info("constructed %s in slot %s", building_id, slot_id)
            self._events.publish(BuildingConstructed(building_id=building_id, slot_id=slot_id))
        finally:
            self._resolving = False
        return True

    def construct_initial(self) -> list[str]:
        """Builds what the level data and catalog say exists from the start."""
        built: list[str] = []
        pending, self._pending_initial = self._pending_initial, []
        for building_id, slot_id in pending:
            if self.construct_building(building_id, slot_id):
                built.append(building_id)
        for building_id in self.catalog.all_ids():
            definition = self.definition(building_id)
            if not definition.constructed_from_start or self.is_constructed(building_id):
                continue
            free = self.available_slots_for(building_id)
            target = free[0].unique_id if free else None
            if self.construct_building(building_id, target):
                built.append(building_id)
        return built


class BuildingMenu:
    """Open/closed state of the construction menu."""

    def __init__(self, events: EventChannel) -> None:
        self._events = events
        self._open = False
        self.slot_id: str | None = None

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self, slot_id: str | None = None) -> None:
        self.slot_id = slot_id
        if not self._open:
            self._open = True
            self._events.publish(MenuStateChanged(open=True))

    def close(self) -> None:
        self.slot_id = None
        if self._open:
            self._open = False
            self._events.publish(MenuStateChanged(open=False))
