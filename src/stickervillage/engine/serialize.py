from __future__ import annotations

from .buildings import BuildingSlot
from .cards import Card
from .village import Village


def _card_to_dict(c: Card) -> dict[str, object]:
    return {
        "id": c.id,
        "unique_id": c.unique_id,
        "slots": [s.sticker.id if s.sticker is not None else None for s in c.slots],
        "tracks": {
            "power": c.power,
            "construction": c.construction,
            "invention": c.invention,
        },
    }


def _slot_to_dict(village: Village, s: BuildingSlot) -> dict[str, object]:
    d = s.to_dict()
    loc = village.board.location_of(s.unique_id)
    d["location"] = {"x": loc.x, "y": loc.y} if loc is not None else None
    return d


def snapshot(village: Village) -> dict[str, object]:
    """Return a JSON-serializable canonical snapshot of the village."""
    return {
        "level_id": village.config.level_id,
        "day": village.invasion.day,
        "invasion": {
            "distance": village.invasion.distance,
            "initial_distance": village.invasion.initial_distance,
            "speed_per_turn": village.invasion.speed_per_turn,
            "difficulty": village.invasion.difficulty,
        },
        "resources": village.ledger.as_dict(),
        "deck_limit": village.deck.deck_limit,
        "deck": [_card_to_dict(c) for c in village.deck.cards()],
        "hand": [_card_to_dict(c) for c in village.hand.cards()],
        "discard": [_card_to_dict(c) for c in village.deck.discard_pile()],
        "building_slots": [_slot_to_dict(village, s) for s in village.board.slots()],
        "constructed": village.board.constructed_buildings(),
        "recruitable": village.pool.list(),
        "daily_grants": dict(village.grants.totals()),
    }
