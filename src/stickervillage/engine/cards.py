from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from .errors import UnknownStickerError, UnknownTemplateError
from .types import CardCatalog, CardTemplate, Race, ResourceType, StickerCatalog, StickerDefinition


@dataclass
class CardSlot:
    index: int
    sticker: StickerDefinition | None = None

    @property
    def is_empty(self) -> bool:
        return self.sticker is None


@dataclass
class Card:
    """A single card instance circulating between deck, hand and discard."""

    id: str
    name: str
    race: Race
    slots: list[CardSlot]
    unique_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def track_value(self, resource: ResourceType) -> int:
        return sum(s.sticker.value_for(resource) for s in self.slots if s.sticker is not None)

    @property
    def power(self) -> int:
        return self.track_value("power")

    @property
    def construction(self) -> int:
        return self.track_value("construction")

    @property
    def invention(self) -> int:
        return self.track_value("invention")

    def empty_slots(self) -> list[int]:
        return [s.index for s in self.slots if s.is_empty]

    def apply_sticker(self, sticker: StickerDefinition, slot_index: int) -> bool:
        if slot_index < 0 or slot_index >= len(self.slots):
            return False
        slot = self.slots[slot_index]
        if not slot.is_empty:
            return False
        slot.sticker = sticker
        return True


class CardFactory:
    """Instantiates cards from templates, resolving their starting stickers."""

    def __init__(self, cards: CardCatalog, stickers: StickerCatalog) -> None:
        self.cards = cards
        self.stickers = stickers

    def template(self, template_id: str) -> CardTemplate:
        tpl = self.cards.get(template_id)
        if tpl is None:
            raise UnknownTemplateError(f"Unknown card template: {template_id}")
        return tpl

    def sticker(self, sticker_id: str) -> StickerDefinition:
        st = self.stickers.get(sticker_id)
        if st is None:
            raise UnknownStickerError(f"Unknown sticker: {sticker_id}")
        return st

    def create(self, template_id: str) -> Card:
        tpl = self.template(template_id)
        slots = [CardSlot(index=i) for i in range(tpl.slots)]
        for i, sticker_id in enumerate(tpl.starting_stickers[: tpl.slots]):
            slots[i].sticker = self.sticker(sticker_id)
        return Card(id=tpl.id, name=tpl.name, race=tpl.race, slots=slots)

    def create_many(self, template_id: str, count: int) -> list[Card]:
        return [self.create(template_id) for _ in range(max(0, count))]
