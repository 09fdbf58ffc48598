from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

ResourceType = Literal["power", "construction", "invention"]
RESOURCE_TYPES: tuple[ResourceType, ...] = ("power", "construction", "invention")

StickerType = Literal["Power", "Construction", "Invention", "Wild"]
Race = Literal["Elf", "Dwarf", "Human", "Gnome"]
AdventureLevel = Literal["recruitment", "in_town", "outside_town", "in_far_lands"]
ADVENTURE_LEVELS: tuple[AdventureLevel, ...] = (
    "recruitment",
    "in_town",
    "outside_town",
    "in_far_lands",
)

GrantTiming = Literal["on_day_start"]


# Building effects


@dataclass(frozen=True)
class MakeRecruitableEffect:
    type: Literal["make_recruitable"]
    recruits: tuple[str, ...]


@dataclass(frozen=True)
class AddResourceEffect:
    type: Literal["add_resource"]
    when: GrantTiming
    resource: ResourceType
    amount: int


@dataclass(frozen=True)
class IncreaseDeckLimitEffect:
    type: Literal["increase_deck_limit"]
    amount: int


BuildingEffect = MakeRecruitableEffect | AddResourceEffect | IncreaseDeckLimitEffect


@dataclass(frozen=True)
class BuildingCost:
    construction: int = 0


@dataclass(frozen=True)
class BuildingDefinition:
    id: str
    name: str
    cost: BuildingCost
    effects: tuple[BuildingEffect, ...]
    limit: int | None = None
    description: str = ""
    image: str = ""
    constructed_from_start: bool = False


@dataclass(frozen=True)
class BuildingCatalog:
    """Read-only building definitions, keyed by id."""

    buildings: dict[str, BuildingDefinition]

    def get(self, building_id: str) -> BuildingDefinition | None:
        return self.buildings.get(building_id)

    def all_ids(self) -> Sequence[str]:
        return list(self.buildings.keys())


# Stickers


@dataclass(frozen=True)
class ResourceStickerEffect:
    type: Literal["Resource"]
    resource: ResourceType
    value: int


@dataclass(frozen=True)
class StickerDefinition:
    id: str
    name: str
    type: StickerType
    cost: int
    effects: tuple[ResourceStickerEffect, ...]
    description: str = ""
    image: str = ""

    def value_for(self, resource: ResourceType) -> int:
        return sum(e.value for e in self.effects if e.resource == resource)


@dataclass(frozen=True)
class StickerCatalog:
    stickers: dict[str, StickerDefinition]

    def get(self, sticker_id: str) -> StickerDefinition | None:
        return self.stickers.get(sticker_id)

    def all_ids(self) -> Sequence[str]:
        return list(self.stickers.keys())


# Card templates


@dataclass(frozen=True)
class CardTemplate:
    id: str
    name: str
    race: Race
    slots: int
    starting_stickers: tuple[str, ...] = ()
    recruit_cost: int = 0
    description: str = ""
    image: str = ""


@dataclass(frozen=True)
class CardCatalog:
    cards: dict[str, CardTemplate]

    def get(self, template_id: str) -> CardTemplate | None:
        return self.cards.get(template_id)

    def all_ids(self) -> Sequence[str]:
        return list(self.cards.keys())


# Tavern


@dataclass(frozen=True)
class CardRewardEffect:
    type: Literal["Card"]
    card_type: str
    count: int = 1


AdventureEffect = CardRewardEffect


@dataclass(frozen=True)
class RecruitCardDefinition:
    id: str
    name: str
    cost: int
    success_effects: tuple[AdventureEffect, ...]
    failure_effects: tuple[AdventureEffect, ...]
    level: AdventureLevel = "recruitment"
    description: str = ""
    image: str = ""


@dataclass(frozen=True)
class RecruitCardCatalog:
    recruit_cards: dict[str, RecruitCardDefinition]

    def get(self, recruit_id: str) -> RecruitCardDefinition | None:
        return self.recruit_cards.get(recruit_id)

    def all(self) -> Sequence[RecruitCardDefinition]:
        return list(self.recruit_cards.values())
