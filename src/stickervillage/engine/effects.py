from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from .cards import Card
from .deck import CardDeck
from .ledger import ResourceLedger
from .recruitment import RecruitmentPool
from .types import (
    AddResourceEffect,
    BuildingEffect,
    IncreaseDeckLimitEffect,
    MakeRecruitableEffect,
    ResourceType,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StandingGrant:
    building_id: str
    resource: ResourceType
    amount: int


class DailyGrants:
    """Per-day resource grants registered by constructed buildings."""

    def __init__(self) -> None:
        self._grants: list[StandingGrant] = []

    def register(self, grant: StandingGrant) -> None:
        self._grants.append(grant)

    def grants(self) -> list[StandingGrant]:
        return list(self._grants)

    def totals(self) -> dict[ResourceType, int]:
        out: dict[ResourceType, int] = {}
        for g in self._grants:
            out[g.resource] = out.get(g.resource, 0) + g.amount
        return out

    def apply(self, ledger: ResourceLedger) -> None:
        for g in self._grants:
            ledger.add(g.resource, g.amount)


class EffectResolver:
    """Routes a building's effects to the subsystem each one affects."""

    def __init__(
        self,
        pool: RecruitmentPool,
        grants: DailyGrants,
        deck: CardDeck[Card],
    ) -> None:
        self._pool = pool
        self._grants = grants
        self._deck = deck

    def resolve(self, building_id: str, effects: Iterable[BuildingEffect]) -> None:
        for eff in effects:
            if isinstance(eff, MakeRecruitableEffect):
                added = self._pool.add(eff.recruits)
                if added:
                    logger.info("%s unlocked recruits: %s", building_id, ", ".join(added))
            elif isinstance(eff, AddResourceEffect):
                if eff.when == "on_day_start":
                    self._grants.register(
                        StandingGrant(building_id=building_id, resource=eff.resource, amount=eff.amount)
                    )
            elif isinstance(eff, IncreaseDeckLimitEffect):
                self._deck.increase_deck_limit(eff.amount)
            else:
                logger.warning("%s: skipping unsupported effect %r", building_id, eff)
