from __future__ import annotations

import logging
import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from .cards import Card, CardFactory
from .deck import CardDeck
from .errors import NoAdventureOptionsError
from .events import AdventureFailure, AdventureSuccess, EventChannel, TavernStateChanged
from .ledger import ResourceLedger
from .types import (
    ADVENTURE_LEVELS,
    AdventureEffect,
    AdventureLevel,
    CardRewardEffect,
    RecruitCardCatalog,
    RecruitCardDefinition,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdventureOption:
    id: str
    level: AdventureLevel
    name: str
    description: str
    cost: int
    success_effects: Callable[[], Sequence[AdventureEffect]]
    failure_effects: Callable[[], Sequence[AdventureEffect]]

    @staticmethod
    def from_definition(d: RecruitCardDefinition) -> "AdventureOption":
        return AdventureOption(
            id=d.id,
            level=d.level,
            name=d.name,
            description=d.description,
            cost=d.cost,
            success_effects=lambda: d.success_effects,
            failure_effects=lambda: d.failure_effects,
        )


class Tavern:
    """Power-gated adventures.

    The cost is always paid: in full when affordable, otherwise every point of
    power the player has is spent and the adventure fails.
    """

    def __init__(
        self,
        ledger: ResourceLedger,
        deck: CardDeck[Card],
        factory: CardFactory,
        events: EventChannel,
        options: Sequence[AdventureOption] = (),
        rng: random.Random | None = None,
    ) -> None:
        self._ledger = ledger
        self._deck = deck
        self._factory = factory
        self._events = events
        self._rng = rng or random.Random()
        self._options: dict[AdventureLevel, list[AdventureOption]] = {lvl: [] for lvl in ADVENTURE_LEVELS}
        for opt in options:
            self._options.setdefault(opt.level, []).append(opt)
        self._open = False

    @staticmethod
    def options_from_catalog(catalog: RecruitCardCatalog) -> list[AdventureOption]:
        return [AdventureOption.from_definition(d) for d in catalog.all()]

    # -------- Open state --------
    @property
    def is_open(self) -> bool:
        return self._open

    def set_open(self, is_open: bool) -> None:
        if self._open != is_open:
            self._open = is_open
            self._events.publish(TavernStateChanged(open=is_open))

    # -------- Options --------
    def available_levels(self) -> list[AdventureLevel]:
        return [lvl for lvl, opts in self._options.items() if opts]

    def options(self, level: AdventureLevel) -> list[AdventureOption]:
        return list(self._options.get(level, []))

    def option_for_level(self, level: AdventureLevel) -> AdventureOption:
        opts = self._options.get(level)
        if not opts:
            raise NoAdventureOptionsError(f"No adventure options available for level: {level}")
        return opts[self._rng.randrange(len(opts))]

    def can_afford(self, option: AdventureOption) -> bool:
        return self._ledger.has_enough("power", option.cost)

    # -------- Resolution --------
    def attempt_adventure(self, option: AdventureOption) -> bool:
        available = self._ledger.power
        if available < option.cost:
            self._ledger.consume("power", available)
            logger.info("adventure %s failed (%d/%d power)", option.id, available, option.cost)
            self._events.publish(AdventureFailure(option_id=option.id))
            return False
        self._ledger.consume("power", option.cost)
        logger.info("adventure %s succeeded", option.id)
        self._events.publish(AdventureSuccess(option_id=option.id))
        return True

    def process_adventure_result(self, option: AdventureOption, success: bool) -> list[Card]:
        effects = option.success_effects() if success else option.failure_effects()
        gained: list[Card] = []
        for eff in effects:
            if isinstance(eff, CardRewardEffect):
                # Unknown templates raise: the reward table is broken data.
                for card in self._factory.create_many(eff.card_type, eff.count):
                    self._deck.discard(card)
                    gained.append(card)
        return gained
