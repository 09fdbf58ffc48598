from __future__ import annotations

import logging
import random
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from .analytics import Analytics, Tracker
from .buildings import BuildingMenu, BuildingSlot, BuildingSlotBoard, BuildingSlotLocation
from .cards import Card, CardFactory
from .deck import CardDeck, PlayerHand
from .effects import DailyGrants, EffectResolver
from .errors import ReentrantConstructionError
from .events import DayAdvanced, EventChannel
from .invasion import InvasionClock
from .ledger import ResourceLedger
from .payment import pay
from .recruitment import RecruitmentAgency, RecruitmentPool
from .shop import StickerShop
from .tavern import AdventureOption, Tavern
from .types import (
    AdventureLevel,
    BuildingCatalog,
    CardCatalog,
    RecruitCardCatalog,
    ResourceType,
    StickerCatalog,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VillageConfig:
    level_id: str = "default"
    player_hand_size: int = 5
    deck_limit: int = 20
    invasion_distance: int = 10
    invasion_speed_per_turn: int = 1
    invasion_difficulty: int = 0
    starting_cards: tuple[tuple[str, int], ...] = ()
    building_slots: tuple[BuildingSlot, ...] = ()
    building_slot_locations: tuple[BuildingSlotLocation, ...] = ()


@dataclass(frozen=True)
class AdventureOutcome:
    option: AdventureOption
    success: bool
    gained: tuple[Card, ...] = ()


@dataclass
class Village:
    """Every economy subsystem of one game, wired to a shared event channel."""

    config: VillageConfig
    events: EventChannel
    factory: CardFactory
    deck: CardDeck[Card]
    hand: PlayerHand
    ledger: ResourceLedger
    pool: RecruitmentPool
    agency: RecruitmentAgency
    grants: DailyGrants
    board: BuildingSlotBoard
    menu: BuildingMenu
    tavern: Tavern
    shop: StickerShop
    invasion: InvasionClock
    analytics: Analytics = field(default_factory=Analytics)

    @property
    def day(self) -> int:
        return self.invasion.day

    def is_over(self) -> bool:
        return self.invasion.has_arrived()

    # -------- Resources --------
    def add_resource(self, resource: ResourceType, amount: int) -> None:
        self.ledger.add(resource, amount)

    def consume_resource(self, resource: ResourceType, amount: int) -> bool:
        return self.ledger.consume(resource, amount)

    def play_cards(self, resource: ResourceType, indices: Sequence[int]) -> int:
        """Discards the chosen hand cards and banks their value on one track."""
        chosen = self.hand.select(indices)
        total = 0
        for card in chosen:
            self.hand.discard_by_unique_id(card.unique_id)
            total += card.track_value(resource)
            self.analytics.card_played(card.id, resource, self.day)
        if total > 0:
            self.ledger.add(resource, total)
        return total

    # -------- Hand --------
    def draw_up_to_limit(self) -> int:
        return self.hand.draw_up_to_limit()

    def discard_card(self, index: int) -> Card | None:
        return self.hand.discard_card(index)

    def play_card(self, index: int) -> Card | None:
        return self.hand.play_card(index)

    def discard_and_draw(self) -> int:
        return self.hand.discard_and_draw()

    # -------- Buildings --------
    def construct_building(self, building_id: str, slot_id: str) -> bool:
        return self.board.construct_building(building_id, slot_id)

    def construct(self, building_id: str, slot_id: str, card_indices: Sequence[int] = ()) -> bool:
        """Pays for and constructs a building in an empty, compatible slot."""
        if self.board.is_resolving:
            raise ReentrantConstructionError(
                f"Cannot construct {building_id} while another construction is resolving"
            )
        if not self.board.can_construct_in(building_id, slot_id):
            return False
        cost = self.board.definition(building_id).cost.construction
        if not pay(self.ledger, self.hand, "construction", cost, card_indices):
            return False
        built = self.board.construct_building(building_id, slot_id)
        if built:
            self.analytics.building_built(building_id, self.day)
            self.menu.close()
        return built

    # -------- Recruitment --------
    def recruit(self, template_id: str) -> Card | None:
        template = self.factory.template(template_id)
        if not self.pool.is_recruitable(template_id):
            return None
        if not self.ledger.consume("power", template.recruit_cost):
            return None
        return self.agency.recruit(template_id)

    # -------- Stickers --------
    def purchase_sticker(
        self,
        sticker_id: str,
        card: Card,
        slot_index: int,
        card_indices: Sequence[int] = (),
    ) -> bool:
        if not self.shop.purchase(sticker_id, card, slot_index, card_indices):
            return False
        sticker = self.factory.sticker(sticker_id)
        self.analytics.sticker_applied(sticker.id, card.id, sticker.type, self.day)
        return True

    # -------- Tavern --------
    def attempt_adventure(self, option: AdventureOption) -> bool:
        return self.tavern.attempt_adventure(option)

    def adventure(self, level: AdventureLevel) -> AdventureOutcome:
        return self.run_adventure(self.tavern.option_for_level(level))

    def run_adventure(self, option: AdventureOption) -> AdventureOutcome:
        success = self.tavern.attempt_adventure(option)
        gained = self.tavern.process_adventure_result(option, success)
        reward = gained[0].id if gained else None
        self.analytics.adventure_completed(option.id, option.level, success, self.day, reward)
        return AdventureOutcome(option=option, success=success, gained=tuple(gained))

    # -------- Invasion --------
    def progress_invasion(self) -> int:
        return self.invasion.progress_invasion()

    def end_day(self) -> int:
        """Advances to the next day; returns how many cards were drawn."""
        self.ledger.reset_all()
        distance = self.invasion.progress_invasion()
        self.analytics.invasion_progress(distance, self.day)
        self.grants.apply(self.ledger)

        self.hand.discard_hand()
        discarded = self.deck.discard_size()
        self.deck.merge_discard_into_deck_and_shuffle()
        self.analytics.deck_shuffled(self.day, self.deck.deck_size(), discarded, self.day)
        drawn = self.hand.draw_up_to_limit()

        logger.info("day %d begins: %d drawn, invasion at %d", self.day, drawn, distance)
        self.events.publish(DayAdvanced(day=self.day, distance=distance))
        return drawn


def new_village(
    cards: CardCatalog,
    stickers: StickerCatalog,
    buildings: BuildingCatalog,
    recruit_cards: RecruitCardCatalog,
    config: VillageConfig | None = None,
    *,
    rng: random.Random | None = None,
    tracker: Tracker | None = None,
) -> Village:
    cfg = config or VillageConfig()
    rng = rng or random.Random()
    events = EventChannel()
    factory = CardFactory(cards, stickers)

    deck: CardDeck[Card] = CardDeck(deck_limit=cfg.deck_limit, shuffle=False, rng=rng)
    for template_id, count in cfg.starting_cards:
        deck.add_cards_to_deck(factory.create_many(template_id, count), "bottom")
    deck.shuffle()

    hand = PlayerHand(deck, cfg.player_hand_size, events)
    ledger = ResourceLedger(events)
    pool = RecruitmentPool()
    grants = DailyGrants()
    resolver = EffectResolver(pool, grants, deck)
    board = BuildingSlotBoard(
        buildings,
        cfg.building_slots,
        resolver,
        events,
        locations=cfg.building_slot_locations,
    )
    village = Village(
        config=cfg,
        events=events,
        factory=factory,
        deck=deck,
        hand=hand,
        ledger=ledger,
        pool=pool,
        agency=RecruitmentAgency(pool, factory, deck, events),
        grants=grants,
        board=board,
        menu=BuildingMenu(events),
        tavern=Tavern(ledger, deck, factory, events, Tavern.options_from_catalog(recruit_cards), rng=rng),
        shop=StickerShop(ledger, hand, factory, events),
        invasion=InvasionClock(
            cfg.invasion_distance,
            cfg.invasion_speed_per_turn,
            cfg.invasion_difficulty,
        ),
        analytics=Analytics(tracker),
    )

    board.construct_initial()
    hand.draw_up_to_limit()
    village.analytics.game_start(cfg.level_id)
    return village


def starting_cards_from(entries: Sequence[Mapping[str, int]]) -> tuple[tuple[str, int], ...]:
    """Flattens ``[{"farmer": 3}, {"smith": 2}]`` into ordered pairs."""
    out: list[tuple[str, int]] = []
    for entry in entries:
        for template_id, count in entry.items():
            out.append((template_id, int(count)))
    return tuple(out)
