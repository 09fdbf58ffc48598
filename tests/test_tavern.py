from __future__ import annotations

import random

import pytest

from stickervillage.engine.cards import Card, CardFactory
from stickervillage.engine.deck import CardDeck
from stickervillage.engine.errors import NoAdventureOptionsError, UnknownTemplateError
from stickervillage.engine.events import AdventureFailure, AdventureSuccess, EventChannel, ResourceChanged
from stickervillage.engine.ledger import ResourceLedger
from stickervillage.engine.tavern import AdventureOption, Tavern
from stickervillage.engine.types import (
    CardCatalog,
    CardRewardEffect,
    CardTemplate,
    RecruitCardCatalog,
    RecruitCardDefinition,
    StickerCatalog,
)


def _tavern(*defs: RecruitCardDefinition) -> tuple[Tavern, ResourceLedger, CardDeck[Card], EventChannel]:
    events = EventChannel()
    ledger = ResourceLedger(events)
    deck: CardDeck[Card] = CardDeck()
    factory = CardFactory(
        CardCatalog(cards={"scout": CardTemplate(id="scout", name="Scout", race="Elf", slots=2)}),
        StickerCatalog(stickers={}),
    )
    catalog = RecruitCardCatalog(recruit_cards={d.id: d for d in defs})
    tavern = Tavern(ledger, deck, factory, events, Tavern.options_from_catalog(catalog), rng=random.Random(5))
    return tavern, ledger, deck, events


def _patrol(cost: int = 4, card_type: str = "scout") -> RecruitCardDefinition:
    return RecruitCardDefinition(
        id="patrol",
        name="Patrol",
        cost=cost,
        level="outside_town",
        success_effects=(CardRewardEffect(type="Card", card_type=card_type, count=2),),
        failure_effects=(),
    )


def test_failed_adventure_spends_all_power() -> None:
    tavern, ledger, _, events = _tavern(_patrol(cost=4))
    ledger.add("power", 2)
    option = tavern.option_for_level("outside_town")

    assert tavern.attempt_adventure(option) is False
    assert ledger.power == 0
    assert [e.option_id for e in events.history(AdventureFailure)] == ["patrol"]
    assert events.history(AdventureSuccess) == []


def test_successful_adventure_pays_cost_and_rewards_cards() -> None:
    tavern, ledger, deck, events = _tavern(_patrol(cost=4))
    ledger.add("power", 5)
    option = tavern.option_for_level("outside_town")

    assert tavern.can_afford(option)
    success = tavern.attempt_adventure(option)
    gained = tavern.process_adventure_result(option, success)

    assert success is True
    assert ledger.power == 1
    assert [c.id for c in gained] == ["scout", "scout"]
    assert deck.discard_pile() == gained
    assert len(events.history(AdventureSuccess)) == 1


def test_failure_effects_are_applied_on_failure() -> None:
    tavern, _, deck, _ = _tavern(_patrol(cost=4))
    option = tavern.option_for_level("outside_town")
    assert tavern.process_adventure_result(option, False) == []
    assert deck.discard_size() == 0


def test_reward_with_unknown_template_raises() -> None:
    tavern, _, _, _ = _tavern(_patrol(cost=0, card_type="griffin"))
    option = tavern.option_for_level("outside_town")
    with pytest.raises(UnknownTemplateError):
        tavern.process_adventure_result(option, True)


def test_level_without_options_raises() -> None:
    tavern, _, _, _ = _tavern(_patrol())
    assert tavern.available_levels() == ["outside_town"]
    with pytest.raises(NoAdventureOptionsError):
        tavern.option_for_level("in_far_lands")


def test_options_keep_their_definition() -> None:
    definition = _patrol(cost=3)
    option = AdventureOption.from_definition(definition)
    assert option.cost == 3
    assert option.level == "outside_town"
    assert tuple(option.success_effects()) == definition.success_effects


def test_failed_adventure_without_power_changes_nothing() -> None:
    tavern, ledger, _, events = _tavern(_patrol(cost=4))
    option = tavern.option_for_level("outside_town")

    assert tavern.attempt_adventure(option) is False
    assert ledger.power == 0
    assert events.history(ResourceChanged) == []
    assert len(events.history(AdventureFailure)) == 1
