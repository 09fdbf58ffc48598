from __future__ import annotations

from dataclasses import dataclass, field

from .payment import can_pay
from .types import AddResourceEffect, BuildingDefinition, IncreaseDeckLimitEffect, MakeRecruitableEffect
from .village import Village


@dataclass(frozen=True)
class AutoplaySpec:
    """Tuning for the headless planner.

    adventurous:
      attempt affordable tavern adventures with leftover power
    """

    adventurous: bool = True


@dataclass
class DayReport:
    day: int
    constructed: list[str] = field(default_factory=list)
    recruited: list[str] = field(default_factory=list)
    adventures: list[tuple[str, bool]] = field(default_factory=list)
    power_banked: int = 0


def _building_value(d: BuildingDefinition) -> float:
    v = 0.0
    for eff in d.effects:
        if isinstance(eff, MakeRecruitableEffect):
            v += 2.0 * len(eff.recruits)
        elif isinstance(eff, AddResourceEffect):
            v += 3.0 * eff.amount
        elif isinstance(eff, IncreaseDeckLimitEffect):
            v += 1.0 * eff.amount
    # Cheaper is better for the same payoff.
    return v / (1.0 + d.cost.construction)


def _try_construct(village: Village, report: DayReport) -> bool:
    hand_cards = village.hand.cards()
    payers = [i for i, c in enumerate(hand_cards) if c.construction > 0]
    best: tuple[float, str, str] | None = None
    for slot in village.board.slots():
        if slot.already_constructed is not None:
            continue
        for building_id in slot.available_for_construction:
            if not village.board.can_construct_in(building_id, slot.unique_id):
                continue
            definition = village.board.definition(building_id)
            if not can_pay(village.ledger, village.hand, "construction", definition.cost.construction, payers):
                continue
            score = _building_value(definition)
            if best is None or score > best[0]:
                best = (score, building_id, slot.unique_id)
    if best is None:
        return False
    _, building_id, slot_id = best
    if village.construct(building_id, slot_id, payers):
        report.constructed.append(building_id)
        return True
    return False


def _act_on_hand(village: Village, report: DayReport, spec: AutoplaySpec) -> None:
    while _try_construct(village, report):
        pass

    # Banked construction carries over to later hands of the same day.
    builders = [i for i, c in enumerate(village.hand.cards()) if c.construction > 0]
    village.play_cards("construction", builders)
    while _try_construct(village, report):
        pass

    power_cards = [i for i, c in enumerate(village.hand.cards()) if c.power > 0]
    report.power_banked += village.play_cards("power", power_cards)

    for template_id in sorted(village.pool.list()):
        template = village.factory.template(template_id)
        if village.ledger.has_enough("power", template.recruit_cost):
            if village.recruit(template_id) is not None:
                report.recruited.append(template_id)

    if not spec.adventurous:
        return
    for level in village.tavern.available_levels():
        affordable = [o for o in village.tavern.options(level) if village.tavern.can_afford(o)]
        if not affordable:
            continue
        option = max(affordable, key=lambda o: o.cost)
        outcome = village.run_adventure(option)
        report.adventures.append((option.id, outcome.success))


def take_day(village: Village, spec: AutoplaySpec | None = None) -> DayReport:
    """Plays the current day greedily, then ends it."""
    spec = spec or AutoplaySpec()
    report = DayReport(day=village.day)
    while True:
        _act_on_hand(village, report, spec)
        if village.deck.is_empty():
            break
        if village.discard_and_draw() == 0:
            break
    village.end_day()
    return report
