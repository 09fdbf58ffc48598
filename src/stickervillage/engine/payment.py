from __future__ import annotations

from collections.abc import Sequence

from .deck import PlayerHand
from .ledger import ResourceLedger
from .types import ResourceType


def selected_value(hand: PlayerHand, resource: ResourceType, indices: Sequence[int]) -> int:
    return sum(card.track_value(resource) for card in hand.select(indices))


def can_pay(
    ledger: ResourceLedger,
    hand: PlayerHand,
    resource: ResourceType,
    cost: int,
    indices: Sequence[int] = (),
) -> bool:
    return ledger.get(resource) + selected_value(hand, resource, indices) >= cost


def pay(
    ledger: ResourceLedger,
    hand: PlayerHand,
    resource: ResourceType,
    cost: int,
    indices: Sequence[int] = (),
) -> bool:
    """Pays ``cost`` from the ledger first, then by discarding the selected cards.

    The selected cards are discarded only when the ledger alone falls short,
    and then all of them go (any surplus on them is lost). Nothing is spent
    when the total is insufficient.
    """
    if cost <= 0:
        return True
    if not can_pay(ledger, hand, resource, cost, indices):
        return False
    from_ledger = min(ledger.get(resource), cost)
    if from_ledger > 0:
        ledger.consume(resource, from_ledger)
    if cost - from_ledger > 0:
        for card in hand.select(indices):
            hand.discard_by_unique_id(card.unique_id)
    return True
