from __future__ import annotations

import logging
from collections.abc import Sequence

from .cards import Card, CardFactory
from .deck import PlayerHand
from .events import EventChannel, ShopStateChanged
from .ledger import ResourceLedger
from .payment import pay
from .types import StickerDefinition

logger = logging.getLogger(__name__)


class StickerShop:
    """Sells stickers for invention and applies them to card slots."""

    def __init__(
        self,
        ledger: ResourceLedger,
        hand: PlayerHand,
        factory: CardFactory,
        events: EventChannel,
        initially_open: bool = False,
    ) -> None:
        self._ledger = ledger
        self._hand = hand
        self._factory = factory
        self._events = events
        self._open = initially_open

    @property
    def is_open(self) -> bool:
        return self._open

    def toggle(self) -> bool:
        self._open = not self._open
        self._events.publish(ShopStateChanged(open=self._open))
        return self._open

    def set_open(self, is_open: bool) -> None:
        if self._open != is_open:
            self._open = is_open
            self._events.publish(ShopStateChanged(open=is_open))

    def stickers_by_cost(self) -> list[StickerDefinition]:
        stickers = [self._factory.sticker(sid) for sid in self._factory.stickers.all_ids()]
        return sorted(stickers, key=lambda s: (s.cost, s.id))

    def purchase(
        self,
        sticker_id: str,
        card: Card,
        slot_index: int,
        card_indices: Sequence[int] = (),
    ) -> bool:
        """Buys a sticker and sticks it on ``card``.

        ``card_indices`` selects hand cards whose invention value may be spent
        when the acquired invention is not enough. The target card must have
        a free slot at ``slot_index``.
        """
        sticker = self._factory.sticker(sticker_id)
        if slot_index < 0 or slot_index >= len(card.slots) or not card.slots[slot_index].is_empty:
            return False
        # The target card cannot pay for its own sticker.
        payers = [i for i in card_indices if self._hand.index_of(card.unique_id) != i]
        if not pay(self._ledger, self._hand, "invention", sticker.cost, payers):
            return False
        card.apply_sticker(sticker, slot_index)
        logger.info("applied %s to %s slot %d", sticker.id, card.unique_id, slot_index)
        return True
