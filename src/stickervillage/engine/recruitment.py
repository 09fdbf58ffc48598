from __future__ import annotations

import logging
from collections.abc import Iterable

from .cards import Card, CardFactory
from .deck import CardDeck
from .events import AgencyStateChanged, EventChannel

logger = logging.getLogger(__name__)


class RecruitmentPool:
    """Card template ids unlocked for recruitment. Only ever grows."""

    def __init__(self) -> None:
        self._ids: list[str] = []

    def add(self, recruit_ids: Iterable[str]) -> list[str]:
        """Adds unseen ids; returns the ones that were new."""
        added: list[str] = []
        for rid in recruit_ids:
            if rid not in self._ids:
                self._ids.append(rid)
                added.append(rid)
        return added

    def is_recruitable(self, recruit_id: str) -> bool:
        return recruit_id in self._ids

    def list(self) -> list[str]:
        return list(self._ids)


class RecruitmentAgency:
    """Turns template ids into new cards in the discard pile."""

    def __init__(
        self,
        pool: RecruitmentPool,
        factory: CardFactory,
        deck: CardDeck[Card],
        events: EventChannel,
    ) -> None:
        self.pool = pool
        self._factory = factory
        self._deck = deck
        self._events = events
        self._open = False

    def recruit(self, template_id: str) -> Card:
        # UnknownTemplateError propagates: a missing template is broken data.
        card = self._factory.create(template_id)
        self._deck.discard(card)
        logger.info("recruited %s (%s)", template_id, card.unique_id)
        return card

    # -------- Menu state --------
    @property
    def is_open(self) -> bool:
        return self._open

    def open_menu(self) -> None:
        self._open = True
        self._events.publish(AgencyStateChanged(open=True))

    def close_menu(self) -> None:
        self._open = False
        self._events.publish(AgencyStateChanged(open=False))
