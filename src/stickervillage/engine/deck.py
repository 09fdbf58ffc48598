from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Sequence
from typing import Generic, Literal, Protocol, TypeVar

from .cards import Card
from .events import CardsChanged, EventChannel

logger = logging.getLogger(__name__)

DeckPosition = Literal["top", "bottom"]


class DeckItem(Protocol):
    id: str
    unique_id: str


T = TypeVar("T", bound=DeckItem)


class CardDeck(Generic[T]):
    """Ordered draw pile plus discard pile.

    The front of the draw pile is the top of the deck. ``deck_limit`` is
    advisory: nothing here refuses cards past it.
    """

    def __init__(
        self,
        cards: Iterable[T] = (),
        *,
        deck_limit: int = 0,
        shuffle: bool = True,
        rng: random.Random | None = None,
    ) -> None:
        self._rng = rng or random.Random()
        self._deck: list[T] = list(cards)
        self._discard: list[T] = []
        self._deck_limit = deck_limit
        if shuffle and self._deck:
            self.shuffle()

    # -------- Capacity --------
    @property
    def deck_limit(self) -> int:
        return self._deck_limit

    def increase_deck_limit(self, amount: int) -> None:
        self._deck_limit += amount
        logger.debug("deck limit raised by %d to %d", amount, self._deck_limit)

    def deck_free_space(self) -> int:
        return max(0, self._deck_limit - len(self._deck))

    # -------- Pile operations --------
    def add_to_deck(self, card: T, position: DeckPosition = "top") -> None:
        if position == "top":
            self._deck.insert(0, card)
        else:
            self._deck.append(card)

    def add_cards_to_deck(self, cards: Iterable[T], position: DeckPosition = "top") -> None:
        for card in cards:
            self.add_to_deck(card, position)

    def remove_from_deck(self, card_id: str) -> T | None:
        for i, card in enumerate(self._deck):
            if card.id == card_id:
                return self._deck.pop(i)
        return None

    def draw(self, count: int = 1) -> list[T]:
        drawn: list[T] = []
        for _ in range(max(0, count)):
            if not self._deck:
                break
            drawn.append(self._deck.pop(0))
        return drawn

    def discard(self, card: T) -> None:
        self._discard.append(card)

    def shuffle(self) -> None:
        self._rng.shuffle(self._deck)

    def merge_discard_into_deck_and_shuffle(self) -> int:
        """Returns how many cards came back from the discard pile."""
        moved = len(self._discard)
        self._deck.extend(self._discard)
        self._discard = []
        self.shuffle()
        return moved

    # -------- Views --------
    def is_empty(self) -> bool:
        return not self._deck

    def deck_size(self) -> int:
        return len(self._deck)

    def discard_size(self) -> int:
        return len(self._discard)

    def cards(self) -> list[T]:
        return list(self._deck)

    def discard_pile(self) -> list[T]:
        return list(self._discard)


class PlayerHand:
    """The bounded working set of cards drawn from a deck.

    Index-based operations return ``None`` for an out-of-range index; callers
    are expected to check.
    """

    def __init__(
        self,
        deck: CardDeck[Card],
        hand_limit: int,
        events: EventChannel | None = None,
    ) -> None:
        self.deck = deck
        self._limit = hand_limit
        self._cards: list[Card] = []
        self._events = events

    @property
    def hand_limit(self) -> int:
        return self._limit

    def cards(self) -> list[Card]:
        return list(self._cards)

    def size(self) -> int:
        return len(self._cards)

    def total_card_count(self) -> int:
        return self.deck.deck_size() + self.deck.discard_size() + len(self._cards)

    def _changed(self) -> None:
        if self._events is not None:
            self._events.publish(CardsChanged(cards=tuple(self._cards)))

    def draw_up_to_limit(self) -> int:
        needed = max(0, self._limit - len(self._cards))
        if needed == 0:
            return 0
        drawn = self.deck.draw(needed)
        if drawn:
            self._cards.extend(drawn)
            self._changed()
        return len(drawn)

    def discard_hand(self) -> None:
        if not self._cards:
            return
        for card in self._cards:
            self.deck.discard(card)
        self._cards = []
        self._changed()

    def discard_and_draw(self) -> int:
        self.discard_hand()
        return self.draw_up_to_limit()

    def discard_card(self, index: int) -> Card | None:
        if index < 0 or index >= len(self._cards):
            logger.warning("invalid hand index %d (hand size %d)", index, len(self._cards))
            return None
        card = self._cards.pop(index)
        self.deck.discard(card)
        self._changed()
        return card

    def play_card(self, index: int) -> Card | None:
        if index < 0 or index >= len(self._cards):
            logger.warning("invalid hand index %d (hand size %d)", index, len(self._cards))
            return None
        card = self._cards.pop(index)
        self._changed()
        return card

    def index_of(self, unique_id: str) -> int | None:
        for i, card in enumerate(self._cards):
            if card.unique_id == unique_id:
                return i
        return None

    def discard_by_unique_id(self, unique_id: str) -> Card | None:
        idx = self.index_of(unique_id)
        if idx is None:
            return None
        return self.discard_card(idx)

    def select(self, indices: Sequence[int]) -> list[Card]:
        """Cards at the given (valid, de-duplicated) indices, in hand order."""
        valid = sorted({i for i in indices if 0 <= i < len(self._cards)})
        return [self._cards[i] for i in valid]
