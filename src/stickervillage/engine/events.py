"""Synchronous event channel shared by the village subsystems.

Every event is a frozen dataclass with a stable ``name``. Handlers run in
registration order inside the publishing call, so by the time a handler sees
an event every mutation that led to it has already been applied.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, TypeVar

from .types import ResourceType

if TYPE_CHECKING:
    from .cards import Card

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceChanged:
    name: ClassVar[str] = "resource-changed"
    resource: ResourceType
    amount: int
    previous_amount: int


@dataclass(frozen=True)
class BuildingConstructed:
    name: ClassVar[str] = "building-constructed"
    building_id: str
    slot_id: str | None


@dataclass(frozen=True)
class CardsChanged:
    name: ClassVar[str] = "cards-changed"
    cards: tuple["Card", ...]


@dataclass(frozen=True)
class AgencyStateChanged:
    name: ClassVar[str] = "agency-state-changed"
    open: bool


@dataclass(frozen=True)
class ShopStateChanged:
    name: ClassVar[str] = "shop-state-changed"
    open: bool


@dataclass(frozen=True)
class TavernStateChanged:
    name: ClassVar[str] = "tavern-state-changed"
    open: bool


@dataclass(frozen=True)
class MenuStateChanged:
    name: ClassVar[str] = "menu-state-changed"
    open: bool


@dataclass(frozen=True)
class AdventureSuccess:
    name: ClassVar[str] = "adventure-success"
    option_id: str


@dataclass(frozen=True)
class AdventureFailure:
    name: ClassVar[str] = "adventure-failure"
    option_id: str


@dataclass(frozen=True)
class DayAdvanced:
    name: ClassVar[str] = "day-advanced"
    day: int
    distance: int


Event = (
    ResourceChanged
    | BuildingConstructed
    | CardsChanged
    | AgencyStateChanged
    | ShopStateChanged
    | TavernStateChanged
    | MenuStateChanged
    | AdventureSuccess
    | AdventureFailure
    | DayAdvanced
)

E = TypeVar("E")
Unsubscribe = Callable[[], None]


class EventChannel:
    """Typed publish/subscribe fabric.

    Exceptions raised by a handler propagate to whoever published the event.
    """

    def __init__(self, history_limit: int = 100) -> None:
        self._handlers: dict[type, list[Callable[[object], None]]] = {}
        self._catch_all: list[Callable[[object], None]] = []
        self._history: list[Event] = []
        self._history_limit = history_limit

    def subscribe(self, event_type: type[E], handler: Callable[[E], None]) -> Unsubscribe:
        handlers = self._handlers.setdefault(event_type, [])
        handlers.append(handler)  # type: ignore[arg-type]

        def unsubscribe() -> None:
            if handler in handlers:
                handlers.remove(handler)  # type: ignore[arg-type]

        return unsubscribe

    def subscribe_all(self, handler: Callable[[Event], None]) -> Unsubscribe:
        self._catch_all.append(handler)  # type: ignore[arg-type]

        def unsubscribe() -> None:
            if handler in self._catch_all:
                self._catch_all.remove(handler)  # type: ignore[arg-type]

        return unsubscribe

    def publish(self, event: Event) -> None:
        self._history.append(event)
        if len(self._history) > self._history_limit:
            self._history = self._history[-self._history_limit :]
        logger.debug("event %s %s", event.name, event)

        # Snapshot so handlers can (un)subscribe while being notified.
        for handler in list(self._handlers.get(type(event), ())):
            handler(event)
        for handler in list(self._catch_all):
            handler(event)

    def history(self, event_type: type | None = None) -> Sequence[Event]:
        if event_type is None:
            return list(self._history)
        return [e for e in self._history if isinstance(e, event_type)]

    def listener_count(self, event_type: type) -> int:
        return len(self._handlers.get(event_type, []))
