from __future__ import annotations

import logging

from .errors import InvalidAmountError
from .events import EventChannel, ResourceChanged
from .types import RESOURCE_TYPES, ResourceType

logger = logging.getLogger(__name__)


class ResourceLedger:
    """Owns the three resource counters; the only code that mutates them.

    ``consume`` answers ``False`` when the player cannot afford something.
    Negative amounts are a programming error and raise ``InvalidAmountError``.
    """

    def __init__(self, events: EventChannel) -> None:
        self._events = events
        self._counters: dict[ResourceType, int] = {r: 0 for r in RESOURCE_TYPES}

    def _check(self, resource: ResourceType, amount: int, verb: str) -> None:
        if resource not in self._counters:
            raise InvalidAmountError(f"Unknown resource: {resource}")
        if amount < 0:
            raise InvalidAmountError(f"Amount of {resource} to {verb} must be positive, got {amount}")

    def _set(self, resource: ResourceType, value: int) -> None:
        previous = self._counters[resource]
        self._counters[resource] = value
        self._events.publish(ResourceChanged(resource=resource, amount=value, previous_amount=previous))

    def get(self, resource: ResourceType) -> int:
        return self._counters[resource]

    @property
    def power(self) -> int:
        return self._counters["power"]

    @property
    def construction(self) -> int:
        return self._counters["construction"]

    @property
    def invention(self) -> int:
        return self._counters["invention"]

    def add(self, resource: ResourceType, amount: int) -> None:
        self._check(resource, amount, "add")
        if amount == 0:
            return
        self._set(resource, self._counters[resource] + amount)
        logger.debug("added %d %s (now %d)", amount, resource, self._counters[resource])

    def consume(self, resource: ResourceType, amount: int) -> bool:
        self._check(resource, amount, "consume")
        if amount > self._counters[resource]:
            return False
        if amount == 0:
            return True
        self._set(resource, self._counters[resource] - amount)
        return True

    def has_enough(self, resource: ResourceType, amount: int) -> bool:
        return self._counters[resource] >= amount

    def reset_all(self) -> None:
        previous = dict(self._counters)
        for resource in RESOURCE_TYPES:
            self._counters[resource] = 0
        # Announce only after every counter is zeroed.
        for resource in RESOURCE_TYPES:
            if previous[resource] != 0:
                self._events.publish(
                    ResourceChanged(resource=resource, amount=0, previous_amount=previous[resource])
                )

    def as_dict(self) -> dict[str, int]:
        return dict(self._counters)
