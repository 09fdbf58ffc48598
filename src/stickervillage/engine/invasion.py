from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class InvasionClock:
    """Day counter and the invaders' remaining distance to the village."""

    def __init__(self, initial_distance: int, speed_per_turn: int, difficulty: int = 0) -> None:
        self.initial_distance = max(0, initial_distance)
        self.speed_per_turn = speed_per_turn
        self.difficulty = difficulty
        self._distance = self.initial_distance
        self._day = 1

    @property
    def distance(self) -> int:
        return self._distance

    @property
    def day(self) -> int:
        return self._day

    def progress_invasion(self) -> int:
        self._distance = max(0, self._distance - self.speed_per_turn)
        self._day += 1
        logger.info("day %d: invasion %d away", self._day, self._distance)
        return self._distance

    def delay_invasion(self, amount: int) -> None:
        self._distance = max(0, min(self.initial_distance, self._distance + amount))

    def has_arrived(self) -> bool:
        return self._distance <= 0
