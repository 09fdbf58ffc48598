from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol


class Tracker(Protocol):
    def track(self, event_name: str, params: Mapping[str, object]) -> None: ...


class NullTracker:
    def track(self, event_name: str, params: Mapping[str, object]) -> None:
        return None


class Analytics:
    """Named gameplay events forwarded to an event-tracking backend."""

    def __init__(self, tracker: Tracker | None = None) -> None:
        self.tracker: Tracker = tracker or NullTracker()

    def game_start(self, level_id: str) -> None:
        self.tracker.track("game_start", {"event_category": "game_flow", "level_id": level_id})

    def card_played(self, card_id: str, resource: str, turn_number: int) -> None:
        self.tracker.track(
            "card_played",
            {"card_id": card_id, "resource": resource, "turn_number": turn_number},
        )

    def building_built(self, building_id: str, turn_number: int) -> None:
        self.tracker.track("building_built", {"building_id": building_id, "turn_number": turn_number})

    def sticker_applied(self, sticker_id: str, target_card_id: str, track_type: str, turn_number: int) -> None:
        self.tracker.track(
            "sticker_applied",
            {
                "sticker_id": sticker_id,
                "target_card_id": target_card_id,
                "track_type": track_type,
                "turn_number": turn_number,
            },
        )

    def adventure_completed(
        self,
        adventure_id: str,
        difficulty: str,
        success: bool,
        turn_number: int,
        reward_chosen: str | None = None,
    ) -> None:
        self.tracker.track(
            "adventure_completed",
            {
                "adventure_id": adventure_id,
                "difficulty": difficulty,
                "success": success,
                "reward_chosen": reward_chosen or "none",
                "turn_number": turn_number,
            },
        )

    def deck_shuffled(self, day_number: int, deck_size: int, cards_discarded: int, turn_number: int) -> None:
        self.tracker.track(
            "deck_shuffled",
            {
                "day_number": day_number,
                "deck_size": deck_size,
                "cards_discarded": cards_discarded,
                "turn_number": turn_number,
            },
        )

    def invasion_progress(self, distance_remaining: int, current_day: int) -> None:
        self.tracker.track(
            "invasion_progress",
            {"distance_remaining": distance_remaining, "current_day": current_day},
        )
