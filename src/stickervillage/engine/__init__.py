"""Headless economy core for Sticker Village.

IMPORTANT: This package performs no file or network I/O.
"""

from .deck import CardDeck, PlayerHand
from .events import EventChannel
from .ledger import ResourceLedger
from .village import Village, VillageConfig, new_village

__all__ = [
    "CardDeck",
    "EventChannel",
    "PlayerHand",
    "ResourceLedger",
    "Village",
    "VillageConfig",
    "new_village",
]
