from __future__ import annotations


class VillageError(RuntimeError):
    pass


class InvalidAmountError(VillageError, ValueError):
    pass


class UnknownSlotError(VillageError):
    pass


class UnknownBuildingError(VillageError):
    pass


class UnknownTemplateError(VillageError):
    pass


class UnknownStickerError(VillageError):
    pass


class NoAdventureOptionsError(VillageError):
    pass


class ReentrantConstructionError(VillageError):
    """Raised when a construction is requested while another one is resolving."""
