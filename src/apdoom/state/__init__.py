from .level import CHECK_MAX, LevelState
from .player import MAX_AMMO_CAP, InventorySlot, PlayerState
from .session import SessionOptions, SessionState

__all__ = [
    "CHECK_MAX",
    "MAX_AMMO_CAP",
    "InventorySlot",
    "LevelState",
    "PlayerState",
    "SessionOptions",
    "SessionState",
]
