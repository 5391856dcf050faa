"""
Archipelago synchronization core for Doom-engine games.

This package keeps a single-player game session in sync with an Archipelago
multiworld server:
- Content catalog loaded from a game definitions file
- Session state (levels, player, episodes) with idempotent mutators
- Item/location event ingestion with a pending-delivery queue
- Seeded level flipping and music shuffling
- Pickup notification icons
- Save/restore of the session state per seed and slot

The engine drives everything through :class:`ApDoomClient`, supplying a
:class:`Transport` for the network and :class:`GameCallbacks` for the game.
"""
from .catalog import Catalog, LevelIndex, load_definitions
from .client import ApDoomClient, GameCallbacks
from .errors import (
    ApDoomError,
    CatalogError,
    ConnectError,
    ConnectionRefused,
    ConnectionTimeout,
    CorruptSaveError,
    PersistenceError,
    SessionNotReady,
)
from .settings import ApSettings, SettingsOverrides
from .transport import Transport

__version__ = "1.2.0"

__all__ = [
    "ApDoomClient",
    "ApDoomError",
    "ApSettings",
    "Catalog",
    "CatalogError",
    "ConnectError",
    "ConnectionRefused",
    "ConnectionTimeout",
    "CorruptSaveError",
    "GameCallbacks",
    "LevelIndex",
    "PersistenceError",
    "SessionNotReady",
    "SettingsOverrides",
    "Transport",
    "load_definitions",
]
