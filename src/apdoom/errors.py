class ApDoomError(Exception):
    """Base error for the Archipelago synchronization core."""


class ConnectError(ApDoomError):
    """Raised when no session could be established with the server."""


class ConnectionRefused(ConnectError):
    """Raised when the server refused the slot/password."""


class ConnectionTimeout(ConnectError):
    """Raised when the server did not authenticate us in time."""


class CatalogError(ApDoomError):
    """Raised when the game definitions are missing or malformed."""


class PersistenceError(ApDoomError):
    """Raised when the session state cannot be written to disk."""


class SessionNotReady(ApDoomError):
    """Raised when an entry point needs a connected session and there is none."""


class CorruptSaveError(PersistenceError):
    """Raised when a save file exists but cannot be decoded."""
