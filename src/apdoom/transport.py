"""Interface to the Archipelago network library.

The wire protocol lives outside this package. Whatever implements
:class:`Transport` is expected to be thread-safe, to queue server events in
arrival order, and to answer ``has_pending`` without blocking.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Protocol, Sequence, Tuple, Union

# NetworkItem flag set on items that unlock further content
PROGRESSION_FLAG = 0b001


class ConnectionStatus(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    AUTHENTICATED = "authenticated"
    REFUSED = "refused"


@dataclass(frozen=True)
class RoomInfo:
    seed_name: str
    version: Tuple[int, int, int] = (0, 0, 0)
    tags: Tuple[str, ...] = ()
    password_required: bool = False
    permissions: Dict[str, int] = field(default_factory=dict)
    hint_cost: int = 0
    location_check_points: int = 0
    time: float = 0.0


@dataclass(frozen=True)
class NetworkItem:
    item: int
    location: int
    player: int = 0
    flags: int = 0

    @property
    def is_progression(self) -> bool:
        return bool(self.flags & PROGRESSION_FLAG)


# Server events


@dataclass(frozen=True)
class ItemReceived:
    """Item ``item_id`` is ours; ``index`` is its position in the server's received list."""

    item_id: int
    index: int
    player_id: int = 0
    notify: bool = True


@dataclass(frozen=True)
class LocationChecked:
    location_id: int


@dataclass(frozen=True)
class LocationInfo:
    """Reply to a location scout."""

    items: Tuple[NetworkItem, ...]


@dataclass(frozen=True)
class ChatMessage:
    text: str


@dataclass(frozen=True)
class ItemSendMessage:
    item: str
    recv_player: str
    text: str = ""


@dataclass(frozen=True)
class ItemRecvMessage:
    item: str
    send_player: str
    text: str = ""


@dataclass(frozen=True)
class HintMessage:
    item: str
    send_player: str
    recv_player: str
    location: str
    checked: bool = False
    text: str = ""


TextMessage = Union[ChatMessage, ItemSendMessage, ItemRecvMessage, HintMessage]
ServerEvent = Union[ItemReceived, LocationChecked, LocationInfo, TextMessage]


class Transport(Protocol):
    """What the core needs from the network library."""

    def start(self, server: str, game: str, slot: str, password: str) -> None:
        ...

    def set_death_link_supported(self, supported: bool) -> None:
        ...

    def connection_status(self) -> ConnectionStatus:
        ...

    def room_info(self) -> RoomInfo:
        ...

    def slot_data(self) -> Mapping[str, Any]:
        ...

    def has_pending(self) -> bool:
        """True when ``pop_event`` has something to return. Never blocks."""
        ...

    def pop_event(self) -> ServerEvent:
        ...

    def send_location_scouts(self, location_ids: Sequence[int]) -> None:
        ...

    def send_location_checks(self, location_ids: Sequence[int]) -> None:
        ...

    def say(self, text: str) -> None:
        ...

    def send_death_link(self) -> None:
        ...

    def clear_death_link(self) -> None:
        ...

    def death_link_pending(self) -> bool:
        ...

    def story_complete(self) -> None:
        ...
