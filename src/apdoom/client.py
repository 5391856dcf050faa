"""Client-side synchronization with an Archipelago server.

:class:`ApDoomClient` owns the session state for one connection. The engine
calls :meth:`ApDoomClient.initialize` once, then :meth:`ApDoomClient.tick`
every frame, and reports gameplay through the check/complete entry points.
Only ``initialize`` ever waits, and never longer than its timeouts.
"""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Optional, Protocol, Tuple

from .catalog import Catalog, LevelIndex, LevelInfo
from .errors import ConnectionRefused, ConnectionTimeout, PersistenceError, SessionNotReady
from .items import apply_item
from .messages import MessageBuffer, format_message, plain_text
from .notifications import NotificationAnimator, NotificationIcon
from .persistence import SaveManager, resolve_save_dir, save_dir_string
from .persistence.paths import ensure_dir
from .randomization import SeededRNG, derive_level_flips, derive_music_assignment
from .settings import ApSettings
from .state import LevelState, SessionState
from .state.session import BOSS_MAP_INDEX
from .transport import (
    ChatMessage,
    ConnectionStatus,
    HintMessage,
    ItemReceived,
    ItemRecvMessage,
    ItemSendMessage,
    LocationChecked,
    LocationInfo,
    RoomInfo,
    ServerEvent,
    Transport,
)

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.1
CONNECT_TIMEOUT = 10.0
SCOUT_TIMEOUT = 10.0

# Location index the server uses for "level exit reached"
LEVEL_EXIT_INDEX = -1


class GameCallbacks(Protocol):
    """What the engine provides to the client."""

    def give_item(self, doom_type: int, ep: int, map: int) -> None:
        ...

    def display_message(self, text: str) -> None:
        ...

    def on_victory(self) -> None:
        ...


class ApDoomClient:
    def __init__(
        self,
        catalog: Catalog,
        transport: Transport,
        callbacks: GameCallbacks,
        settings: ApSettings,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.catalog = catalog
        self.transport = transport
        self.callbacks = callbacks
        self.settings = settings
        self._clock = clock
        self._sleep = sleep

        self.state = SessionState.new(catalog)
        self.notifications = NotificationAnimator()
        self.room_info: Optional[RoomInfo] = None
        self._messages = MessageBuffer(callbacks.display_message)
        self._save_manager: Optional[SaveManager] = None
        self._seed = ""
        self._in_game = False
        self._initialized = False
        self._was_connected = False

    # Lifecycle

    def initialize(self) -> None:
        """Connect, restore the saved state and derive the seeded content.

        Blocks until the server authenticated us, at most ``CONNECT_TIMEOUT``
        seconds. Raises :class:`ConnectionRefused` or :class:`ConnectionTimeout`.
        A scouting timeout is not an error: progression flags are then
        unknown and every location looks like a regular one.
        """
        settings = self.settings
        logger.info(
            "Initializing game %r, server %s, slot %s",
            self.catalog.game_name,
            settings.server,
            settings.player_name,
        )
        self.state = SessionState.new(self.catalog)
        self.state.apply_overrides(settings.overrides)

        self.transport.set_death_link_supported(not settings.overrides.force_deathlink_off)
        self.transport.start(settings.server, self.catalog.game_name, settings.player_name, settings.password)
        self._wait_for_authentication()
        self._on_authenticated()

        self.state.ensure_episode_enabled()
        self._warn_short_boss_episodes()
        self._derive_seeded_content()
        self._scout_progression()

        self._initialized = True
        self._messages.ready = True
        logger.info("Initialized")

    def shutdown(self) -> None:
        if self._was_connected:
            self.save()

    def save(self) -> bool:
        """Write the session state to disk. Returns False if nothing was written."""
        if not self._was_connected or self._save_manager is None:
            return False
        try:
            self._save_manager.save(self.state, self.catalog)
        except PersistenceError:
            logger.exception("Failed to save state")
            return False
        return True

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def seed(self) -> str:
        """Save directory string of this session; the randomization seed text."""
        return self._seed

    @property
    def in_game(self) -> bool:
        return self._in_game

    @in_game.setter
    def in_game(self, value: bool) -> None:
        if value != self._in_game:
            logger.debug("In game: %s", value)
        self._in_game = bool(value)

    # Per frame

    def tick(self) -> None:
        self._messages.flush()

        while self.transport.has_pending():
            self._handle_event(self.transport.pop_event())

        if self._in_game:
            while self.state.item_queue:
                self._deliver(self.state.item_queue.popleft())

        self.notifications.update()

    # Gameplay entry points

    def check_location(self, idx: LevelIndex, index: int) -> None:
        """Report a location picked up in game."""
        self._require_session()
        loc_id = self.catalog.location_id(idx, index)
        if loc_id is None:
            logger.warning("No location for level %s index %d", idx, index)
            return
        if index >= 0 and not self.state.check_location(idx, index):
            logger.info("Location already checked")
        self.transport.send_location_checks([loc_id])

    def complete_level(self, idx: LevelIndex) -> None:
        self._require_session()
        self.state.level(idx).completed = True
        self.check_location(idx, LEVEL_EXIT_INDEX)

    def check_victory(self) -> bool:
        """Latch victory once the goal is reached. Returns True only the first time."""
        if self.state.victory:
            return False
        if not self.state.goal_reached(self.catalog.base_game):
            return False
        self.state.victory = True
        logger.info("Victory!")
        self.transport.story_complete()
        self.callbacks.on_victory()
        return True

    def send_chat_message(self, text: str) -> None:
        self._require_session()
        self.transport.say(text)

    def on_player_death(self) -> None:
        self._require_session()
        self.transport.send_death_link()

    def clear_death(self) -> None:
        self.transport.clear_death_link()

    def should_player_die(self) -> bool:
        return self.transport.death_link_pending()

    # Queries

    def level_state(self, idx: LevelIndex) -> LevelState:
        return self.state.level(idx)

    def level_info(self, idx: LevelIndex) -> LevelInfo:
        return self.catalog.level_info(idx)

    def total_check_count(self, idx: LevelIndex) -> int:
        return self.catalog.level_info(idx).total_check_count(self.state.options.check_sanity)

    def highest_episode(self) -> int:
        return self.state.highest_episode()

    def is_location_progression(self, idx: LevelIndex, index: int) -> bool:
        loc_id = self.catalog.location_id(idx, index)
        return loc_id is not None and loc_id in self.state.progressive_locations

    def validate_location(self, idx: LevelIndex, doom_type: int, index: int) -> int:
        """-1 if the thing does not match the level, 0 if it is not a check, 1 if it is."""
        info = self.catalog.level_info(idx)
        if index < 0 or index >= info.thing_count:
            return -1
        thing = info.things[index]
        if thing.doom_type != doom_type:
            return -1
        return 1 if self._is_check(idx, index) else 0

    def get_notification_icons(self) -> Tuple[NotificationIcon, ...]:
        return self.notifications.icons

    # Internals

    def _require_session(self) -> None:
        if not self._initialized:
            raise SessionNotReady("initialize() has not completed")

    def _poll(self, done: Callable[[], bool], timeout: float) -> bool:
        """Call ``done`` every ``POLL_INTERVAL`` until it is true or ``timeout`` elapsed."""
        start = self._clock()
        while not done():
            self._sleep(POLL_INTERVAL)
            if self._clock() - start > timeout:
                return False
        return True

    def _wait_for_authentication(self) -> None:
        def authenticated() -> bool:
            status = self.transport.connection_status()
            if status is ConnectionStatus.REFUSED:
                logger.error("Failed to connect, connection refused")
                raise ConnectionRefused(f"{self.settings.server} refused slot {self.settings.player_name!r}")
            return status is ConnectionStatus.AUTHENTICATED

        if not self._poll(authenticated, CONNECT_TIMEOUT):
            logger.error("Failed to connect, timeout %ds", int(CONNECT_TIMEOUT))
            raise ConnectionTimeout(f"No answer from {self.settings.server} after {CONNECT_TIMEOUT:g}s")
        logger.info("Authenticated")

    def _on_authenticated(self) -> None:
        room = self.transport.room_info()
        self.room_info = room
        _log_room_info(room)
        self._was_connected = True

        self.state.apply_slot_data(self.transport.slot_data(), self.settings.overrides)

        settings = self.settings
        self._seed = save_dir_string(room.seed_name, settings.player_name, settings.save_dir)
        save_dir = resolve_save_dir(room.seed_name, settings.player_name, settings.save_dir)
        logger.info("Save directory: %s", save_dir)
        self._open_save_dir(save_dir)

        # Base values first; loading recomputes again with the saved upgrades
        self.state.recalc_max_ammo()
        if self._save_manager is not None:
            self._save_manager.load_into(self.state, self.catalog)

    def _open_save_dir(self, save_dir: Path) -> None:
        if not save_dir.exists():
            logger.info("  Doesn't exist, creating...")
        try:
            ensure_dir(save_dir)
        except OSError:
            logger.exception("Cannot create save directory %s, progress will not be saved", save_dir)
            return
        self._save_manager = SaveManager(save_dir)

    def _warn_short_boss_episodes(self) -> None:
        state = self.state
        if not state.uses_boss_goal(self.catalog.base_game):
            return
        for ep, enabled in enumerate(state.episodes):
            if not enabled:
                continue
            boss = state.boss_level(ep)
            if boss is None:
                logger.warning("Episode %d has no levels, the boss goal cannot be reached", ep + 1)
            elif boss.map != BOSS_MAP_INDEX:
                logger.warning(
                    "Episode %d has no map %d, using map %d as its boss level",
                    ep + 1,
                    BOSS_MAP_INDEX + 1,
                    boss.map + 1,
                )

    def _derive_seeded_content(self) -> None:
        rng = SeededRNG.from_text(self._seed)
        opts = self.state.options
        flips = derive_level_flips(self.catalog, opts.flip_levels, rng)
        music = derive_music_assignment(self.catalog, self.state.episodes, opts.random_music, rng)
        for idx, level in self.state.levels.items():
            level.flipped = flips[idx]
            level.music = music[idx]

    def _is_check(self, idx: LevelIndex, index: int) -> bool:
        info = self.catalog.level_info(idx)
        if index < 0 or index >= info.thing_count:
            return False
        thing = info.things[index]
        if thing.unreachable:
            return False
        return not thing.check_sanity or self.state.options.check_sanity

    def _scout_progression(self) -> None:
        if self.state.progressive_locations:
            logger.info("Scout locations cached loaded")
            return

        scouts = [
            loc_id
            for idx, index, loc_id in self.catalog.locations()
            if self.state.is_episode_enabled(idx.ep) and index != LEVEL_EXIT_INDEX and self._is_check(idx, index)
        ]
        logger.info("Scouting for %d locations...", len(scouts))
        self.transport.send_location_scouts(scouts)

        def scouted() -> bool:
            self.tick()
            return bool(self.state.progressive_locations)

        if not self._poll(scouted, SCOUT_TIMEOUT):
            logger.warning(
                "Timeout waiting for location scouts (%ds). Do you have a VPN active? "
                "Checks will all look non-progression.",
                int(SCOUT_TIMEOUT),
            )

    def _handle_event(self, event: ServerEvent) -> None:
        if isinstance(event, ItemReceived):
            self._receive_item(event)
        elif isinstance(event, LocationChecked):
            found = self.catalog.find_location(event.location_id)
            if found is None:
                logger.warning("Checked location id not found: %d", event.location_id)
                return
            idx, index = found
            self.state.check_location(idx, index)
        elif isinstance(event, LocationInfo):
            for item in event.items:
                if item.is_progression:
                    self.state.progressive_locations.add(item.location)
        elif isinstance(event, (ChatMessage, ItemSendMessage, ItemRecvMessage, HintMessage)):
            logger.info("%s", plain_text(event))
            self._messages.post(format_message(event))
        else:
            logger.warning("Ignoring unknown server event %r", event)

    def _receive_item(self, event: ItemReceived) -> None:
        if not self.state.mark_item_received(event.index):
            logger.debug("Item #%d already received", event.index)
            return

        item = self.catalog.item(event.item_id)
        if item is None:
            logger.warning("Unknown item id %d", event.item_id)
            return
        apply_item(self.state, self.catalog, item)

        if not event.notify:
            return
        if self._in_game:
            self._deliver(item.item_id)
        else:
            self.state.item_queue.append(item.item_id)

    def _deliver(self, item_id: int) -> None:
        """Hand an item to the player and show its icon."""
        item = self.catalog.item(item_id)
        if item is None:
            return
        text = ""
        if item.level_bound and self.catalog.has_level(item.level_index):
            text = self.catalog.level_info(item.level_index).short_name

        self.callbacks.give_item(item.doom_type, item.ep, item.map)

        sprite = self.catalog.sprite(item.doom_type)
        if sprite:
            self.notifications.add(sprite, text)


def _log_room_info(room: RoomInfo) -> None:
    logger.info("Room Info:")
    logger.info("  Network Version: %s", ".".join(str(v) for v in room.version))
    logger.info("  Tags: %s", ", ".join(room.tags))
    logger.info("  Password required: %s", room.password_required)
    for name, value in room.permissions.items():
        logger.info("  Permission %s = %d", name, value)
    logger.info("  Hint cost: %d", room.hint_cost)
    logger.info("  Location check points: %d", room.location_check_points)
    logger.info("  Seed name: %s", room.seed_name)
    logger.info("  Time: %f", room.time)
