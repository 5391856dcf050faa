from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

logger = logging.getLogger(__name__)

ICON_SIZE = 30
ICON_PADDING = 2

# Icons start above the screen and fall into a stack along the left edge
START_X = ICON_SIZE // 2 + ICON_PADDING
START_Y = -200 + ICON_SIZE // 2
# The icon above has to be at least this low before the next one drops
DROP_START_Y = -100.0
# "Previous icon" position used for the first icon of the stack
TOP_Y = 2.0

FALL_ACCEL = 0.15
FALL_ACCEL_PER_BACKLOG = 0.25
MAX_FALL_SPEED = 8.0
BOUNCE = -0.3
BOUNCE_DAMP_PER_BACKLOG = 0.05
# ~7.5 seconds at 35 tics a second
HIDE_AFTER = 350 * 3 // 4
HIDE_ACCEL = 0.14
HIDE_ACCEL_PER_BACKLOG = 0.1
OFFSCREEN_X = -(ICON_SIZE // 2)
# Roughly how many icons fit on screen; more than that speeds everything up
ICONS_PER_SCREEN = 4


class NotificationState(str, Enum):
    PENDING = "pending"
    DROPPING = "dropping"
    HIDING = "hiding"


@dataclass
class NotificationIcon:
    sprite: str
    text: str = ""
    xf: float = float(START_X)
    yf: float = float(START_Y)
    velx: float = 0.0
    vely: float = 0.0
    t: int = 0
    state: NotificationState = NotificationState.PENDING

    def __post_init__(self) -> None:
        self.x = int(self.xf)
        self.y = int(self.yf)

    @property
    def position(self) -> Tuple[int, int]:
        return self.x, self.y


class NotificationAnimator:
    """Stack of pickup icons that drop in, rest for a while, then slide away.

    Icons are kept in arrival order. Each icon rests relative to the icon
    above it as it is right now, so removing one lets the rest fall into
    place. Everything speeds up with the number of queued icons.
    """

    def __init__(self) -> None:
        self._icons: List[NotificationIcon] = []

    def add(self, sprite: str, text: str = "") -> NotificationIcon:
        icon = NotificationIcon(sprite=sprite[:8], text=text)
        self._icons.append(icon)
        logger.debug("Notification queued: %s %s", icon.sprite, icon.text)
        return icon

    @property
    def icons(self) -> Tuple[NotificationIcon, ...]:
        return tuple(self._icons)

    def active_count(self) -> int:
        return len(self._icons)

    def update(self) -> None:
        previous_y = TOP_Y
        i = 0
        while i < len(self._icons):
            icon = self._icons[i]
            backlog = len(self._icons) // ICONS_PER_SCREEN

            if icon.state is NotificationState.PENDING and previous_y > DROP_START_Y:
                icon.state = NotificationState.DROPPING
            if icon.state is NotificationState.PENDING:
                i += 1
                continue

            if icon.state is NotificationState.DROPPING:
                icon.vely = min(MAX_FALL_SPEED, icon.vely + FALL_ACCEL + backlog * FALL_ACCEL_PER_BACKLOG)
                icon.yf += icon.vely
                rest_y = previous_y - ICON_SIZE - ICON_PADDING
                if icon.yf >= rest_y:
                    icon.yf = rest_y
                    icon.vely *= BOUNCE / (backlog * BOUNCE_DAMP_PER_BACKLOG + 1.0)
                    icon.t += backlog + 1
                    if icon.t > HIDE_AFTER:
                        icon.state = NotificationState.HIDING

            if icon.state is NotificationState.HIDING:
                icon.velx -= HIDE_ACCEL + backlog * HIDE_ACCEL_PER_BACKLOG
                icon.xf += icon.velx
                if icon.xf < OFFSCREEN_X:
                    del self._icons[i]
                    continue

            icon.x = int(icon.xf)
            icon.y = int(icon.yf)
            previous_y = icon.yf
            i += 1
