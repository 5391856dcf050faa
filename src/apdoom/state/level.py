from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

logger = logging.getLogger(__name__)

# Per-level bound on recorded checks
CHECK_MAX = 128


@dataclass
class LevelState:
    """Mutable progress of one level.

    ``checks`` holds the thing indices already checked, in the order they were
    recorded. It only ever grows and never holds the same index twice.
    """

    completed: bool = False
    keys: List[bool] = field(default_factory=lambda: [False, False, False])
    checks: List[int] = field(default_factory=list)
    has_map: bool = False
    unlocked: bool = False
    special: bool = False  # Berserk or wings
    flipped: bool = False
    music: int = -1

    @property
    def check_count(self) -> int:
        return len(self.checks)

    def is_checked(self, index: int) -> bool:
        return index in self.checks

    def record_check(self, index: int) -> bool:
        """Record ``index`` as checked. Returns True if it was not recorded before."""
        if index < 0 or index in self.checks:
            return False
        if len(self.checks) >= CHECK_MAX:
            logger.warning("Check list full (%d), dropping check %d", CHECK_MAX, index)
            return False
        self.checks.append(index)
        return True
