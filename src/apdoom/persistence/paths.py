from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from platformdirs import PlatformDirs

APP_NAME = "apdoom"
ENV_SAVE_ROOT = "APDOOM_SAVE_ROOT"
STATE_FILE_NAME = "apstate.json"


def default_save_root() -> Path:
    """Platform user data directory for per-seed save folders.

    ``APDOOM_SAVE_ROOT`` overrides it, which is handy in tests.
    """
    override = os.environ.get(ENV_SAVE_ROOT)
    if override:
        return Path(override).expanduser()
    return Path(PlatformDirs(appname=APP_NAME, appauthor=False).user_data_dir)


def string_to_hex(text: str) -> str:
    """Upper-case hex of the UTF-8 bytes of ``text`` (``"Ab"`` -> ``"4162"``)."""
    return text.encode("utf-8").hex().upper()


def save_folder_name(seed_name: str, player_name: str) -> str:
    return f"AP_{seed_name}_{string_to_hex(player_name)}"


def save_dir_string(seed_name: str, player_name: str, root: Optional[str] = None) -> str:
    """The save directory as a string, also used as the session seed.

    The root is joined with a plain ``/`` so the string, and therefore the
    seed, is the same on every platform.
    """
    folder = save_folder_name(seed_name, player_name)
    if root:
        return f"{root}/{folder}"
    return folder


def resolve_save_dir(seed_name: str, player_name: str, root: Optional[str] = None) -> Path:
    """Where the save folder lives on disk.

    Without an explicit root the folder goes under :func:`default_save_root`.
    """
    if root:
        return Path(save_dir_string(seed_name, player_name, root))
    return default_save_root() / save_folder_name(seed_name, player_name)


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path
