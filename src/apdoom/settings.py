from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)


@dataclass
class SettingsOverrides:
    """Local overrides of options the server normally decides.

    ``None`` means "use whatever the server says".
    """

    skill: Optional[int] = None
    monster_rando: Optional[int] = None
    item_rando: Optional[int] = None
    music_rando: Optional[int] = None
    flip_levels: Optional[int] = None
    reset_level_on_death: Optional[int] = None
    force_deathlink_off: bool = False


@dataclass
class ApSettings:
    server: str = ""
    game: str = ""
    player_name: str = ""
    password: str = ""
    save_dir: Optional[str] = None  # Root folder for per-seed save directories
    defs_dir: str = "defs"
    overrides: SettingsOverrides = field(default_factory=SettingsOverrides)

    @staticmethod
    def _load_yaml(path: Path) -> dict:
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    @classmethod
    def _deep_merge(cls, base: dict, overlay: dict) -> dict:
        merged = dict(base)
        for k, v in (overlay or {}).items():
            if isinstance(v, dict) and isinstance(base.get(k), dict):
                merged[k] = cls._deep_merge(base[k], v)
            else:
                merged[k] = v
        return merged

    @classmethod
    def _from_dict(cls, data: dict) -> "ApSettings":
        known = {f.name for f in dataclasses.fields(SettingsOverrides)}
        raw_overrides = data.get("overrides") or {}
        unknown = set(raw_overrides) - known
        if unknown:
            logger.warning("Ignoring unknown overrides: %s", sorted(unknown))
        overrides = SettingsOverrides(**{k: v for k, v in raw_overrides.items() if k in known})
        save_dir = data.get("save_dir")
        return cls(
            server=str(data.get("server", "")),
            game=str(data.get("game", "")),
            player_name=str(data.get("player_name", "")),
            password=str(data.get("password", "") or ""),
            save_dir=str(save_dir) if save_dir else None,
            defs_dir=str(data.get("defs_dir", "defs")),
            overrides=overrides,
        )

    @classmethod
    def load(cls, user_path: Optional[Path] = None) -> "ApSettings":
        """Load settings from dataclass defaults overlaid with an optional YAML file."""
        default_data = dataclasses.asdict(ApSettings())
        user_data = {}
        if user_path is not None:
            if user_path.exists():
                user_data = cls._load_yaml(user_path)
                logger.info("Loaded settings from %s", user_path)
            else:
                logger.warning("Settings file %s not found; using defaults.", user_path)
        return cls._from_dict(cls._deep_merge(default_data, user_data))
