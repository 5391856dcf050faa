"""Launch options, as passed to the game executable.

``python -m apdoom`` parses them and loads the game definitions, which is a
quick way to check a launcher configuration without connecting anywhere.
"""
from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .catalog import load_definitions
from .errors import CatalogError
from .logging_config import configure_logging
from .settings import ApSettings

logger = logging.getLogger(__name__)


def decode_hex_name(text: str) -> str:
    """Decode a hex-encoded slot name (``"4162"`` -> ``"Ab"``). A trailing odd digit is ignored."""
    usable = text[: len(text) // 2 * 2]
    try:
        raw = bytes.fromhex(usable)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid hex slot name {text!r}") from e
    return raw.decode("utf-8", errors="replace")


def _on_off(text: str) -> int:
    try:
        return 1 if int(text) else 0
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected an integer, got {text!r}") from e


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="apdoom",
        description="Archipelago client options for Doom-engine games",
        allow_abbrev=False,
    )
    p.add_argument("-game", help="Game definitions to load (defs/<game>.json)")
    p.add_argument("-apsavedir", metavar="DIR", help="Folder the per-seed save folders are placed into")
    p.add_argument("-apserver", metavar="ADDRESS", help="Archipelago server to connect to (required)")
    p.add_argument("-applayer", metavar="SLOT", help="Slot name to connect as")
    p.add_argument("-applayerhex", metavar="HEX", type=decode_hex_name, help="Slot name, hex encoded")
    p.add_argument("-password", help="Server password")

    overrides = p.add_argument_group("overrides", "Override options chosen at generation time")
    overrides.add_argument("-apmonsterrando", type=int, metavar="N")
    overrides.add_argument("-apitemrando", type=int, metavar="N")
    overrides.add_argument("-apmusicrando", type=int, metavar="N")
    overrides.add_argument("-apfliplevels", type=int, metavar="N")
    overrides.add_argument("-apresetlevelondeath", type=_on_off, metavar="0|1")
    overrides.add_argument("-apdeathlinkoff", action="store_true", help="Forcibly disable DeathLink")

    p.add_argument("--settings", type=Path, help="YAML file with default settings")
    p.add_argument("--defs-dir", help="Folder holding the game definition files")
    p.add_argument("--debug", action="store_true", help="Verbose logging")
    return p


def settings_from_args(args: argparse.Namespace) -> ApSettings:
    """Overlay parsed command-line options on the settings file (or defaults)."""
    settings = ApSettings.load(args.settings)
    o = settings.overrides

    if args.game:
        settings.game = args.game
    if args.apsavedir:
        settings.save_dir = args.apsavedir
    if args.defs_dir:
        settings.defs_dir = args.defs_dir
    if args.apserver:
        settings.server = args.apserver
    if args.applayer:
        settings.player_name = args.applayer
    elif args.applayerhex:
        settings.player_name = args.applayerhex
    if args.password is not None:
        settings.password = args.password

    settings.overrides = dataclasses.replace(
        o,
        monster_rando=args.apmonsterrando if args.apmonsterrando is not None else o.monster_rando,
        item_rando=args.apitemrando if args.apitemrando is not None else o.item_rando,
        music_rando=args.apmusicrando if args.apmusicrando is not None else o.music_rando,
        flip_levels=args.apfliplevels if args.apfliplevels is not None else o.flip_levels,
        reset_level_on_death=(
            args.apresetlevelondeath if args.apresetlevelondeath is not None else o.reset_level_on_death
        ),
        force_deathlink_off=o.force_deathlink_off or args.apdeathlinkoff,
    )
    return settings


def parse_args(argv: Optional[List[str]] = None) -> ApSettings:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = settings_from_args(args)
    if not settings.game:
        parser.error("the '-game' parameter requires an argument")
    if not settings.server:
        parser.error("the '-apserver' parameter requires an argument")
    if not settings.player_name:
        parser.error("the '-applayer' parameter requires an argument")
    return settings


def main(argv: Optional[List[str]] = None) -> int:
    raw = list(sys.argv[1:] if argv is None else argv)
    configure_logging(logging.DEBUG if "--debug" in raw else logging.INFO)
    settings = parse_args(raw)

    try:
        catalog = load_definitions(settings.game, Path(settings.defs_dir))
    except CatalogError as e:
        logger.error("Failed to initialize Archipelago: %s", e)
        return 2

    location_count = sum(1 for _ in catalog.locations())
    logger.info(
        "Game %r (%s): %d episodes, %d levels, %d locations",
        catalog.game_name,
        catalog.base_game.value,
        catalog.episode_count,
        sum(1 for _ in catalog.levels()),
        location_count,
    )
    logger.info("Server %s, slot %s", settings.server, settings.player_name)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
