from pathlib import Path

from apdoom.settings import ApSettings, SettingsOverrides


def test_defaults_without_file():
    settings = ApSettings.load()
    assert settings.server == ""
    assert settings.save_dir is None
    assert settings.defs_dir == "defs"
    assert settings.overrides == SettingsOverrides()


def test_missing_file_uses_defaults(tmp_path: Path):
    settings = ApSettings.load(tmp_path / "nope.yaml")
    assert settings == ApSettings()


def test_yaml_overlay(tmp_path: Path):
    path = tmp_path / "apdoom.yaml"
    path.write_text(
        "\n".join(
            [
                "server: archipelago.gg:38281",
                "game: doom_1993",
                "player_name: Doomguy",
                "save_dir: saves",
                "overrides:",
                "  flip_levels: 2",
                "  force_deathlink_off: true",
                "  not_an_option: 3",
            ]
        ),
        encoding="utf-8",
    )
    settings = ApSettings.load(path)
    assert settings.server == "archipelago.gg:38281"
    assert settings.game == "doom_1993"
    assert settings.player_name == "Doomguy"
    assert settings.password == ""
    assert settings.save_dir == "saves"
    assert settings.overrides.flip_levels == 2
    assert settings.overrides.force_deathlink_off is True
    assert settings.overrides.skill is None
