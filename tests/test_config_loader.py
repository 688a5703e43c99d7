"""Tests for tinydocs.config_loader — file lookup, overrides, defaults dump."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from tinydocs._errors import ConfigError
from tinydocs.config_loader import default_config_text, dump_defaults, load_config


class TestLoadConfig:
    """load_config — merge config file and overrides."""

    def test_no_file_uses_defaults(self, tmp_path: Path) -> None:
        config = load_config(tmp_path)
        assert config.root == tmp_path
        assert config.port == 1809

    def test_yaml_file(self, tmp_path: Path) -> None:
        (tmp_path / "tinydocs.yaml").write_text("title: My Docs\nport: 4000\n")
        config = load_config(tmp_path)
        assert config.title == "My Docs"
        assert config.port == 4000

    def test_toml_file(self, tmp_path: Path) -> None:
        (tmp_path / "tinydocs.toml").write_text('[tinydocs]\ntitle = "Toml Docs"\n')
        assert load_config(tmp_path).title == "Toml Docs"

    def test_yaml_wins_over_toml(self, tmp_path: Path) -> None:
        (tmp_path / "tinydocs.yaml").write_text("title: From YAML\n")
        (tmp_path / "tinydocs.toml").write_text('title = "From TOML"\n')
        assert load_config(tmp_path).title == "From YAML"

    def test_overrides_win(self, tmp_path: Path) -> None:
        (tmp_path / "tinydocs.yaml").write_text("port: 4000\n")
        assert load_config(tmp_path, port=5000).port == 5000

    def test_none_overrides_ignored(self, tmp_path: Path) -> None:
        (tmp_path / "tinydocs.yaml").write_text("port: 4000\n")
        assert load_config(tmp_path, port=None, host=None).port == 4000

    def test_explicit_file(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom.yml"
        custom.write_text("language: de\n")
        assert load_config(tmp_path, custom).language == "de"

    def test_explicit_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path, Path("missing.yaml"))

    def test_nav_list(self, tmp_path: Path) -> None:
        (tmp_path / "tinydocs.yaml").write_text(
            "nav:\n  - guide\n  - Source: https://example.com\n  - Guide:\n      - guide/setup\n"
        )
        config = load_config(tmp_path)
        assert config.nav == [
            "guide",
            {"Source": "https://example.com"},
            {"Guide": ["guide/setup"]},
        ]

    def test_nested_nav_sections(self, tmp_path: Path) -> None:
        (tmp_path / "tinydocs.yaml").write_text(
            "nav:\n  - Guide:\n      - guide\n      - Advanced:\n          - guide/deep\n"
        )
        config = load_config(tmp_path)
        assert config.nav == [{"Guide": ["guide", {"Advanced": ["guide/deep"]}]}]


class TestLoadConfigErrors:
    """Malformed files are reported as ConfigError."""

    def test_unknown_key(self, tmp_path: Path) -> None:
        (tmp_path / "tinydocs.yaml").write_text("colour: blue\n")
        with pytest.raises(ConfigError, match="colour"):
            load_config(tmp_path)

    def test_bad_yaml(self, tmp_path: Path) -> None:
        (tmp_path / "tinydocs.yaml").write_text("title: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_bad_toml(self, tmp_path: Path) -> None:
        (tmp_path / "tinydocs.toml").write_text("title = \n")
        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_top_level_not_mapping(self, tmp_path: Path) -> None:
        (tmp_path / "tinydocs.yaml").write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(tmp_path)

    def test_port_must_be_int(self, tmp_path: Path) -> None:
        (tmp_path / "tinydocs.yaml").write_text("port: eighty\n")
        with pytest.raises(ConfigError, match="port"):
            load_config(tmp_path)

    def test_follow_links_must_be_bool(self, tmp_path: Path) -> None:
        (tmp_path / "tinydocs.yaml").write_text("follow_links: sometimes\n")
        with pytest.raises(ConfigError, match="follow_links"):
            load_config(tmp_path)

    def test_nav_must_be_list(self, tmp_path: Path) -> None:
        (tmp_path / "tinydocs.yaml").write_text("nav: guide\n")
        with pytest.raises(ConfigError, match="nav"):
            load_config(tmp_path)

    def test_nav_entry_must_be_url_or_list(self, tmp_path: Path) -> None:
        (tmp_path / "tinydocs.yaml").write_text(
            "nav:\n  - Guide:\n      - Advanced:\n          depth: 3\n"
        )
        with pytest.raises(ConfigError, match="Advanced"):
            load_config(tmp_path)

    def test_nav_item_must_be_string_or_mapping(self, tmp_path: Path) -> None:
        (tmp_path / "tinydocs.yaml").write_text("nav:\n  - 42\n")
        with pytest.raises(ConfigError, match="42"):
            load_config(tmp_path)


class TestDefaults:
    """default_config_text / dump_defaults."""

    def test_default_text_is_loadable(self, tmp_path: Path) -> None:
        data = yaml.safe_load(default_config_text())
        assert data["port"] == 1809
        assert data["docs_dir"] == "docs"
        assert "root" not in data

    def test_dump_round_trips_through_loader(self, tmp_path: Path) -> None:
        dump_defaults(tmp_path / "tinydocs.yaml")
        config = load_config(tmp_path)
        assert config.output_dir == "public"

    def test_refuses_to_overwrite(self, tmp_path: Path) -> None:
        target = tmp_path / "tinydocs.yaml"
        target.write_text("title: keep me\n")
        with pytest.raises(ConfigError, match="already exists"):
            dump_defaults(target)
        assert target.read_text() == "title: keep me\n"

    def test_force_overwrites(self, tmp_path: Path) -> None:
        target = tmp_path / "tinydocs.yaml"
        target.write_text("title: old\n")
        dump_defaults(target, force=True)
        assert "port: 1809" in target.read_text()
