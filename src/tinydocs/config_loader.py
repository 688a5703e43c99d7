"""Load SiteConfig from tinydocs.yaml / tinydocs.toml if present.

Merges file config with CLI overrides. CLI overrides win.  The ``defaults``
command writes the default configuration back out as YAML.
"""

from __future__ import annotations

import tomllib
from dataclasses import asdict, fields
from pathlib import Path

import yaml

from tinydocs._errors import ConfigError
from tinydocs.config import SiteConfig
from tinydocs.content.navigation import walk_nav

CONFIG_FILENAMES = ("tinydocs.yaml", "tinydocs.yml", "tinydocs.toml")
DEFAULT_CONFIG_FILENAME = CONFIG_FILENAMES[0]

# Everything except root is settable from a config file.
_FILE_KEYS = frozenset(f.name for f in fields(SiteConfig) if f.name != "root")
_INT_KEYS = frozenset({"port", "quiet_ms", "workers"})


def load_config(
    root: Path,
    config_file: Path | None = None,
    **overrides: object,
) -> SiteConfig:
    """Load SiteConfig for *root*, optionally merging a config file.

    Without *config_file*, looks for tinydocs.yaml, tinydocs.yml, or
    tinydocs.toml in *root*.  An explicitly named file must exist.
    Overrides whose value is ``None`` are ignored so CLI flags that were
    not given do not clobber file values.

    Raises:
        ConfigError: If the file is missing, malformed, or has unknown keys.

    """
    root = Path(root)
    if config_file is not None:
        path = config_file if config_file.is_absolute() else root / config_file
        if not path.is_file():
            msg = f"Config file not found: {path}"
            raise ConfigError(msg)
        file_config = _read_config_file(path)
    else:
        file_config = _find_config(root)

    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}
    _validate(merged)
    return SiteConfig(root=root, **merged)  # type: ignore[arg-type]


def _find_config(root: Path) -> dict[str, object]:
    """Read the first config file found in *root*. Returns empty dict otherwise."""
    for name in CONFIG_FILENAMES:
        path = root / name
        if path.is_file():
            return _read_config_file(path)
    return {}


def _read_config_file(path: Path) -> dict[str, object]:
    if path.suffix == ".toml":
        return _parse_toml(path)
    return _parse_yaml(path)


def _parse_yaml(path: Path) -> dict[str, object]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        msg = f"Failed to read {path}: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(data, dict):
        msg = f"{path}: expected a mapping at the top level"
        raise ConfigError(msg)
    return _flatten_tinydocs_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        msg = f"Failed to read {path}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_tinydocs_section(data)


def _flatten_tinydocs_section(data: dict[str, object]) -> dict[str, object]:
    """Merge an optional ``tinydocs`` table into the top-level keys."""
    result = {k: v for k, v in data.items() if k != "tinydocs"}
    section = data.get("tinydocs")
    if isinstance(section, dict):
        result.update(section)
    return result


def _validate(values: dict[str, object]) -> None:
    unknown = sorted(set(values) - _FILE_KEYS)
    if unknown:
        msg = f"Unknown config key(s): {', '.join(unknown)}"
        raise ConfigError(msg)
    for key in _INT_KEYS & values.keys():
        if isinstance(values[key], bool) or not isinstance(values[key], int):
            msg = f"Config key {key!r} must be an integer, got {values[key]!r}"
            raise ConfigError(msg)
    if "follow_links" in values and not isinstance(values["follow_links"], bool):
        msg = "Config key 'follow_links' must be true or false"
        raise ConfigError(msg)
    nav = values.get("nav")
    if nav is not None:
        if not isinstance(nav, list):
            msg = "Config key 'nav' must be a list"
            raise ConfigError(msg)
        # Raises ConfigError for a malformed entry at any depth.
        list(walk_nav(nav))


def default_config_text() -> str:
    """Return the default configuration as YAML text."""
    data = asdict(SiteConfig())
    del data["root"]
    return yaml.safe_dump(data, sort_keys=False, default_flow_style=False)


def dump_defaults(path: Path, *, force: bool = False) -> Path:
    """Write the default configuration to *path*.

    Raises:
        ConfigError: If *path* exists and *force* is False, or it cannot be written.

    """
    if path.exists() and not force:
        msg = f"{path} already exists. Aborting. Use --force to overwrite."
        raise ConfigError(msg)
    try:
        path.write_text(default_config_text(), encoding="utf-8")
    except OSError as exc:
        msg = f"Failed to write default configuration to {path}: {exc}"
        raise ConfigError(msg) from exc
    return path
