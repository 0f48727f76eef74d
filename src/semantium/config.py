from __future__ import annotations

from pathlib import Path
import tomllib

DEFAULT_CONFIG_NAME = "semantium.toml"

ConfigTable = dict[str, object]


def _load_toml(path: Path) -> ConfigTable:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError):
        return {}


def load_config(root: Path | None = None, config_path: Path | None = None) -> ConfigTable:
    if config_path is None:
        config_path = (root or Path.cwd()) / DEFAULT_CONFIG_NAME
    return _load_toml(config_path)


def _section(name: str, root: Path | None, config_path: Path | None) -> ConfigTable:
    section = load_config(root=root, config_path=config_path).get(name)
    return section if isinstance(section, dict) else {}


def grammar_defaults(root: Path | None = None, config_path: Path | None = None) -> ConfigTable:
    return _section("grammar", root, config_path)


def audit_defaults(root: Path | None = None, config_path: Path | None = None) -> ConfigTable:
    return _section("audit", root, config_path)


def logging_defaults(root: Path | None = None, config_path: Path | None = None) -> ConfigTable:
    return _section("logging", root, config_path)


def _string_list(section: ConfigTable | None, key: str) -> list[str]:
    """A string or list-of-strings entry, stripped, without empty items."""
    if not isinstance(section, dict):
        return []
    value = section.get(key)
    items = [value] if isinstance(value, str) else value if isinstance(value, list) else []
    return [item.strip() for item in items if isinstance(item, str) and item.strip()]


def grammar_targets(section: ConfigTable | None) -> list[str]:
    return _string_list(section, "targets")


def audit_ignore_list(section: ConfigTable | None) -> list[str]:
    return [kind.lower() for kind in _string_list(section, "ignore")]


def audit_fail_on_warnings(section: ConfigTable | None) -> bool:
    if not isinstance(section, dict):
        return False
    return section.get("fail_on_warnings") is True


def logging_level(section: ConfigTable | None, default: str = "WARNING") -> str:
    level = section.get("level") if isinstance(section, dict) else None
    if isinstance(level, str) and level.strip():
        return level.strip().upper()
    return default


def merge_payload(payload: ConfigTable, defaults: ConfigTable) -> ConfigTable:
    """Overlay the explicit (non-``None``) entries of ``payload`` on ``defaults``."""
    return {**defaults, **{key: value for key, value in payload.items() if value is not None}}
