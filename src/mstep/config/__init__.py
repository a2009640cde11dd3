"""
mstep.config - Configuration loading and defaults.

Configuration lives in ``.mstep.toml``, discovered by walking up from the
working directory. A sibling ``.mstep.local.toml`` is deep-merged over it
for machine-specific settings, and ``MSTEP_<SECTION>_<KEY>`` environment
variables override both.
"""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import ParseError

CONFIG_FILENAME = ".mstep.toml"
LOCAL_CONFIG_FILENAME = ".mstep.local.toml"
ENV_PREFIX = "MSTEP_"

DEFAULT_CONFIG: dict[str, Any] = {
    "playback": {
        "default_speed": "normal",
        "slow": 2.0,
        "normal": 1.0,
        "fast": 0.5,
    },
    "server": {
        "host": "127.0.0.1",
        "port": 5050,
    },
    "logging": {
        "level": "WARNING",
        "file": "",
    },
}


class ConfigLoader:
    """Read access to a merged configuration dict with dotted keys.

    Example:
        >>> config = ConfigLoader.from_dict({"server": {"port": 8000}})
        >>> config.get("server.port")
        8000
    """

    def __init__(self, data: dict[str, Any], path: Path | None = None) -> None:
        self._data = data
        self.path = path

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: Path | None = None) -> ConfigLoader:
        """Create a loader from a raw dict, with defaults merged underneath."""
        return cls(merge_configs(DEFAULT_CONFIG, data), path=path)

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a dotted key such as ``"playback.fast"``."""
        current: Any = self._data
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current

    def section(self, name: str) -> dict[str, Any]:
        """Return a copy of a top-level section (empty if absent)."""
        value = self._data.get(name, {})
        return copy.deepcopy(value) if isinstance(value, dict) else {}

    def as_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)


def parse_toml_document(text: str) -> tomlkit.TOMLDocument:
    """Parse TOML text, preserving formatting for round-trip edits."""
    return tomlkit.parse(text)


def parse_toml(text: str) -> dict[str, Any]:
    """Parse TOML text into plain Python dicts and lists."""
    return parse_toml_document(text).unwrap()


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge ``override`` over ``base`` without modifying either."""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def find_git_root(start: Path) -> Path | None:
    """Find the nearest directory at or above ``start`` containing ``.git``."""
    current = start.resolve()
    for candidate in (current, *current.parents):
        if (candidate / ".git").exists():
            return candidate
    return None


def find_config_file(start: Path) -> Path | None:
    """Find ``.mstep.toml`` at or above ``start``.

    The search stops at the git root, if there is one, so a config file
    from an enclosing repository is never picked up.
    """
    current = start.resolve()
    git_root = find_git_root(current)
    for candidate in (current, *current.parents):
        config_path = candidate / CONFIG_FILENAME
        if config_path.is_file():
            return config_path
        if git_root is not None and candidate == git_root:
            break
    return None


def _try_parse_env_value(value: str) -> Any:
    """Interpret an environment variable value.

    JSON arrays and objects, booleans and numbers are converted; anything
    else (including malformed JSON) is returned as the original string.
    """
    stripped = value.strip()
    if stripped.startswith(("[", "{")):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            return value
    lowered = stripped.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    try:
        return int(stripped)
    except ValueError:
        pass
    try:
        return float(stripped)
    except ValueError:
        return value


def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply ``MSTEP_<SECTION>_<KEY>`` environment overrides in place.

    ``MSTEP_PLAYBACK_DEFAULT_SPEED=fast`` sets ``playback.default_speed``.
    Missing sections are created.
    """
    for name, raw in os.environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        remainder = name[len(ENV_PREFIX):].lower()
        if "_" not in remainder:
            continue
        section, key = remainder.split("_", 1)
        target = config.setdefault(section, {})
        if isinstance(target, dict):
            target[key] = _try_parse_env_value(raw)
    return config


def _read_toml_file(path: Path) -> dict[str, Any]:
    try:
        return parse_toml(path.read_text(encoding="utf-8"))
    except ParseError as e:
        raise ValueError(f"Invalid TOML in {path}: {e}") from e


def load_config(path: Path | None = None) -> ConfigLoader:
    """Load configuration.

    Args:
        path: Explicit config file. When None, ``.mstep.toml`` is searched
            for from the current directory; defaults are used if none
            exists.

    Returns:
        ConfigLoader over defaults, file values, local overrides and
        environment overrides, merged in that order.

    Raises:
        ValueError: If a config file is not valid TOML.
    """
    if path is None:
        path = find_config_file(Path.cwd())

    data: dict[str, Any] = {}
    if path is not None and path.exists():
        data = _read_toml_file(path)
        local = path.parent / LOCAL_CONFIG_FILENAME
        if local.exists():
            data = merge_configs(data, _read_toml_file(local))

    merged = merge_configs(DEFAULT_CONFIG, data)
    return ConfigLoader(_apply_env_overrides(merged), path=path)


__all__ = [
    "ConfigLoader",
    "DEFAULT_CONFIG",
    "load_config",
    "find_config_file",
    "find_git_root",
    "merge_configs",
    "parse_toml",
    "parse_toml_document",
]
