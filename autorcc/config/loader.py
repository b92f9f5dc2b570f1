"""Info file loading with env var expansion and per-configuration lookup."""

import os
import re
from pathlib import Path

import yaml

from autorcc.diagnostics import is_truthy, quoted
from autorcc.errors import ConfigError


class InfoSource:
    """Key/value view over a job's info file.

    Lookups never fail: a missing key reads as ``""`` (or ``[]`` for
    lists). ``get_config*`` first try ``<KEY>_<CONFIG>`` and fall back to
    the plain key.
    """

    def __init__(self, values: dict, config_name: str = "", info_file: str = "") -> None:
        self.values = values
        self.config_name = config_name
        self.info_file = info_file

    def _raw(self, key: str) -> object | None:
        return self.values.get(key)

    def get(self, key: str) -> str:
        return _as_string(self._raw(key))

    def get_list(self, key: str) -> list[str]:
        return _as_list(self._raw(key))

    def get_config(self, key: str) -> str:
        return _as_string(self._config_raw(key))

    def get_config_list(self, key: str) -> list[str]:
        return _as_list(self._config_raw(key))

    def is_on(self, key: str) -> bool:
        value = self._raw(key)
        return value is not None and is_truthy(value)

    def _config_raw(self, key: str) -> object | None:
        if self.config_name:
            value = self.values.get(f"{key}_{self.config_name}")
            if value is not None:
                return value
        return self._raw(key)


def load_info(info_file: str | Path, config_name: str = "") -> InfoSource:
    """Read the YAML info file into an :class:`InfoSource`."""
    path = Path(info_file)
    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"In {quoted(str(path))}:\nFile processing failed. {e}", path=str(path)) from e
    except yaml.YAMLError as e:
        raise ConfigError(f"In {quoted(str(path))}:\nInvalid YAML: {e}", path=str(path)) from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(
            f"In {quoted(str(path))}:\nExpected a mapping of ARCC_* keys.", path=str(path)
        )
    raw = _expand_env_vars(raw)
    return InfoSource(raw, config_name=config_name, info_file=str(path))


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


def _as_string(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "ON" if value else "OFF"
    if isinstance(value, list):
        return ";".join(_as_string(v) for v in value)
    return str(value)


def _as_list(value: object) -> list[str]:
    """Split CMake-style ``a;b;c`` strings; YAML lists pass through."""
    if value is None:
        return []
    if isinstance(value, list):
        return [s for s in (_as_string(v) for v in value) if s]
    return [part for part in _as_string(value).split(";") if part]
