"""Config providers.

Layered config: defaults < file < env. Each provider returns a plain dict and
ConfigManager merges them in order, later providers overriding earlier ones.
"""

from __future__ import annotations

import copy
import json
import os
import tomllib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Protocol, runtime_checkable

ENV_PREFIX = "EWSWING_"


@runtime_checkable
class ConfigProvider(Protocol):
    name: str

    def load(self) -> Dict[str, Any]:
        """Return the provider config as a plain dict."""
        ...


def deep_merge(a: Dict[str, Any], b: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge mapping b into dict a (recursive for dict values)."""
    for k, v in b.items():
        if isinstance(v, Mapping) and isinstance(a.get(k), Mapping):
            a[k] = deep_merge(dict(a[k]), v)
        else:
            a[k] = v
    return a


def _set_nested(d: Dict[str, Any], keys: List[str], value: Any) -> None:
    cur = d
    for k in keys[:-1]:
        if k not in cur or not isinstance(cur[k], dict):
            cur[k] = {}
        cur = cur[k]
    cur[keys[-1]] = value


def coerce_value(s: str) -> Any:
    sl = s.strip().lower()
    if sl in {"true", "yes", "on"}:
        return True
    if sl in {"false", "no", "off"}:
        return False
    if sl in {"none", "null"}:
        return None
    try:
        return int(sl)
    except ValueError:
        pass
    try:
        return float(sl)
    except ValueError:
        pass
    if (sl.startswith("{") and sl.endswith("}")) or (sl.startswith("[") and sl.endswith("]")):
        try:
            return json.loads(s)
        except json.JSONDecodeError:
            return s
    return s


@dataclass
class DictProvider:
    name: str = "dict"
    data: Dict[str, Any] = field(default_factory=dict)

    def load(self) -> Dict[str, Any]:
        return copy.deepcopy(dict(self.data or {}))


@dataclass
class EnvProvider:
    """Reads EWSWING_* variables and builds a nested dict via '__'.

    Example:
      EWSWING_DETECTOR__THRESHOLD=2.5
    becomes:
      {"detector": {"threshold": 2.5}}
    """

    name: str = "env"
    prefix: str = ENV_PREFIX
    sep: str = "__"

    def load(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for k, v in sorted(os.environ.items()):
            if not k.startswith(self.prefix):
                continue
            key = k[len(self.prefix):]
            parts = [p.strip().lower() for p in key.split(self.sep) if p.strip()]
            if not parts:
                continue
            _set_nested(out, parts, coerce_value(v))
        return out


@dataclass
class FileProvider:
    """Reads a JSON or TOML config file."""

    name: str = "file"
    path: str = ""
    optional: bool = True

    def load(self) -> Dict[str, Any]:
        if not self.path:
            return {}
        if not os.path.exists(self.path):
            if self.optional:
                return {}
            raise FileNotFoundError(self.path)

        with open(self.path, "rb") as f:
            raw = f.read().decode("utf-8")

        p = self.path.lower()
        if p.endswith(".json"):
            return json.loads(raw)
        if p.endswith(".toml"):
            return tomllib.loads(raw)
        raise RuntimeError(f"Unsupported config format for {self.path} (use .toml or .json)")


@dataclass
class ConfigManager:
    """Compose providers in precedence order (later overrides earlier)."""

    providers: List[ConfigProvider]

    def load(self) -> Dict[str, Any]:
        merged: Dict[str, Any] = {}
        for p in self.providers:
            payload = p.load()
            if payload:
                deep_merge(merged, payload)
        return merged
