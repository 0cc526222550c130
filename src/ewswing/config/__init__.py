"""Config module.

  - load_config(defaults, file_path, use_env, env_prefix) -> dict
  - providers composed by ConfigManager (defaults < file < env)
  - builders turning config dicts into detectors, filters and models
"""

from __future__ import annotations

from .builders import build_detector, build_filter, build_model, build_profile  # noqa: F401
from .loader import get_path, load_config  # noqa: F401
from .providers import (  # noqa: F401
    ENV_PREFIX,
    ConfigManager,
    ConfigProvider,
    DictProvider,
    EnvProvider,
    FileProvider,
)

__all__ = [
    "load_config",
    "get_path",
    "ENV_PREFIX",
    "ConfigProvider",
    "ConfigManager",
    "DictProvider",
    "EnvProvider",
    "FileProvider",
    "build_detector",
    "build_filter",
    "build_profile",
    "build_model",
]
