from __future__ import annotations

from typing import Any, Dict, Optional

from .providers import ENV_PREFIX, ConfigManager, DictProvider, EnvProvider, FileProvider


def load_config(
    defaults: Optional[Dict[str, Any]] = None,
    file_path: Optional[str] = None,
    *,
    use_env: bool = True,
    env_prefix: str = ENV_PREFIX,
    optional_file: bool = False,
    overrides: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Load layered config: defaults < file < env < overrides."""
    providers = [DictProvider(data=dict(defaults or {}))]
    if file_path:
        providers.append(FileProvider(path=file_path, optional=optional_file))
    if use_env:
        providers.append(EnvProvider(prefix=env_prefix))
    if overrides:
        providers.append(DictProvider(name="overrides", data=dict(overrides)))
    return ConfigManager(providers).load()


def get_path(cfg: Dict[str, Any], key: str, default: Any = None) -> Any:
    """Dotted lookup, e.g. get_path(cfg, "detector.threshold")."""
    cur: Any = cfg
    for part in key.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return default
        cur = cur[part]
    return cur
