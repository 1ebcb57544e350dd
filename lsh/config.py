"""
Shell configuration loaded from a YAML file.

Lookup order: the ``--config`` path, ``$LSH_CONFIG``, then ``~/.lsh.yaml``.
A missing file means defaults. Example::

    prompt: "{cwd} > "
    aliases_file: ~/.lsh_aliases
    aliases:
      ll: ls -la
    log_level: INFO
    autocorrect: true
"""

import logging
import os
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

import yaml

from .autocorrect import COMMON_COMMANDS
from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "~/.lsh.yaml"
CONFIG_ENV_VAR = "LSH_CONFIG"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ShellConfig:
    prompt: str = "{cwd} ✘ "
    aliases_file: Optional[str] = "~/.lsh_aliases"
    aliases: Dict[str, str] = field(default_factory=dict)
    history_file: Optional[str] = "~/.lsh_history"
    log_level: str = "WARNING"
    log_file: Optional[str] = None
    autocorrect: bool = True
    common_commands: List[str] = field(default_factory=lambda: list(COMMON_COMMANDS))
    status_bar: bool = False
    source: Optional[str] = None

    def expanded(self, value: Optional[str]) -> Optional[str]:
        return os.path.expanduser(value) if value else None


def config_path(explicit: Optional[str] = None) -> str:
    """Return the config file path that applies, whether or not it exists."""
    return os.path.expanduser(explicit or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)


def _check(key: str, value: Any, expected: type) -> Any:
    if not isinstance(value, expected):
        raise ConfigError(f"config key '{key}' must be {expected.__name__}, got {type(value).__name__}")
    return value


def parse_config(data: Any, source: Optional[str] = None) -> ShellConfig:
    """Build a ``ShellConfig`` from the mapping read out of a YAML file."""
    cfg = ShellConfig(source=source)
    if data is None:
        return cfg
    if not isinstance(data, dict):
        raise ConfigError(f"{source or 'config'}: top level must be a mapping")

    known = {f.name for f in fields(ShellConfig)} - {"source"}
    for key, value in data.items():
        key = str(key)
        if key not in known:
            logger.warning("ignoring unknown config key '%s'", key)
            continue
        if key in ("prompt",):
            cfg.prompt = _check(key, value, str)
        elif key in ("aliases_file", "history_file", "log_file"):
            setattr(cfg, key, None if value is None else _check(key, value, str))
        elif key == "aliases":
            mapping = _check(key, value or {}, dict)
            cfg.aliases = {str(k): str(v) for k, v in mapping.items()}
        elif key == "log_level":
            level = _check(key, value, str).upper()
            if level not in LOG_LEVELS:
                raise ConfigError(f"config key 'log_level' must be one of {', '.join(LOG_LEVELS)}")
            cfg.log_level = level
        elif key in ("autocorrect", "status_bar"):
            setattr(cfg, key, _check(key, value, bool))
        elif key == "common_commands":
            cfg.common_commands = [str(c) for c in _check(key, value, list)]
    return cfg


def load_config(path: Optional[str] = None) -> ShellConfig:
    """Read the YAML config, or return defaults when there is none."""
    resolved = config_path(path)
    if not os.path.exists(resolved):
        if path:
            raise ConfigError(f"config file not found: {resolved}")
        return ShellConfig()
    try:
        with open(resolved, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"{resolved}: invalid YAML: {e}")
    except OSError as e:
        raise ConfigError(f"{resolved}: {e}")
    logger.debug("loaded config from %s", resolved)
    return parse_config(data, source=resolved)
