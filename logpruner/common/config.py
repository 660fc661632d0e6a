"""Configuration loader for logpruner."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

import yaml

from logpruner.common.errors import ConfigurationError
from logpruner.pruning.models import RetentionConfig

DEFAULT_CONFIG_PATH = "/etc/logpruner/logpruner_config.yaml"
DEFAULT_IMAGE = "my/logpruner:2016-09-12"


@dataclass(slots=True)
class Config:
    """Simple wrapper around the loaded configuration dictionary."""

    data: Dict[str, Any]

    def get(self, path: str, default: Any | None = None) -> Any:
        """Return a key from the configuration using dot-notation."""

        cursor: Any = self.data
        for token in path.split("."):
            if not isinstance(cursor, dict):
                return default
            if token not in cursor:
                return default
            cursor = cursor[token]
        return cursor


def load_config(path: str | Path) -> Config:
    """Read a YAML configuration file into a :class:`Config`."""

    config_path = Path(path).expanduser()
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            raw_config = yaml.safe_load(handle) or {}
    except OSError as exc:
        raise ConfigurationError(f"Unable to read config file {config_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Unable to parse config file {config_path}: {exc}") from exc
    if not isinstance(raw_config, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping at the top level")
    return Config(raw_config)


def retention_configs(cfg: Config) -> Dict[str, RetentionConfig]:
    """Validate the ``es_indexes`` section into typed retention records."""

    indexes = cfg.get("es_indexes")
    if not isinstance(indexes, dict) or not indexes:
        raise ConfigurationError("Config must define at least one index under 'es_indexes'")

    configs: Dict[str, RetentionConfig] = {}
    for name, raw_entry in indexes.items():
        index = str(name)
        if not isinstance(raw_entry, dict):
            raise ConfigurationError(f"Index '{index}': expected a mapping of settings")
        # keys are case-insensitive, so use_SSL, use_ssl and USE_SSL are the same setting
        entry = {str(key).lower(): value for key, value in raw_entry.items()}
        port = _require_int(index, entry, "port")
        if not 1 <= port <= 65535:
            raise ConfigurationError(f"Index '{index}': port {port} is outside 1-65535")
        older_than_days = _require_int(index, entry, "older_than_days")
        if older_than_days < 0:
            raise ConfigurationError(f"Index '{index}': older_than_days must not be negative")
        prefix = entry.get("prefix")
        if prefix is not None and (not isinstance(prefix, str) or not prefix):
            raise ConfigurationError(f"Index '{index}': prefix must be a non-empty string")
        configs[index] = RetentionConfig(
            index=index,
            alarm_name=_require_str(index, entry, "alarm_name"),
            host=_require_str(index, entry, "host"),
            port=port,
            older_than_days=older_than_days,
            use_tls=_optional_bool(index, entry, "use_ssl"),
            tls_validate=_optional_bool(index, entry, "ssl_validation"),
            prefix=prefix,
        )
    return configs


def _require_str(index: str, entry: Dict[str, Any], key: str) -> str:
    value = entry.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(f"Index '{index}': '{key}' must be a non-empty string")
    return value


def _require_int(index: str, entry: Dict[str, Any], key: str) -> int:
    value = entry.get(key)
    # bool is an int subclass; "port: yes" is a mistake, not port 1
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"Index '{index}': '{key}' must be an integer")
    return value


def _optional_bool(index: str, entry: Dict[str, Any], key: str) -> bool:
    value = entry.get(key, False)
    if not isinstance(value, bool):
        raise ConfigurationError(f"Index '{index}': '{key}' must be true or false")
    return value


__all__ = ["Config", "DEFAULT_CONFIG_PATH", "DEFAULT_IMAGE", "load_config", "retention_configs"]
