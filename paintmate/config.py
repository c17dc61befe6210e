# paintmate/config.py
"""Application settings.

Defaults live in :class:`AppConfig`; a JSON file can override any of them::

    {"history_capacity": 100, "default_width": 1024, "log_level": "DEBUG"}

The file is taken from the ``path`` argument, else from ``$PAINTMATE_CONFIG``.
"""
from __future__ import annotations
import json
import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Optional

from paintmate.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV = "PAINTMATE_CONFIG"


@dataclass(frozen=True)
class AppConfig:
    default_width: int = 800
    default_height: int = 600
    history_capacity: int = 50
    min_zoom: float = 0.1
    max_zoom: float = 10.0
    zoom_step: float = 1.1
    brush_size: float = 10.0
    log_level: str = "INFO"


def _coerce(name: str, expected: type, value):
    if expected is float and isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, bool) or not isinstance(value, expected):
        raise ConfigError(f"{name}: expected {expected.__name__}, got {type(value).__name__}")
    return value


def load_config(path: Optional[str] = None) -> AppConfig:
    path = path or os.environ.get(CONFIG_ENV)
    cfg = AppConfig()
    if not path:
        return cfg

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.warning("config %s not found, using defaults", path)
        return cfg
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must hold a JSON object")

    types = {f.name: type(getattr(cfg, f.name)) for f in fields(AppConfig)}
    values = {}
    for key, value in data.items():
        if key not in types:
            logger.warning("unknown config key %r ignored", key)
            continue
        values[key] = _coerce(key, types[key], value)
    cfg = replace(cfg, **values)

    if cfg.history_capacity < 1:
        raise ConfigError("history_capacity must be >= 1")
    if not 0 < cfg.min_zoom <= cfg.max_zoom:
        raise ConfigError("zoom range must satisfy 0 < min_zoom <= max_zoom")
    if cfg.zoom_step <= 1.0:
        raise ConfigError("zoom_step must be > 1")
    if cfg.brush_size <= 0:
        raise ConfigError("brush_size must be > 0")
    if cfg.default_width < 1 or cfg.default_height < 1:
        raise ConfigError("default_width and default_height must be >= 1")
    logger.debug("config loaded from %s: %s", path, cfg)
    return cfg
