import json
import logging
import os
from dataclasses import dataclass, fields
from typing import Any, Optional

logger = logging.getLogger(__name__)

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
CONFIG_PATH = os.path.join(PROJECT_ROOT, "config", "layout.json")


@dataclass
class LayoutConfig:
    """Thresholds for layout reconstruction and conversion defaults."""
    min_row_fragments: int = 3
    row_gap: float = 1.5
    min_table_rows: int = 2
    column_tolerance: float = 0.1
    min_column_hits: int = 2
    max_heading_fragments: int = 10
    heading_levels: int = 3
    default_profile: str = "enhanced"
    log_level: str = "INFO"
    log_file: Optional[str] = None


def _coerce(name: str, value: Any, default: Any) -> Any:
    """Convert a JSON value to the type of the field default; warn and keep the default on failure."""
    if default is None:
        return None if value is None else str(value)
    kind = type(default)
    try:
        if isinstance(value, bool) or value is None:
            raise TypeError(value)
        if kind is int:
            number = float(value)
            if not number.is_integer():
                raise ValueError(value)
            return int(number)
        return kind(value)
    except (TypeError, ValueError):
        logger.warning("Invalid value %r for layout config key %s, using default %r", value, name, default)
        return default


def load_config(path: Optional[str] = None) -> LayoutConfig:
    """Load LayoutConfig from config/layout.json (or `path`), falling back to defaults."""
    cfg_path = path or CONFIG_PATH

    if not os.path.exists(cfg_path):
        if path:
            logger.warning("Config file not found at %s, using defaults", cfg_path)
        return LayoutConfig()

    try:
        with open(cfg_path, "r", encoding="utf-8") as cfg_file:
            data = json.load(cfg_file) or {}
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Could not load layout config from %s: %s", cfg_path, exc)
        return LayoutConfig()

    if not isinstance(data, dict):
        logger.warning("Layout config %s must hold a JSON object, using defaults", cfg_path)
        return LayoutConfig()

    known = {f.name for f in fields(LayoutConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        logger.warning("Ignoring unknown layout config keys: %s", ", ".join(unknown))
    defaults = LayoutConfig()
    values = {
        name: _coerce(name, value, getattr(defaults, name))
        for name, value in data.items()
        if name in known
    }
    return LayoutConfig(**values)
