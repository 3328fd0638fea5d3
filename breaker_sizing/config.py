"""
Engine Settings
Advisory thresholds and defaults that are policy rather than standards data.
"""

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Union

import yaml

from .errors import ConfigError


@dataclass(frozen=True)
class EngineSettings:
    derating_warning_threshold: float = 0.70
    low_power_factor: float = 0.7
    extreme_temperature_high_c: float = 60.0
    extreme_temperature_low_c: float = -20.0
    long_circuit_m: float = 300.0
    long_circuit_ft: float = 1000.0
    default_interrupting_rating_ka: float = 10.0
    calculation_version: str = "1.0.0"


def load_settings(path: Union[str, Path, None] = None) -> EngineSettings:
    """
    Load EngineSettings from a YAML mapping, overriding the defaults.

    Args:
        path: Settings file; None returns the defaults

    Returns:
        EngineSettings

    Raises:
        ConfigError: File missing or unreadable, unknown keys, or bad types
    """
    if path is None:
        return EngineSettings()

    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Settings file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"Settings file must contain a mapping: {path}")

    return settings_from_mapping(raw)


def settings_from_mapping(raw: dict) -> EngineSettings:
    known = {f.name: f for f in fields(EngineSettings)}
    unknown = sorted(set(raw) - set(known))
    if unknown:
        raise ConfigError(f"Unknown settings: {', '.join(unknown)}")

    overrides = {}
    for name, value in raw.items():
        default = getattr(EngineSettings, name)
        if isinstance(default, str):
            if not isinstance(value, str):
                raise ConfigError(f"{name} must be a string")
            overrides[name] = value
        else:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(f"{name} must be a number")
            overrides[name] = float(value)

    settings = replace(EngineSettings(), **overrides)
    if not 0 < settings.derating_warning_threshold <= 1:
        raise ConfigError("derating_warning_threshold must be in (0, 1]")
    if settings.default_interrupting_rating_ka <= 0:
        raise ConfigError("default_interrupting_rating_ka must be positive")
    return settings
