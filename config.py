# Cymatics Configuration
# All default values and constants

import math
from dataclasses import dataclass, field, is_dataclass
from enum import Enum

from logging_utils import log_event


CURRENT_CONFIG_VERSION = 2


class FieldMode(str, Enum):
    """Displacement field variants"""
    CHLADNI = "chladni"             # Square plate mode superposition
    INTERFERENCE = "interference"   # Two point sources on the x axis


@dataclass
class SimulationParams:
    """Live simulation parameters, read by the core every frame"""
    frequency_m: float = 1.0          # Modal index m / wavenumber scalar (1-20)
    frequency_n: float = 1.0          # Modal index n / source phase offset (1-20)
    amplitude: float = 100.0          # Vibration strength in percent (0-100)
    speed: float = 1.0                # Reserved, not used by the field math
    resolution: float = 1.0           # Reserved, not used by the field math
    particle_count: int = 15000       # Sand amount (1000-30000)
    damping: float = 0.95             # Reserved, not used by the field math
    mode: FieldMode = FieldMode.CHLADNI


@dataclass
class DisplayFlags:
    """Boolean toggles owned by the control panel"""
    show_field: bool = False          # Draw the node/antinode overlay
    audio_enabled: bool = True        # Play the plate tone
    auto_mode: bool = True            # Let the auto-driver sweep frequencies


@dataclass
class RenderConfig:
    """Render loop settings"""
    frame_interval_ms: int = 16       # Render timer interval (~60 FPS)
    field_resolution: int = 100       # Overlay grid cells per side
    particle_size: float = 1.5        # Particle square size in pixels
    background_color: str = "#1e293b"
    plate_color: str = "#0f172a"
    particle_color: str = "#4ade80"


@dataclass
class AudioConfig:
    """Tone output settings"""
    enabled: bool = True              # False skips opening the output device entirely
    sample_rate: int = 44100
    block_size: int = 512
    smoothing_time_s: float = 0.1     # Time constant for frequency/gain ramps
    device_index: int | None = None   # None means use system default


@dataclass
class AutoConfig:
    """Auto-exploration sweep settings"""
    base_speed: float = 0.2           # Scaled seconds per wall-clock second
    tick_interval_ms: int = 16


@dataclass
class Config:
    """Master configuration"""
    version: int = CURRENT_CONFIG_VERSION
    params: SimulationParams = field(default_factory=SimulationParams)
    flags: DisplayFlags = field(default_factory=DisplayFlags)
    render: RenderConfig = field(default_factory=RenderConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)
    auto: AutoConfig = field(default_factory=AutoConfig)
    log_level: str = "INFO"           # Logging level (DEBUG/INFO/WARNING/ERROR)


# Documented parameter domains, enforced at the parameter store boundary
PARAM_RANGE_LIMITS = {
    'frequency_m': (1.0, 20.0),
    'frequency_n': (1.0, 20.0),
    'amplitude': (0.0, 100.0),
    'particle_count': (1000, 30000),
}

# Parameter names used by the original web app, mapped to field names
LEGACY_PARAM_KEYS = {
    'frequencyM': 'frequency_m',
    'frequencyN': 'frequency_n',
    'particleCount': 'particle_count',
}


_FALSE_STRINGS = {'false', '0', 'no', 'off', ''}


def coerce_flag(value) -> bool:
    """Interpret a JSON flag value; the strings "false", "0", "no", "off" are False."""
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


def clamp_value(name: str, value):
    """Clamp a named parameter into its documented range.
    Non-finite input collapses to the range minimum."""
    low, high = PARAM_RANGE_LIMITS[name]
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = float(low)
    if not math.isfinite(number):
        number = float(low)
    number = max(low, min(high, number))
    if isinstance(low, int):
        return int(round(number))
    return number


def apply_dict_to_dataclass(target, data) -> None:
    """Recursively apply values from a dict onto a dataclass instance.
    Unknown keys are ignored; Enum fields are coerced when possible."""
    if not isinstance(data, dict):
        return

    for key, value in data.items():
        if not hasattr(target, key):
            continue

        current = getattr(target, key)

        if is_dataclass(current):
            if isinstance(value, dict):
                apply_dict_to_dataclass(current, value)
            else:
                log_event("WARN", "Config", "Section is not an object, keeping defaults",
                          key=key, type=type(value).__name__)
            continue

        if isinstance(current, Enum):
            try:
                setattr(target, key, current.__class__(value))
            except ValueError:
                log_event("WARN", "Config", "Could not convert value, keeping default",
                          key=key, type=current.__class__.__name__)
            continue

        setattr(target, key, value)


def rename_legacy_keys(data) -> dict:
    """Return a copy of a raw config dict with camelCase parameter names renamed."""
    if not isinstance(data, dict):
        return {}
    renamed = dict(data)
    params = renamed.get('params')
    if isinstance(params, dict):
        params = dict(params)
        for old, new in LEGACY_PARAM_KEYS.items():
            if old in params and new not in params:
                params[new] = params.pop(old)
        renamed['params'] = params
    return renamed


def migrate_config(config: Config, loaded_version) -> None:
    """Upgrade older config structures to the current schema.
    Fills defaults for missing values, clamps ranges and bumps version."""
    try:
        version = int(loaded_version) if loaded_version is not None else 0
    except (TypeError, ValueError):
        version = 0

    defaults = Config()

    if version < 1:
        for name in ('speed', 'resolution', 'damping'):
            if getattr(config.params, name, None) is None:
                setattr(config.params, name, getattr(defaults.params, name))
        for name in ('show_field', 'audio_enabled', 'auto_mode'):
            if getattr(config.flags, name, None) is None:
                setattr(config.flags, name, getattr(defaults.flags, name))

    if version < 2:
        # Version 1 let the field overlay run at arbitrary resolutions
        try:
            resolution = int(config.render.field_resolution)
        except (TypeError, ValueError):
            resolution = defaults.render.field_resolution
        config.render.field_resolution = max(10, min(400, resolution))

    if getattr(config.audio, 'smoothing_time_s', None) is None:
        config.audio.smoothing_time_s = defaults.audio.smoothing_time_s
    if getattr(config.auto, 'base_speed', None) is None:
        config.auto.base_speed = defaults.auto.base_speed
    if getattr(config, 'log_level', None) is None:
        config.log_level = defaults.log_level

    # Always clamp live parameters into their documented ranges
    for name in PARAM_RANGE_LIMITS:
        value = getattr(config.params, name, None)
        if value is None:
            value = getattr(defaults.params, name)
        setattr(config.params, name, clamp_value(name, value))

    for name in ('show_field', 'audio_enabled', 'auto_mode'):
        value = getattr(config.flags, name, None)
        if value is None:
            value = getattr(defaults.flags, name)
        setattr(config.flags, name, coerce_flag(value))
    config.audio.enabled = coerce_flag(config.audio.enabled)

    config.version = CURRENT_CONFIG_VERSION


# Default config instance
DEFAULT_CONFIG = Config()
