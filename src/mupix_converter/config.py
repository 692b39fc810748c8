"""Configuration loading and management for the MuPix converter.

Configuration sources are merged in priority order:
    1. Defaults (defined in ConverterConfig)
    2. Global config (~/.mupix-converter.toml)
    3. Project config (./mupix-converter.toml)
    4. Explicit config file
    5. Environment variables (MUPIX_* prefix)
    6. CLI overrides (passed as kwargs)

The defaults reproduce the output contract expected by the tracking
framework; override them only when converting data from a different setup.

Example:
    >>> config = load_config(window_size=3)
    >>> config.window_size
    3
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .cells import cell_sensor_id, field_max_value
from .constants import (
    MAX_WINDOW_SIZE,
    MIN_WINDOW_SIZE,
    MUPIX_EVENT_TYPE,
    MUPIX_SENSOR_ID,
    MUPIX_SENSOR_TYPE,
    PIXEL_COLLECTION_NAME,
    QUICKLOOK_MIN_TRIGGER_ID,
    TOT_COLLECTION_NAME,
    TRIGGER_COLLECTION_NAME,
)
from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]

ENV_PREFIX = "MUPIX_"
GLOBAL_CONFIG_NAME = ".mupix-converter.toml"
PROJECT_CONFIG_NAME = "mupix-converter.toml"


@dataclass(frozen=True)
class ConverterConfig:
    """Configuration for a converter instance.

    Attributes:
        Sensor identity:
            sensor_id: Sensor id written to planes and pixel cell ids
            event_type: Raw event type the converter is registered for
            sensor_type: Sensor type string written to planes

        Conversion:
            window_size: Number of consecutive raw events merged per output frame
            quicklook_min_trigger_id: Quick-look planes with a trigger id at or
                below this value are replaced by empty planes

        Output collections:
            pixel_collection: Name of the zero-suppressed pixel collection
            trigger_collection: Name of the trigger collection
            tot_collection: Name of the time-over-threshold collection

        Output control:
            verbosity: Logging verbosity level
    """

    sensor_id: int = MUPIX_SENSOR_ID
    event_type: str = MUPIX_EVENT_TYPE
    sensor_type: str = MUPIX_SENSOR_TYPE

    window_size: int = 2
    quicklook_min_trigger_id: int = QUICKLOOK_MIN_TRIGGER_ID

    pixel_collection: str = PIXEL_COLLECTION_NAME
    trigger_collection: str = TRIGGER_COLLECTION_NAME
    tot_collection: str = TOT_COLLECTION_NAME

    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.sensor_id < 0:
            raise InvalidConfigError("sensor_id", self.sensor_id, "must be non-negative")
        max_sensor_id = field_max_value("sensorID")
        if cell_sensor_id(self.sensor_id) > max_sensor_id:
            raise InvalidConfigError(
                "sensor_id",
                self.sensor_id,
                f"must fit the sensorID cell field (max {max_sensor_id})",
            )
        if not MIN_WINDOW_SIZE <= self.window_size <= MAX_WINDOW_SIZE:
            raise InvalidConfigError(
                "window_size",
                self.window_size,
                f"must be between {MIN_WINDOW_SIZE} and {MAX_WINDOW_SIZE}",
            )
        if self.quicklook_min_trigger_id < 0:
            raise InvalidConfigError(
                "quicklook_min_trigger_id", self.quicklook_min_trigger_id, "must be non-negative"
            )

        names = [self.pixel_collection, self.trigger_collection, self.tot_collection]
        if any(not name for name in names):
            raise InvalidConfigError("collections", names, "collection names must be non-empty")
        if len(set(names)) != len(names):
            raise InvalidConfigError("collections", names, "collection names must be distinct")

        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise InvalidConfigError(
                "verbosity", self.verbosity, "expected quiet, normal or verbose"
            )

    @property
    def collection_names(self) -> tuple[str, str, str]:
        """Pixel, trigger and ToT collection names in stream order."""
        return (self.pixel_collection, self.trigger_collection, self.tot_collection)


DEFAULT_CONFIG = ConverterConfig()


def load_config(config_file: Optional[Path] = None, **overrides) -> ConverterConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated ConverterConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing
    """
    merged: dict = {}

    global_config = Path.home() / GLOBAL_CONFIG_NAME
    if global_config.exists():
        merged.update(_load_config_file(global_config, "global"))

    project_config = Path.cwd() / PROJECT_CONFIG_NAME
    if project_config.exists():
        merged.update(_load_config_file(project_config, "project"))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        merged.update(_load_config_file(config_file, "explicit"))

    merged.update(_load_env_vars())

    # Verbosity boolean flags from the CLI
    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return ConverterConfig(**merged)
    except TypeError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _load_config_file(path: Path, kind: str) -> dict:
    try:
        data = _load_toml_file(path)
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Invalid {kind} config '{path}': {e}")

    # Allow settings under a [converter] table as well as at top level
    section = data.pop("converter", None)
    if isinstance(section, dict):
        data.update(section)
    return data


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from MUPIX_* environment variables.

    Supported environment variables:
        MUPIX_SENSOR_ID: int
        MUPIX_EVENT_TYPE: str
        MUPIX_SENSOR_TYPE: str
        MUPIX_WINDOW_SIZE: int
        MUPIX_QUICKLOOK_MIN_TRIGGER_ID: int
        MUPIX_PIXEL_COLLECTION: str
        MUPIX_TRIGGER_COLLECTION: str
        MUPIX_TOT_COLLECTION: str
        MUPIX_VERBOSITY: quiet/normal/verbose

    Returns:
        Dict of field_name -> parsed_value for any MUPIX_* vars found.
    """
    type_hints = get_type_hints(ConverterConfig)

    result: dict[str, Any] = {}

    for field_name in ConverterConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise ConfigurationError(f"Invalid {env_key}: {e}")
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        # Accept hex ids such as 0x47
        return int(value, 0)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        ConfigurationError: If tomllib/tomli not available
        Exception: If TOML parsing fails
    """
    try:
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
