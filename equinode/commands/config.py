"""
Provisioner settings.

Settings are resolved in three layers: built-in defaults, an optional TOML
file with an ``[equinode]`` table, and explicit overrides from the command
line. The port window is handed to the range validator as a value, never
read from module state.

Example ``equinode.toml``::

    [equinode]
    min_port = 18081
    max_port = 18200
    log_level = 1
    data_root = "data"
    data_layout = "shared"
"""

import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Optional, Union

import toml

from equinode.commands.constants import (
    CONFIG_ENV_VAR,
    CONFIG_FILE_NAME,
    CONFIG_SECTION,
    CONTAINER_DATA_PATH,
    DATA_LAYOUTS,
    DEFAULT_BOOTSTRAP_PEER,
    DEFAULT_DATA_LAYOUT,
    DEFAULT_DATA_ROOT,
    DEFAULT_IMAGE,
    DEFAULT_LOG_LEVEL,
    DEFAULT_NETWORK_FLAG,
    DEFAULT_NODE_PREFIX,
    ERROR_INVALID_PORT,
    MAX_ALLOWED_PORT,
    MIN_ALLOWED_PORT,
)
from equinode.commands.errors import ConfigurationError


@dataclass(frozen=True)
class PortWindow:
    """Inclusive range of host ports the node image may publish."""

    min: int
    max: int


@dataclass(frozen=True)
class ProvisionerSettings:
    """User-editable settings for a provisioning run."""

    min_port: int = MIN_ALLOWED_PORT
    max_port: int = MAX_ALLOWED_PORT
    image: str = DEFAULT_IMAGE
    name_prefix: str = DEFAULT_NODE_PREFIX
    bootstrap_peer: str = DEFAULT_BOOTSTRAP_PEER
    log_level: int = DEFAULT_LOG_LEVEL
    network_flag: str = DEFAULT_NETWORK_FLAG
    container_data_path: str = CONTAINER_DATA_PATH
    data_root: str = DEFAULT_DATA_ROOT
    data_layout: str = DEFAULT_DATA_LAYOUT

    def port_window(self) -> PortWindow:
        return PortWindow(min=self.min_port, max=self.max_port)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


_FIELD_TYPES = {f.name: f.type for f in fields(ProvisionerSettings)}


def _coerce(key: str, value: Any, config_file: Optional[str]) -> Any:
    expected = _FIELD_TYPES[key]
    # bool is an int subclass; reject it for numeric settings
    if expected is int and (isinstance(value, bool) or not isinstance(value, int)):
        raise ConfigurationError(
            f"Setting '{key}' must be an integer, got {value!r}",
            config_file=config_file,
            details={"key": key},
        )
    if expected is str and not isinstance(value, str):
        raise ConfigurationError(
            f"Setting '{key}' must be a string, got {value!r}",
            config_file=config_file,
            details={"key": key},
        )
    return value


def validate_settings(
    settings: ProvisionerSettings, config_file: Optional[str] = None
) -> ProvisionerSettings:
    """Check cross-field constraints on resolved settings.

    Raises:
        ConfigurationError: If the port window or data layout is invalid.
    """
    for key in ("min_port", "max_port"):
        port = getattr(settings, key)
        if not 1 <= port <= 65535:
            raise ConfigurationError(
                f"{ERROR_INVALID_PORT} ({key}={port})",
                config_file=config_file,
                details={"key": key, "value": port},
            )
    if settings.min_port > settings.max_port:
        raise ConfigurationError(
            f"Allowed port window is empty: min_port {settings.min_port} "
            f"> max_port {settings.max_port}",
            config_file=config_file,
            details={"min_port": settings.min_port, "max_port": settings.max_port},
        )
    if settings.data_layout not in DATA_LAYOUTS:
        raise ConfigurationError(
            f"Unknown data_layout '{settings.data_layout}'. "
            f"Expected one of: {', '.join(DATA_LAYOUTS)}",
            config_file=config_file,
            details={"data_layout": settings.data_layout},
        )
    return settings


def find_config_file(path: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """Locate the settings file.

    An explicit path wins, then the EQUINODE_CONFIG environment variable,
    then ``equinode.toml`` in the working directory if present.
    """
    if path is not None:
        return Path(path)
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    default = Path(CONFIG_FILE_NAME)
    if default.is_file():
        return default
    return None


def read_config_file(config_path: Path) -> dict[str, Any]:
    """Read the ``[equinode]`` table of a TOML settings file."""
    config_file = str(config_path)
    if not config_path.is_file():
        raise ConfigurationError(
            f"Config file not found: {config_file}", config_file=config_file
        )
    try:
        with open(config_path, encoding="utf-8") as f:
            data = toml.load(f)
    except toml.TomlDecodeError as e:
        raise ConfigurationError(
            f"Malformed config file: {e}", config_file=config_file
        ) from e

    section = data.get(CONFIG_SECTION, {})
    if not isinstance(section, dict):
        raise ConfigurationError(
            f"'{CONFIG_SECTION}' must be a table", config_file=config_file
        )
    unknown = sorted(set(section) - set(_FIELD_TYPES))
    if unknown:
        raise ConfigurationError(
            f"Unknown setting(s): {', '.join(unknown)}",
            config_file=config_file,
            details={"unknown": unknown},
        )
    return {key: _coerce(key, value, config_file) for key, value in section.items()}


def load_settings(
    path: Optional[Union[str, Path]] = None,
    overrides: Optional[dict[str, Any]] = None,
) -> ProvisionerSettings:
    """Resolve settings from defaults, an optional TOML file and overrides.

    Args:
        path: Explicit config file path. Must exist when given.
        overrides: Values from the command line; None values are ignored.

    Returns:
        Validated ProvisionerSettings.

    Raises:
        ConfigurationError: On a missing or malformed file or invalid values.
    """
    settings = ProvisionerSettings()
    config_path = find_config_file(path)
    config_file = str(config_path) if config_path else None
    if config_path is not None:
        settings = replace(settings, **read_config_file(config_path))

    if overrides:
        applied = {
            key: _coerce(key, value, config_file)
            for key, value in overrides.items()
            if value is not None
        }
        settings = replace(settings, **applied)

    return validate_settings(settings, config_file=config_file)
