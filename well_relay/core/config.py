"""
Well Level Relay - Configuration
Copyright (C) 2024
SPDX-License-Identifier: GPL-3.0-or-later

Centralized configuration with environment variable overrides.

Usage:
    from well_relay.core.config import config

    # Access values
    port = config.server.PORT
"""

import os


def _get_int_env(key: str, default: int) -> int:
    """Get integer from environment with default."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    """Get float from environment with default."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_bool_env(key: str, default: bool) -> bool:
    """Get boolean from environment with default."""
    value = os.environ.get(key)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes")


def _get_list_env(key: str, default: list[str]) -> list[str]:
    """Get comma-separated list from environment with default."""
    value = os.environ.get(key)
    if value is None:
        return default
    items = [item.strip() for item in value.split(",")]
    return [item for item in items if item] or default


class ServerConfig:
    """
    Listener configuration.

    Port 3000 is what the deployed sensor firmware is built against;
    changing it means reflashing the device.
    """

    HOST: str = os.environ.get("WELL_HOST", "0.0.0.0")
    PORT: int = _get_int_env("WELL_PORT", 3000)

    # Dashboard may be served from another host than the device API
    CORS_ORIGINS: list[str] = _get_list_env("WELL_CORS_ORIGINS", ["*"])


class PathConfig:
    """Filesystem locations, relative to the working directory by default."""

    FIRMWARE_DIR: str = os.environ.get("WELL_FIRMWARE_DIR", "./uploads")
    PUBLIC_DIR: str = os.environ.get("WELL_PUBLIC_DIR", "./public")


class LoggingConfig:
    """Log output configuration."""

    LEVEL: str = os.environ.get("WELL_LOG_LEVEL", "INFO")
    STRUCTURED: bool = _get_bool_env("WELL_LOG_STRUCTURED", False)
    FILE: str | None = os.environ.get("WELL_LOG_FILE") or None


class CalibrationDefaults:
    """
    Calibration values loaded at process start.

    These describe the reference installation: 79 ft of cable in a
    110 ft well, a 0.5 V zero-pressure sensor and a 2:3 resistor
    divider in front of the ADC pin. Sites with a different install
    can override them without touching the dashboard after each restart.
    """

    CABLE_LENGTH_FT: float = _get_float_env("WELL_DEFAULT_CABLE_LENGTH", 79.0)
    WELL_DEPTH_FT: float = _get_float_env("WELL_DEFAULT_WELL_DEPTH", 110.0)
    SENSOR_OFFSET_V: float = _get_float_env("WELL_DEFAULT_SENSOR_OFFSET", 0.5)
    DIVIDER_FACTOR: float = _get_float_env("WELL_DEFAULT_DIVIDER_FACTOR", 1.5)
    USE_SERVER_CALC: bool = _get_bool_env("WELL_DEFAULT_USE_SERVER_CALC", True)


class Config:
    """Aggregated configuration for the application."""

    def __init__(self):
        self.server = ServerConfig()
        self.paths = PathConfig()
        self.logging = LoggingConfig()
        self.calibration_defaults = CalibrationDefaults()

        # Convenience accessors for common values
        self.firmware_dir = self.paths.FIRMWARE_DIR
        self.public_dir = self.paths.PUBLIC_DIR


# Singleton instance
config = Config()
