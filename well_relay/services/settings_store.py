"""
Well Level Relay - Calibration Settings Store
Copyright (C) 2024
SPDX-License-Identifier: GPL-3.0-or-later

Holds the single calibration value used by the relay.

The value is an immutable CalibrationSettings; updates build a new one
and swap it in under the lock, so readers always get a complete value.

Usage:
    from well_relay.services.settings_store import get_settings_store

    store = get_settings_store()
    current = store.read()
    store.update({"cableLength": "80", "wellDepth": 110,
                  "sensorOffset": 0.5, "dividerFactor": 1.5})
"""

import math
from collections.abc import Mapping
from threading import Lock
from typing import Any

from ..core.config import config
from ..core.exceptions import ValidationError
from ..core.logging import get_logger
from ..schemas.calibration import CalibrationSettings

logger = get_logger(__name__)

# JSON name -> model attribute, in the order the dashboard sends them
REQUIRED_FIELDS: dict[str, str] = {
    "cableLength": "cable_length",
    "wellDepth": "well_depth",
    "sensorOffset": "sensor_offset",
    "dividerFactor": "divider_factor",
}


def default_settings() -> CalibrationSettings:
    """Build the settings value used at process start."""
    defaults = config.calibration_defaults
    return CalibrationSettings(
        cable_length=defaults.CABLE_LENGTH_FT,
        well_depth=defaults.WELL_DEPTH_FT,
        sensor_offset=defaults.SENSOR_OFFSET_V,
        divider_factor=defaults.DIVIDER_FACTOR,
        use_server_calc=defaults.USE_SERVER_CALC,
    )


def parse_number(value: Any) -> float | None:
    """
    Parse a settings value sent as a JSON number or numeric string.

    Returns None for anything that is not a finite number. Booleans are
    rejected even though Python treats them as ints.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


class CalibrationSettingsStore:
    """Thread-safe holder for the current calibration settings."""

    def __init__(self, initial: CalibrationSettings | None = None):
        self._lock = Lock()
        self._settings = initial if initial is not None else default_settings()

    def read(self) -> CalibrationSettings:
        """Return the current settings snapshot."""
        with self._lock:
            return self._settings

    def update(self, payload: Mapping[str, Any]) -> CalibrationSettings:
        """
        Replace the settings with the values in ``payload``.

        All four numeric fields are required. Server-side calculation is
        always switched on by an update; there is no field to turn it off.

        Raises:
            ValidationError: a field is missing or not a number. The
                current settings are left as they were.
        """
        logger.info(f"New Settings Received: {dict(payload)}")

        values: dict[str, float] = {}
        invalid: dict[str, str] = {}
        for json_name, attr in REQUIRED_FIELDS.items():
            if json_name not in payload:
                invalid[json_name] = "missing"
                continue
            number = parse_number(payload[json_name])
            if number is None:
                invalid[json_name] = f"not a number: {payload[json_name]!r}"
                continue
            values[attr] = number

        if invalid:
            logger.warning(f"Rejected settings update: {invalid}")
            raise ValidationError(
                "Calibration settings must include numeric cableLength, "
                "wellDepth, sensorOffset and dividerFactor",
                details={"fields": invalid},
            )

        new_settings = CalibrationSettings(**values, use_server_calc=True)
        with self._lock:
            self._settings = new_settings
        return new_settings

    def reset(self) -> None:
        """Restore the configured defaults."""
        with self._lock:
            self._settings = default_settings()


# Singleton instance
_store: CalibrationSettingsStore | None = None
_store_lock = Lock()


def get_settings_store() -> CalibrationSettingsStore:
    """Get or create the settings store singleton."""
    global _store
    if _store is None:
        with _store_lock:
            if _store is None:
                _store = CalibrationSettingsStore()
    return _store


def reset_settings_store() -> None:
    """Reset the settings store singleton (for testing)."""
    global _store
    with _store_lock:
        _store = None
