"""
Well Level Relay - Latest Reading Store
Copyright (C) 2024
SPDX-License-Identifier: GPL-3.0-or-later

Keeps the most recent reading pushed by the well sensor.

Only one reading is retained. Every ingest builds a complete new reading
and publishes it with a single assignment under the lock; the dashboard
gets a copy, so it never sees half of one reading and half of another.

A settings update that lands while an ingest is converting is not
waited for: that ingest is stored with the settings it read, and the
reading's ``calibratedWith`` field shows which ones.
"""

import copy
import math
from collections.abc import Callable, Mapping
from datetime import datetime
from threading import Lock
from typing import Any

from ..core.exceptions import ValidationError
from ..core.logging import get_logger
from ..schemas.calibration import ReadingStatus
from .calibration import ADC_MAX, ADC_MIN, classify_status, convert
from .settings_store import CalibrationSettingsStore, get_settings_store

logger = get_logger(__name__)

INITIAL_READING: dict[str, Any] = {
    "rawADC": 0,
    "depthToWater": 0,
    "status": ReadingStatus.WAITING.value,
    "fwVer": "0.0.0",
    "lastUpdate": "Never",
}


def _is_finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int too large for a float
        return False


def format_local_time(moment: datetime) -> str:
    """Time of day as shown on the dashboard, e.g. ``3:04:05 PM``."""
    return moment.strftime("%I:%M:%S %p").lstrip("0")


def _format_depth(depth: Any) -> str:
    if _is_finite_number(depth):
        return f"{depth:.1f}"
    return "n/a"


class LatestReadingStore:
    """Thread-safe holder for the latest sensor reading."""

    def __init__(
        self,
        settings_store: CalibrationSettingsStore,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._settings_store = settings_store
        self._clock = clock
        self._lock = Lock()
        self._reading: dict[str, Any] = dict(INITIAL_READING)

    def read(self) -> dict[str, Any]:
        """Return a copy of the current reading."""
        with self._lock:
            reading = self._reading
        return copy.deepcopy(reading)

    def ingest(self, sample: Any) -> dict[str, Any]:
        """
        Process one sample pushed by the device and make it the latest reading.

        With server-side calculation on and ``rawADC`` present, the sample
        is converted with the current calibration; a ``rawADC`` of 0 is a
        real reading and is converted like any other. Otherwise the
        device's own fields are stored as sent.

        Raises:
            ValidationError: the sample is not an object, or its rawADC
                cannot be converted. The stored reading is unchanged.
        """
        if not isinstance(sample, Mapping):
            raise ValidationError(
                "Sensor sample must be a JSON object",
                details={"received_type": type(sample).__name__},
            )

        settings = self._settings_store.read()
        raw_adc = sample.get("rawADC")

        if settings.use_server_calc and raw_adc is not None:
            if not _is_finite_number(raw_adc):
                raise ValidationError(
                    "rawADC must be a number",
                    details={"rawADC": repr(raw_adc)},
                )
            if not ADC_MIN <= raw_adc <= ADC_MAX:
                logger.warning(
                    f"rawADC {raw_adc} outside {ADC_MIN}..{ADC_MAX}, converting anyway",
                    extra={"raw_adc": raw_adc},
                )
            result = convert(raw_adc, settings)
            reading = copy.deepcopy(dict(sample))
            reading.update(result.as_reading_fields())
            reading["calibratedWith"] = settings
        else:
            reading = copy.deepcopy(dict(sample))

        reading["lastUpdate"] = format_local_time(self._clock())
        reading["status"] = classify_status(reading.get("depthToWater")).value

        with self._lock:
            self._reading = reading

        logger.info(
            f"Data Updated: Depth {_format_depth(reading.get('depthToWater'))} ft",
            extra={
                "raw_adc": raw_adc,
                "depth_ft": reading.get("depthToWater"),
                "fw_ver": reading.get("fwVer"),
            },
        )
        return copy.deepcopy(reading)

    def reset(self) -> None:
        """Go back to the WAITING reading."""
        with self._lock:
            self._reading = dict(INITIAL_READING)


# Singleton instance
_store: LatestReadingStore | None = None
_store_lock = Lock()


def get_reading_store() -> LatestReadingStore:
    """Get or create the reading store singleton."""
    global _store
    if _store is None:
        with _store_lock:
            if _store is None:
                _store = LatestReadingStore(get_settings_store())
    return _store


def reset_reading_store() -> None:
    """Reset the reading store singleton (for testing)."""
    global _store
    with _store_lock:
        _store = None
