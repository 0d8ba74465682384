"""
Well Level Relay - Services Layer
Copyright (C) 2024
SPDX-License-Identifier: GPL-3.0-or-later

Calibration, reading and firmware state shared by the API routes.
"""

from .calibration import ConversionResult, classify_status, convert
from .firmware import FirmwareStore, get_firmware_store
from .reading_store import LatestReadingStore, get_reading_store
from .settings_store import CalibrationSettingsStore, get_settings_store

__all__ = [
    "CalibrationSettingsStore",
    "ConversionResult",
    "FirmwareStore",
    "LatestReadingStore",
    "classify_status",
    "convert",
    "get_firmware_store",
    "get_reading_store",
    "get_settings_store",
]
