"""
Well Level Relay - Calibration Engine
Copyright (C) 2024
SPDX-License-Identifier: GPL-3.0-or-later

Converts a raw 12-bit ADC sample from the submersible pressure sensor
into water depth figures.

Signal chain:
    ADC counts -> pin voltage (3.3 V reference)
               -> sensor voltage (undo the resistor divider)
               -> pressure (0.4 MPa per volt above the sensor offset)
               -> water column above the sensor (334.55 ft per MPa)
               -> depth from surface to water

Everything here is pure computation; no rounding is applied; the
dashboard formats values for display.
"""

from dataclasses import dataclass
from typing import Any

from ..schemas.calibration import CalibrationSettings, ReadingStatus

ADC_REFERENCE_VOLTS = 3.3
ADC_FULL_SCALE = 4095.0
ADC_MIN = 0
ADC_MAX = 4095

# Sensor transfer function slope above the zero-pressure offset
MPA_PER_VOLT = 0.4

# Hydrostatic head of fresh water
FEET_PER_MPA = 334.55

# Depth-to-water beyond which the well is considered to be running low
LOW_WATER_DEPTH_FT = 80.0


@dataclass(frozen=True)
class ConversionResult:
    """All values produced by one conversion."""

    pin_volt: float
    act_volt: float
    valid_volt: float
    press_mpa: float
    water_col: float
    depth_to_water: float
    water_below: float
    total_water_height: float

    def as_reading_fields(self) -> dict[str, float]:
        """Fields merged into the stored reading, named as the dashboard expects."""
        return {
            "actVolt": self.act_volt,
            "pressMPa": self.press_mpa,
            "waterCol": self.water_col,
            "depthToWater": self.depth_to_water,
            "waterBelow": self.water_below,
            "totalWaterHeight": self.total_water_height,
        }


def convert(raw_adc: float, settings: CalibrationSettings) -> ConversionResult:
    """
    Convert a raw ADC sample using the given calibration.

    Voltages at or below the sensor offset are clamped up to it, so the
    pressure never goes negative. Depth to water is clamped at zero when
    the inferred water column is longer than the cable. ``water_below``
    is left negative when the cable is longer than the well; that is a
    configuration problem for the operator to see, not an error.
    """
    pin_volt = raw_adc * (ADC_REFERENCE_VOLTS / ADC_FULL_SCALE)
    act_volt = pin_volt * settings.divider_factor

    valid_volt = max(act_volt, settings.sensor_offset)
    press_mpa = (valid_volt - settings.sensor_offset) * MPA_PER_VOLT

    water_col = press_mpa * FEET_PER_MPA
    depth_to_water = max(settings.cable_length - water_col, 0.0)

    water_below = settings.well_depth - settings.cable_length
    total_water_height = water_below + water_col

    return ConversionResult(
        pin_volt=pin_volt,
        act_volt=act_volt,
        valid_volt=valid_volt,
        press_mpa=press_mpa,
        water_col=water_col,
        depth_to_water=depth_to_water,
        water_below=water_below,
        total_water_height=total_water_height,
    )


def classify_status(depth_to_water: Any) -> ReadingStatus:
    """
    Classify a reading by its depth to water.

    Passthrough readings may carry the depth as a numeric string, which
    is compared by its value. No depth at all, or anything else that is
    not a number, classifies as NORMAL.
    """
    if isinstance(depth_to_water, str):
        try:
            depth_to_water = float(depth_to_water.strip())
        except ValueError:
            return ReadingStatus.NORMAL
    elif isinstance(depth_to_water, bool) or not isinstance(depth_to_water, (int, float)):
        return ReadingStatus.NORMAL
    if depth_to_water > LOW_WATER_DEPTH_FT:
        return ReadingStatus.LOW
    return ReadingStatus.NORMAL
