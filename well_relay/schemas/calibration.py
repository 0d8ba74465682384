"""
Well Level Relay - Calibration Schemas
Copyright (C) 2024
SPDX-License-Identifier: GPL-3.0-or-later

Pydantic models for calibration settings and sensor readings.
JSON field names are camelCase to match the device firmware and dashboard.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ReadingStatus(str, Enum):
    """Classification of the latest reading."""

    WAITING = "WAITING"  # Nothing received since process start
    NORMAL = "NORMAL"
    LOW = "LOW"  # Water surface deeper than the low-water threshold


class CalibrationSettings(BaseModel):
    """
    Calibration model for converting raw ADC counts to depth.

    Instances are immutable; the settings store swaps whole values.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    cable_length: float = Field(description="Cable from surface anchor to sensor (ft)")
    well_depth: float = Field(description="Surface to well bottom (ft)")
    sensor_offset: float = Field(description="Zero-pressure sensor voltage (V)")
    divider_factor: float = Field(description="Pin voltage to sensor voltage ratio")
    use_server_calc: bool = Field(
        True, description="Recompute readings server-side instead of trusting the device"
    )


class SettingsUpdateResponse(BaseModel):
    """Response for a successful settings update."""

    success: bool = Field(True, description="Always true; failures use the error envelope")
    settings: CalibrationSettings
