"""
Well Level Relay - Calibration Settings Endpoints
Copyright (C) 2024
SPDX-License-Identifier: GPL-3.0-or-later
"""

from typing import Any

from fastapi import APIRouter, Body, Depends

from ..schemas.calibration import CalibrationSettings, SettingsUpdateResponse
from ..schemas.common import ErrorResponse
from ..services.settings_store import CalibrationSettingsStore, get_settings_store

router = APIRouter()


@router.get("", response_model=CalibrationSettings)
def get_settings(
    store: CalibrationSettingsStore = Depends(get_settings_store),
) -> CalibrationSettings:
    """Current calibration settings."""
    return store.read()


@router.post(
    "",
    response_model=SettingsUpdateResponse,
    responses={400: {"model": ErrorResponse}},
)
def update_settings(
    payload: dict[str, Any] = Body(
        ...,
        examples=[{"cableLength": "79", "wellDepth": "110", "sensorOffset": "0.5", "dividerFactor": "1.5"}],
    ),
    store: CalibrationSettingsStore = Depends(get_settings_store),
) -> SettingsUpdateResponse:
    """
    Replace the calibration settings.

    All four numeric fields are required, as numbers or numeric strings.
    Server-side calculation is switched on by every update.
    """
    new_settings = store.update(payload)
    return SettingsUpdateResponse(success=True, settings=new_settings)
