"""
Well Level Relay - Sensor Reading Endpoints
Copyright (C) 2024
SPDX-License-Identifier: GPL-3.0-or-later
"""

from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, PlainTextResponse

from ..schemas.common import ErrorResponse
from ..services.reading_store import LatestReadingStore, get_reading_store

router = APIRouter()


@router.post(
    "",
    response_class=PlainTextResponse,
    responses={400: {"model": ErrorResponse}},
)
def ingest_reading(
    sample: Any = Body(..., description="Raw sample pushed by the sensor"),
    store: LatestReadingStore = Depends(get_reading_store),
) -> str:
    """
    Receive a sample from the sensor.

    The device only checks for a 200; the body text is kept for
    firmware that logs it.
    """
    store.ingest(sample)
    return "Data Processed"


@router.get("")
def get_latest_reading(
    store: LatestReadingStore = Depends(get_reading_store),
) -> JSONResponse:
    """Latest reading for the dashboard, including the calibration it used."""
    return JSONResponse(content=jsonable_encoder(store.read()))
