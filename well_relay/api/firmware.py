"""
Well Level Relay - OTA Firmware Endpoints
Copyright (C) 2024
SPDX-License-Identifier: GPL-3.0-or-later

Operators upload an image from the dashboard form; the sensor polls
GET /update and flashes whatever it downloads.
"""

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse, PlainTextResponse, RedirectResponse, Response

from ..core.exceptions import FirmwareNotFoundError
from ..schemas.common import ErrorResponse
from ..services.firmware import FIRMWARE_FILENAME, FirmwareStore, get_firmware_store

router = APIRouter()


@router.post(
    "/upload",
    status_code=302,
    responses={500: {"model": ErrorResponse}},
)
def upload_firmware(
    firmware: UploadFile = File(..., description="Firmware image (.bin)"),
    store: FirmwareStore = Depends(get_firmware_store),
) -> RedirectResponse:
    """Store a new firmware image and send the browser back to the dashboard."""
    store.store(firmware.file)
    return RedirectResponse(url="/", status_code=302)


@router.get(
    "/update",
    response_class=FileResponse,
    responses={404: {"content": {"text/plain": {}}, "description": "No firmware uploaded"}},
)
def download_firmware(
    store: FirmwareStore = Depends(get_firmware_store),
) -> Response:
    """
    Serve the current image as an attachment.

    The OTA client on the device treats any non-200 as "no update", so
    the 404 here stays plain text instead of the JSON error envelope.
    """
    try:
        path = store.fetch()
    except FirmwareNotFoundError as e:
        return PlainTextResponse(e.message, status_code=404)
    return FileResponse(
        path,
        media_type="application/octet-stream",
        filename=FIRMWARE_FILENAME,
    )
