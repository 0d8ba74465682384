"""
Well Level Relay - API Module
Copyright (C) 2024
SPDX-License-Identifier: GPL-3.0-or-later
"""

from fastapi import APIRouter

from .firmware import router as firmware_router
from .readings import router as readings_router
from .settings import router as settings_router

api_router = APIRouter()

# Paths are fixed by the deployed sensor firmware and dashboard
api_router.include_router(readings_router, prefix="/data", tags=["Sensor Readings"])
api_router.include_router(settings_router, prefix="/settings", tags=["Calibration"])

__all__ = ["api_router", "firmware_router"]
