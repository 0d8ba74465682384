"""
Well Level Relay - API Schemas
Copyright (C) 2024
SPDX-License-Identifier: GPL-3.0-or-later

Pydantic models for request/response validation.
"""

from .calibration import CalibrationSettings, ReadingStatus, SettingsUpdateResponse
from .common import ErrorDetail, ErrorResponse, ResponseMeta

__all__ = [
    "CalibrationSettings",
    "ReadingStatus",
    "SettingsUpdateResponse",
    "ErrorDetail",
    "ErrorResponse",
    "ResponseMeta",
]
