"""
Well Level Relay - Error Response Handlers
Copyright (C) 2024
SPDX-License-Identifier: GPL-3.0-or-later

Exception handlers and error response formatting.
"""

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from fastapi import Request
from fastapi.responses import JSONResponse

from .exceptions import InternalError, RelayException
from .logging import get_logger

logger = get_logger(__name__)

# Map error codes to HTTP status codes
ERROR_CODE_STATUS_MAP: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "FIRMWARE_NOT_FOUND": 404,
    "STORAGE_ERROR": 500,
    "INTERNAL_ERROR": 500,
}

# Plain-language messages shown on the dashboard next to the error code
OPERATOR_MESSAGES: dict[str, str] = {
    "VALIDATION_ERROR": "The values entered are incomplete or not numbers. Nothing was changed.",
    "FIRMWARE_NOT_FOUND": "No firmware has been uploaded yet.",
    "STORAGE_ERROR": "The firmware file could not be saved. The previous firmware is still in use.",
    "INTERNAL_ERROR": "An unexpected error occurred. If this persists, contact support.",
}


def get_operator_message(error_code: str) -> str:
    """Get operator-friendly message for an error code."""
    return OPERATOR_MESSAGES.get(error_code, "An error occurred. Please try again.")


def get_request_id(request: Request) -> str:
    """Get or generate request ID for tracing."""
    return getattr(request.state, "request_id", str(uuid4()))


def build_error_response(
    error: RelayException,
    request_id: str | None = None
) -> dict[str, Any]:
    """Build standardized error response envelope with operator-friendly message."""
    error_dict = error.to_dict()
    error_dict["operator_message"] = get_operator_message(error.code)

    return {
        "error": error_dict,
        "meta": {
            "timestamp": datetime.now(UTC).isoformat(),
            "request_id": request_id or str(uuid4()),
        }
    }


async def relay_exception_handler(request: Request, exc: RelayException) -> JSONResponse:
    """Handle RelayException and return formatted error response."""
    status_code = ERROR_CODE_STATUS_MAP.get(exc.code, 500)
    request_id = get_request_id(request)

    return JSONResponse(
        status_code=status_code,
        content=build_error_response(exc, request_id)
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    request_id = get_request_id(request)
    logger.error(f"Unhandled exception (request_id={request_id}): {exc}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content=build_error_response(InternalError(), request_id)
    )
