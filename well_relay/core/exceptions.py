"""
Well Level Relay - Custom Exceptions
Copyright (C) 2024
SPDX-License-Identifier: GPL-3.0-or-later

Standardized exception classes for relay operations.
All exceptions follow the response envelope pattern.
"""

from typing import Any


class RelayException(Exception):
    """Base exception for all relay errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
        recoverable: bool = True,
        suggested_action: str | None = None
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable
        self.suggested_action = suggested_action

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to error response dictionary."""
        result = {
            "code": self.code,
            "message": self.message,
            "recoverable": self.recoverable,
        }
        if self.details:
            result["details"] = self.details
        if self.suggested_action:
            result["suggested_action"] = self.suggested_action
        return result


class ValidationError(RelayException):
    """Request validation failed."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            details=details,
            recoverable=True,
            suggested_action="Check request parameters and try again"
        )


class FirmwareNotFoundError(RelayException):
    """No firmware artifact has been uploaded yet."""

    def __init__(self, artifact: str = "firmware.bin"):
        super().__init__(
            code="FIRMWARE_NOT_FOUND",
            message="No update",
            details={"artifact": artifact},
            recoverable=True,
            suggested_action="Upload a firmware image via POST /upload"
        )


class StorageError(RelayException):
    """Firmware artifact could not be written."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            code="STORAGE_ERROR",
            message=message,
            details=details,
            recoverable=True,
            suggested_action="Check disk space and firmware directory permissions"
        )


class InternalError(RelayException):
    """Unexpected server error."""

    def __init__(self, message: str = "An unexpected error occurred"):
        super().__init__(
            code="INTERNAL_ERROR",
            message=message,
            details={},
            recoverable=False,
            suggested_action="Contact system administrator"
        )
