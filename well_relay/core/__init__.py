"""
Well Level Relay - Core Module
Error handling, exceptions, configuration and logging utilities
"""

from .exceptions import (
    RelayException,
    ValidationError,
    FirmwareNotFoundError,
    StorageError,
    InternalError,
)
from .errors import ERROR_CODE_STATUS_MAP

__all__ = [
    "RelayException",
    "ValidationError",
    "FirmwareNotFoundError",
    "StorageError",
    "InternalError",
    "ERROR_CODE_STATUS_MAP",
]
