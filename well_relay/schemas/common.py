"""
Well Level Relay - Common Schemas
Copyright (C) 2024
SPDX-License-Identifier: GPL-3.0-or-later

Shared Pydantic models used across all endpoints.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class ResponseMeta(BaseModel):
    """Metadata included in error responses."""

    timestamp: datetime = Field(description="Response timestamp in ISO 8601 format")
    request_id: Optional[str] = Field(None, description="Unique request identifier for tracing")


class ErrorDetail(BaseModel):
    """Detailed error information."""

    code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error context")
    recoverable: bool = Field(True, description="Whether client can retry the operation")
    suggested_action: Optional[str] = Field(None, description="Suggested resolution")
    operator_message: Optional[str] = Field(None, description="Plain-language message for the dashboard")


class ErrorResponse(BaseModel):
    """Standard error response envelope."""

    error: ErrorDetail
    meta: ResponseMeta
