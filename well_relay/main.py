"""
Well Level Relay - FastAPI Application
Copyright (C) 2024
SPDX-License-Identifier: GPL-3.0-or-later

Telemetry relay for the well water-level sensor: converts raw readings,
serves the latest one to the dashboard, and hosts the OTA firmware image.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, PlainTextResponse, Response

from .api import api_router, firmware_router
from .core.config import config
from .core.errors import generic_exception_handler, relay_exception_handler
from .core.exceptions import RelayException
from .core.logging import (
    generate_correlation_id,
    get_logger,
    log_dashboard_missing,
    set_correlation_id,
    setup_logging,
)
from .services.firmware import FirmwareStore, get_firmware_store
from .services.reading_store import LatestReadingStore, get_reading_store

setup_logging(
    level=config.logging.LEVEL,
    structured=config.logging.STRUCTURED,
    log_file=config.logging.FILE,
)

logger = get_logger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown."""
    logger.info("Starting Well Level Relay")

    firmware = get_firmware_store()
    firmware.ensure_directory()
    logger.info(f"Firmware directory ready at {firmware.directory}")

    yield

    logger.info("Shutting down Well Level Relay")


app = FastAPI(
    title="Well Level Relay",
    description="Calibration relay and OTA server for the well water-level sensor",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.server.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_correlation_id(request: Request, call_next):
    """Tag each request with a correlation ID for log tracing."""
    correlation_id = (
        request.headers.get("X-Correlation-ID") or
        request.headers.get("X-Request-ID") or
        generate_correlation_id()
    )

    request.state.correlation_id = correlation_id
    request.state.request_id = correlation_id

    set_correlation_id(correlation_id)
    logger.debug(f"Request started: {request.method} {request.url.path}")

    try:
        response = await call_next(request)
        response.headers["X-Correlation-ID"] = correlation_id
        return response
    finally:
        set_correlation_id(None)


app.add_exception_handler(RelayException, relay_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


app.include_router(api_router, prefix="/api")
app.include_router(firmware_router, tags=["OTA Firmware"])


@app.get("/", include_in_schema=False)
def dashboard() -> Response:
    """Serve the dashboard page from the public directory."""
    index_path = Path(config.public_dir) / "index.html"
    if not index_path.is_file():
        log_dashboard_missing(str(index_path))
        return PlainTextResponse(
            f"Dashboard not found: {index_path.resolve()} does not exist. "
            "Place index.html in the public directory or set WELL_PUBLIC_DIR.",
            status_code=404,
        )
    return FileResponse(index_path, media_type="text/html")


@app.get("/health")
def health_check(
    readings: LatestReadingStore = Depends(get_reading_store),
    firmware: FirmwareStore = Depends(get_firmware_store),
) -> Dict[str, Any]:
    """
    Health check endpoint with subsystem status.

    Reports whether the sensor has reported since start-up and whether
    an OTA image is available. The relay has no external dependencies,
    so it is always "healthy" while it answers.
    """
    latest = readings.read()

    return {
        "status": "healthy",
        "version": VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "subsystems": {
            "sensor": {
                "status": latest.get("status"),
                "last_update": latest.get("lastUpdate"),
                "firmware_version": latest.get("fwVer"),
            },
            "firmware": {
                "status": "available" if firmware.exists() else "none",
                "directory": str(firmware.directory),
            },
        },
    }


def run() -> None:
    """Console entry point."""
    import uvicorn
    uvicorn.run(app, host=config.server.HOST, port=config.server.PORT)


if __name__ == "__main__":
    run()
