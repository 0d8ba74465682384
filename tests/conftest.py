"""
Well Level Relay - Test Configuration
Copyright (C) 2024
SPDX-License-Identifier: GPL-3.0-or-later

Pytest fixtures for store and API testing.
"""

import os
import tempfile
from collections.abc import Generator
from datetime import datetime
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Keep start-up side effects out of the working directory
_test_root = tempfile.mkdtemp(prefix="well-relay-test-")
os.environ["WELL_FIRMWARE_DIR"] = os.path.join(_test_root, "uploads")
os.environ["WELL_PUBLIC_DIR"] = os.path.join(_test_root, "public")

from well_relay.main import app
from well_relay.schemas.calibration import CalibrationSettings
from well_relay.services.firmware import FirmwareStore, get_firmware_store, reset_firmware_store
from well_relay.services.reading_store import LatestReadingStore, reset_reading_store
from well_relay.services.settings_store import CalibrationSettingsStore, reset_settings_store

FIXED_NOW = datetime(2024, 6, 1, 15, 4, 5)


@pytest.fixture(autouse=True)
def reset_singletons() -> Generator[None, None, None]:
    """Give every test fresh settings, reading and firmware stores."""
    reset_settings_store()
    reset_reading_store()
    reset_firmware_store()
    yield
    reset_settings_store()
    reset_reading_store()
    reset_firmware_store()


@pytest.fixture
def default_settings() -> CalibrationSettings:
    """The documented factory calibration."""
    return CalibrationSettings(
        cable_length=79.0,
        well_depth=110.0,
        sensor_offset=0.5,
        divider_factor=1.5,
        use_server_calc=True,
    )


@pytest.fixture
def settings_store(default_settings: CalibrationSettings) -> CalibrationSettingsStore:
    """Settings store starting from the factory calibration."""
    return CalibrationSettingsStore(default_settings)


@pytest.fixture
def reading_store(settings_store: CalibrationSettingsStore) -> LatestReadingStore:
    """Reading store with a fixed clock."""
    return LatestReadingStore(settings_store, clock=lambda: FIXED_NOW)


@pytest.fixture
def firmware_store(tmp_path: Path) -> FirmwareStore:
    """Firmware store writing into a per-test directory."""
    return FirmwareStore(tmp_path / "uploads")


@pytest.fixture
def client(firmware_store: FirmwareStore) -> Generator[TestClient, None, None]:
    """Create test client with an isolated firmware directory."""
    app.dependency_overrides[get_firmware_store] = lambda: firmware_store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
