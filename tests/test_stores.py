"""
Well Level Relay - Settings and Reading Store Tests
Copyright (C) 2024
SPDX-License-Identifier: GPL-3.0-or-later

Unit tests for the calibration settings store and the latest reading store.
"""

import threading

import pytest

from well_relay.core.exceptions import ValidationError
from well_relay.schemas.calibration import CalibrationSettings
from well_relay.services.calibration import convert
from well_relay.services.reading_store import (
    INITIAL_READING,
    LatestReadingStore,
    format_local_time,
    get_reading_store,
)
from well_relay.services.settings_store import (
    CalibrationSettingsStore,
    get_settings_store,
    parse_number,
)

from conftest import FIXED_NOW


VALID_UPDATE = {
    "cableLength": "85",
    "wellDepth": 120,
    "sensorOffset": "0.45",
    "dividerFactor": 1.6,
}


class TestSettingsStore:
    """Tests for CalibrationSettingsStore."""

    def test_defaults(self):
        """A fresh store holds the documented factory calibration."""
        settings = CalibrationSettingsStore().read()
        assert settings.cable_length == 79.0
        assert settings.well_depth == 110.0
        assert settings.sensor_offset == 0.5
        assert settings.divider_factor == 1.5
        assert settings.use_server_calc is True

    def test_update_accepts_numbers_and_numeric_strings(self, settings_store):
        """Numeric strings from the dashboard form are parsed."""
        updated = settings_store.update(VALID_UPDATE)

        assert updated.cable_length == 85.0
        assert updated.well_depth == 120.0
        assert updated.sensor_offset == 0.45
        assert updated.divider_factor == 1.6
        assert settings_store.read() is updated

    def test_update_forces_server_calc(self):
        """An update always switches server-side calculation on."""
        store = CalibrationSettingsStore(CalibrationSettings(
            cable_length=79.0, well_depth=110.0, sensor_offset=0.5,
            divider_factor=1.5, use_server_calc=False,
        ))
        updated = store.update({**VALID_UPDATE, "useServerCalc": False})
        assert updated.use_server_calc is True

    @pytest.mark.parametrize("bad_value", ["abc", "", None, True, "nan", "inf", [1]])
    def test_update_rejects_non_numeric(self, settings_store, default_settings, bad_value):
        """A non-numeric field rejects the whole update and keeps the old value."""
        before = settings_store.read()

        with pytest.raises(ValidationError) as exc_info:
            settings_store.update({**VALID_UPDATE, "wellDepth": bad_value})

        assert exc_info.value.code == "VALIDATION_ERROR"
        assert "wellDepth" in exc_info.value.details["fields"]
        assert settings_store.read() is before
        assert settings_store.read() == default_settings

    def test_update_rejects_missing_field(self, settings_store):
        """Partial updates are not supported."""
        partial = {k: v for k, v in VALID_UPDATE.items() if k != "dividerFactor"}

        with pytest.raises(ValidationError) as exc_info:
            settings_store.update(partial)

        assert exc_info.value.details["fields"] == {"dividerFactor": "missing"}
        assert settings_store.read().divider_factor == 1.5

    def test_update_reports_every_bad_field(self, settings_store):
        with pytest.raises(ValidationError) as exc_info:
            settings_store.update({"cableLength": "x", "wellDepth": "y"})
        assert set(exc_info.value.details["fields"]) == {
            "cableLength", "wellDepth", "sensorOffset", "dividerFactor",
        }

    def test_reset(self, settings_store):
        settings_store.update(VALID_UPDATE)
        settings_store.reset()
        assert settings_store.read().cable_length == 79.0

    def test_singleton(self):
        assert get_settings_store() is get_settings_store()

    @pytest.mark.parametrize("value,expected", [
        (3, 3.0),
        (2.5, 2.5),
        (" 7.25 ", 7.25),
        ("-1", -1.0),
        ("1e2", 100.0),
        ("12abc", None),
        (False, None),
        ({}, None),
        (10**400, None),
    ])
    def test_parse_number(self, value, expected):
        assert parse_number(value) == expected


class TestReadingStore:
    """Tests for LatestReadingStore."""

    def test_initial_reading(self, reading_store):
        """Before any ingest the dashboard sees the WAITING placeholder."""
        assert reading_store.read() == {
            "rawADC": 0,
            "depthToWater": 0,
            "status": "WAITING",
            "fwVer": "0.0.0",
            "lastUpdate": "Never",
        }

    def test_ingest_converts_with_current_settings(self, reading_store, settings_store):
        """Server-calc mode adds the derived fields and the calibration used."""
        reading = reading_store.ingest({"rawADC": 2048, "fwVer": "1.2.0"})

        expected = convert(2048, settings_store.read())
        assert reading["rawADC"] == 2048
        assert reading["fwVer"] == "1.2.0"
        assert reading["actVolt"] == expected.act_volt
        assert reading["pressMPa"] == expected.press_mpa
        assert reading["waterCol"] == expected.water_col
        assert reading["depthToWater"] == 0
        assert reading["waterBelow"] == 31.0
        assert reading["totalWaterHeight"] == expected.total_water_height
        assert reading["calibratedWith"] == settings_store.read()
        assert reading["status"] == "NORMAL"
        assert reading["lastUpdate"] == "3:04:05 PM"

    def test_calibrated_with_is_the_settings_snapshot(self, settings_store):
        """The stored reading references the settings object read at ingest."""
        store = LatestReadingStore(settings_store, clock=lambda: FIXED_NOW)
        store.ingest({"rawADC": 100})

        with store._lock:
            stored = store._reading
        assert stored["calibratedWith"] is settings_store.read()

    def test_zero_raw_adc_runs_the_engine(self, reading_store):
        """rawADC 0 is a real reading, not a missing one."""
        reading = reading_store.ingest({"rawADC": 0, "fwVer": "1.0.0", "depthToWater": 3})

        assert reading["actVolt"] == 0
        assert reading["pressMPa"] == 0
        assert reading["waterCol"] == 0
        assert reading["depthToWater"] == 79.0
        assert "calibratedWith" in reading
        assert reading["status"] == "NORMAL"

    def test_device_fields_are_kept(self, reading_store):
        """Extra device fields pass through; derived ones are recomputed."""
        reading = reading_store.ingest({
            "rawADC": 1000,
            "fwVer": "2.0.1",
            "rssi": -61,
            "depthToWater": 12.5,
        })
        assert reading["rssi"] == -61
        assert reading["depthToWater"] == convert(1000, reading["calibratedWith"]).depth_to_water

    def test_passthrough_when_server_calc_off(self):
        """With server calculation off the device's fields are stored verbatim."""
        settings = CalibrationSettings(
            cable_length=79.0, well_depth=110.0, sensor_offset=0.5,
            divider_factor=1.5, use_server_calc=False,
        )
        store = LatestReadingStore(CalibrationSettingsStore(settings), clock=lambda: FIXED_NOW)

        reading = store.ingest({"rawADC": 1000, "depthToWater": 45})

        assert reading == {
            "rawADC": 1000,
            "depthToWater": 45,
            "lastUpdate": "3:04:05 PM",
            "status": "NORMAL",
        }

    @pytest.mark.parametrize("sample", [
        {"fwVer": "1.0.0", "depthToWater": 90},
        {"rawADC": None, "fwVer": "1.0.0", "depthToWater": 90},
    ])
    def test_passthrough_when_raw_adc_absent(self, reading_store, sample):
        """No rawADC means the device's own depth is trusted."""
        reading = reading_store.ingest(sample)

        assert "actVolt" not in reading
        assert "calibratedWith" not in reading
        assert reading["depthToWater"] == 90
        assert reading["status"] == "LOW"

    def test_passthrough_string_depth_classified_by_value(self, reading_store):
        reading = reading_store.ingest({"fwVer": "1.0.0", "depthToWater": "90"})
        assert reading["depthToWater"] == "90"
        assert reading["status"] == "LOW"

    def test_low_status_boundary(self):
        """80 ft exactly is NORMAL; anything deeper is LOW."""
        at_threshold = CalibrationSettingsStore(CalibrationSettings(
            cable_length=80.0, well_depth=110.0, sensor_offset=0.5, divider_factor=1.5,
        ))
        store = LatestReadingStore(at_threshold)
        reading = store.ingest({"rawADC": 0})
        assert reading["depthToWater"] == 80.0
        assert reading["status"] == "NORMAL"

        below_threshold = CalibrationSettingsStore(CalibrationSettings(
            cable_length=80.5, well_depth=110.0, sensor_offset=0.5, divider_factor=1.5,
        ))
        store = LatestReadingStore(below_threshold)
        assert store.ingest({"rawADC": 0})["status"] == "LOW"

    @pytest.mark.parametrize("sample", [
        {"rawADC": "2048"},
        {"rawADC": True},
        {"rawADC": float("nan")},
        {"rawADC": [1, 2]},
        {"rawADC": 10**400},
    ])
    def test_malformed_raw_adc_rejected(self, reading_store, sample):
        """A rawADC that is not a number is rejected and nothing is stored."""
        reading_store.ingest({"rawADC": 500, "fwVer": "1.0.0"})
        before = reading_store.read()

        with pytest.raises(ValidationError):
            reading_store.ingest(sample)

        assert reading_store.read() == before

    @pytest.mark.parametrize("sample", [[1, 2, 3], "rawADC=5", 42, None])
    def test_non_object_sample_rejected(self, reading_store, sample):
        with pytest.raises(ValidationError):
            reading_store.ingest(sample)
        assert reading_store.read()["status"] == "WAITING"

    def test_out_of_range_raw_adc_still_converted(self, reading_store):
        reading = reading_store.ingest({"rawADC": 5000})
        assert reading["waterCol"] > 0
        assert reading["depthToWater"] == 0

    def test_latest_reading_wins(self, reading_store):
        """Each ingest replaces the whole previous reading."""
        reading_store.ingest({"rawADC": 100, "fwVer": "1.0.0", "rssi": -70})
        reading_store.ingest({"rawADC": 200, "fwVer": "1.0.1"})

        reading = reading_store.read()
        assert reading["rawADC"] == 200
        assert reading["fwVer"] == "1.0.1"
        assert "rssi" not in reading

    def test_read_returns_a_copy(self, reading_store):
        """Mutating a returned reading does not touch the store."""
        reading_store.ingest({"rawADC": 100, "tags": ["a"]})
        reading = reading_store.read()
        reading["rawADC"] = 9999
        reading["tags"].append("b")

        fresh = reading_store.read()
        assert fresh["rawADC"] == 100
        assert fresh["tags"] == ["a"]

    def test_ingest_does_not_keep_a_reference_to_the_sample(self, reading_store):
        sample = {"rawADC": 100, "tags": ["a"]}
        reading_store.ingest(sample)
        sample["tags"].append("b")
        assert reading_store.read()["tags"] == ["a"]

    def test_settings_change_applies_to_next_ingest(self, reading_store, settings_store):
        reading_store.ingest({"rawADC": 0})
        assert reading_store.read()["depthToWater"] == 79.0

        settings_store.update({
            "cableLength": 90, "wellDepth": 110, "sensorOffset": 0.5, "dividerFactor": 1.5,
        })
        # Stored reading keeps the calibration it was made with
        assert reading_store.read()["calibratedWith"].cable_length == 79.0

        reading_store.ingest({"rawADC": 0})
        assert reading_store.read()["depthToWater"] == 90.0
        assert reading_store.read()["status"] == "LOW"

    def test_reset(self, reading_store):
        reading_store.ingest({"rawADC": 100})
        reading_store.reset()
        assert reading_store.read() == INITIAL_READING

    def test_singleton_uses_settings_singleton(self):
        store = get_reading_store()
        get_settings_store().update(VALID_UPDATE)
        reading = store.ingest({"rawADC": 0})
        assert reading["depthToWater"] == 85.0


class TestReadingStoreConcurrency:
    """Readers never observe a reading mixed from two ingests."""

    def test_concurrent_ingest_and_read(self, reading_store, settings_store):
        stop = threading.Event()
        errors: list[str] = []

        def writer(raw_values: list[int]) -> None:
            while not stop.is_set():
                for raw in raw_values:
                    reading_store.ingest({"rawADC": raw, "fwVer": f"fw-{raw}"})

        def reader() -> None:
            for _ in range(2000):
                reading = reading_store.read()
                if reading["status"] == "WAITING":
                    continue
                raw = reading["rawADC"]
                expected = convert(raw, reading["calibratedWith"])
                if reading["fwVer"] != f"fw-{raw}" or reading["waterCol"] != expected.water_col:
                    errors.append(f"torn reading: {reading}")

        def tuner() -> None:
            cable = 70
            while not stop.is_set():
                cable = 70 if cable == 90 else cable + 1
                settings_store.update({
                    "cableLength": cable, "wellDepth": 110,
                    "sensorOffset": 0.5, "dividerFactor": 1.5,
                })

        writers = [
            threading.Thread(target=writer, args=([0, 1000, 2048],)),
            threading.Thread(target=writer, args=([500, 3000, 4095],)),
            threading.Thread(target=tuner),
        ]
        readers = [threading.Thread(target=reader) for _ in range(4)]

        for t in writers + readers:
            t.start()
        for t in readers:
            t.join()
        stop.set()
        for t in writers:
            t.join()

        assert errors == []


def test_format_local_time():
    from datetime import datetime
    assert format_local_time(datetime(2024, 1, 1, 0, 5, 9)) == "12:05:09 AM"
    assert format_local_time(datetime(2024, 1, 1, 9, 30, 0)) == "9:30:00 AM"
    assert format_local_time(datetime(2024, 1, 1, 23, 59, 59)) == "11:59:59 PM"
