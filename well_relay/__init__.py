"""
Well Level Relay
Copyright (C) 2024
SPDX-License-Identifier: GPL-3.0-or-later

Calibration relay and OTA firmware server for a well water-level sensor.
"""
