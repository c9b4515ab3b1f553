#!/usr/bin/env python3
"""
Shared fixtures: synthetic "smartctl -a" output for tests.
"""

import pytest

SMART_HEADER = """smartctl 7.3 2022-02-28 r5338 [x86_64-linux-6.1.0] (local build)
Copyright (C) 2002-22, Bruce Allen, Christian Franke, www.smartmontools.org

=== START OF INFORMATION SECTION ===
Model Family:     Western Digital Red
Device Model:     WDC WD40EFRX-68N32N0
Serial Number:    {serial}
Firmware Version: 82.00A82
User Capacity:    4,000,787,030,016 bytes [4.00 TB]
SMART support is: Available - device has SMART capability.
SMART support is: Enabled

=== START OF READ SMART DATA SECTION ===
SMART overall-health self-assessment test result: PASSED

SMART Attributes Data Structure revision number: 16
Vendor Specific SMART Attributes with Thresholds:
ID# ATTRIBUTE_NAME          FLAG     VALUE WORST THRESH TYPE      UPDATED  WHEN_FAILED RAW_VALUE
"""

SMART_FOOTER = """
SMART Error Log Version: 1
No Errors Logged
"""

NO_SMART_OUTPUT = """smartctl 7.3 2022-02-28 r5338 [x86_64-linux-6.1.0] (local build)

=== START OF INFORMATION SECTION ===
Vendor:               Generic
Product:              USB Flash Disk
Serial number:        0000000000001
SMART support is:     Unavailable - device lacks SMART capability.
"""


def attribute_line(attr_id, name, current, worst, thresh, raw):
    return (f"{attr_id:>3} {name:<23} 0x002f   {current:03d}   {worst:03d}   {thresh:03d}"
            f"    Pre-fail  Always       -       {raw}")


def build_smart_output(serial='WD-WCC7K0TEST1', rows=None, realloc=0, pending=0, uncorrectable=0):
    """
    smartctl -a text for one drive.

    rows: extra (id, name, current, worst, thresh, raw) tuples placed between
    the standard attributes. Pass None for a critical value to leave its line out.
    """
    lines = [attribute_line(1, 'Raw_Read_Error_Rate', 200, 200, 51, 0)]
    if realloc is not None:
        lines.append(attribute_line(5, 'Reallocated_Sector_Ct', 200, 200, 140, realloc))
    lines.append(attribute_line(9, 'Power_On_Hours', 71, 71, 0, 21345))
    for row in rows or []:
        lines.append(attribute_line(*row))
    lines.append(attribute_line(194, 'Temperature_Celsius', 118, 106, 0, '32 (Min/Max 20/45)'))
    if pending is not None:
        lines.append(attribute_line(197, 'Current_Pending_Sector', 200, 200, 0, pending))
    if uncorrectable is not None:
        lines.append(attribute_line(198, 'Offline_Uncorrectable', 100, 253, 0, uncorrectable))
    return SMART_HEADER.format(serial=serial) + "\n".join(lines) + "\n" + SMART_FOOTER


@pytest.fixture
def smart_output():
    return build_smart_output


@pytest.fixture
def no_smart_output():
    return NO_SMART_OUTPUT
