#!/usr/bin/env python3
"""
smartcheck - Drive Health Decision Engine

Copyright (C) 2026 Magnus S. Modig

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with this program. If not, see <https://www.gnu.org/licenses/>.

This module provides a deterministic decision engine that classifies a drive
as Good, Warn or Bad from its attribute table and critical raw values.
The evaluation matches what openmediavault shows in its SMART page.
"""

from enum import Enum
from typing import Dict, List, Optional, Any

from smart_parser import AttributeRow, CriticalSnapshot, CRITICAL_METRICS


class Status(Enum):
    """Drive verdict levels"""
    GOOD = "Good"
    WARN = "Warn"
    BAD = "Bad"

    def __ge__(self, other):
        order = [Status.GOOD, Status.WARN, Status.BAD]
        return order.index(self) >= order.index(other)

    def __gt__(self, other):
        order = [Status.GOOD, Status.WARN, Status.BAD]
        return order.index(self) > order.index(other)


REASON_PREVIOUSLY_BELOW = "attribute(s) have previously dipped below threshold"
REASON_CURRENTLY_BELOW = "attribute(s) are currently below threshold"
REASON_CRITICAL_ABOVE_ZERO = "critical attribute(s) are above zero"


def _escalate(current: Status, new: Status) -> Status:
    """Raise the verdict; Bad is never downgraded"""
    return new if new > current else current


def count_worst_below_threshold(table: List[AttributeRow]) -> int:
    """Rows whose worst-ever value has reached the vendor threshold"""
    return sum(1 for row in table if row.worst <= row.threshold)


def count_current_below_threshold(table: List[AttributeRow]) -> int:
    """Rows whose current value is at or below the vendor threshold"""
    return sum(1 for row in table if row.current <= row.threshold)


def critical_above_zero(snapshot: Optional[CriticalSnapshot]) -> List[str]:
    """Critical metrics that are reported and greater than zero"""
    if snapshot is None:
        return []
    return [
        metric for metric in CRITICAL_METRICS
        if snapshot.value(metric) is not None and snapshot.value(metric) > 0
    ]


def evaluate_drive_health(table: List[AttributeRow],
                          snapshot: Optional[CriticalSnapshot]) -> Dict[str, Any]:
    """
    Pure decision engine that evaluates one drive for one run.

    Args:
        table: Parsed attribute rows (may be empty)
        snapshot: Critical raw values of this run

    Returns:
        Decision dictionary with:
            - status: "Good", "Warn" or "Bad"
            - reasons: List of explanation strings (empty only when Good)
            - counts: Number of rows that failed each threshold check
            - notes: Informational strings that don't affect status
    """
    decision = {
        'status': Status.GOOD,
        'reasons': [],
        'counts': {
            'worst_below_threshold': count_worst_below_threshold(table),
            'current_below_threshold': count_current_below_threshold(table)
        },
        'notes': []
    }

    if not table:
        decision['notes'].append("No attribute table found in smartctl output")

    # === HISTORICAL WORST VS THRESHOLD ===
    # One reason regardless of how many attributes dipped
    if decision['counts']['worst_below_threshold'] > 0:
        decision['status'] = _escalate(decision['status'], Status.WARN)
        decision['reasons'].append(REASON_PREVIOUSLY_BELOW)

    # === CURRENT VS THRESHOLD ===
    if decision['counts']['current_below_threshold'] > 0:
        decision['status'] = _escalate(decision['status'], Status.BAD)
        decision['reasons'].append(REASON_CURRENTLY_BELOW)

    # === CRITICAL RAW VALUES ===
    if critical_above_zero(snapshot):
        decision['status'] = _escalate(decision['status'], Status.BAD)
        decision['reasons'].append(REASON_CRITICAL_ABOVE_ZERO)

    if snapshot is not None:
        missing = [metric for metric in CRITICAL_METRICS if snapshot.value(metric) is None]
        if missing:
            decision['notes'].append(f"Not reported by drive: {', '.join(missing)}")

    # Convert status enum to string for reporting
    decision['status'] = decision['status'].value

    return decision
