#!/usr/bin/env python3
"""
smartcheck - smartctl Output Parser

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

Turns the plain-text output of "smartctl -a" into structured records:
the vendor attribute table, the three critical raw values tracked in
the history ledger, the serial number and the overall-health line.
"""

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Union

# Critical metrics in ledger column order.
# Reallocated (5), Pending (197) and Offline Uncorrectable (198) are the
# attributes Backblaze found most predictive of failure.
CRITICAL_METRICS = [
    'ReallocatedSectorCount',
    'CurrentPendingSectorCount',
    'OfflineUncorrectableCount',
]

DEFAULT_CRITICAL_LABELS = {
    'ReallocatedSectorCount': '5 Reallocated_Sector_Ct',
    'CurrentPendingSectorCount': '197 Current_Pending_Sector',
    'OfflineUncorrectableCount': '198 Offline_Uncorrectable',
}

_LEADING_DIGITS = re.compile(r'^(\d+)')
_SERIAL_LINE = re.compile(r'^\s*Serial Number:\s*(\S+)', re.IGNORECASE | re.MULTILINE)


@dataclass
class AttributeRow:
    id: Union[int, str]  # vendor tables sometimes use codes like "B1"
    name: str
    current: int
    worst: int
    threshold: int


@dataclass
class CriticalSnapshot:
    timestamp: date
    metrics: Dict[str, Optional[int]]

    def value(self, metric: str) -> Optional[int]:
        return self.metrics.get(metric)


@dataclass
class ColumnLayout:
    """
    Where each field sits in a whitespace-split attribute line.

    smartctl prints the ATA table as:
        ID# ATTRIBUTE_NAME FLAG VALUE WORST THRESH TYPE UPDATED WHEN_FAILED RAW_VALUE
    Vendors that shift columns only need a different layout, not new code.
    """
    markers: List[str] = field(default_factory=lambda: ['Raw_Read_Error_Rate', 'ID# ATTRIBUTE_NAME'])
    id_column: int = 0
    name_column: int = 1
    current_column: int = 3
    worst_column: int = 4
    threshold_column: int = 5
    raw_column: int = 9
    critical_labels: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_CRITICAL_LABELS))

    @property
    def min_tokens(self) -> int:
        return max(self.id_column, self.name_column, self.current_column,
                   self.worst_column, self.threshold_column) + 1

    @classmethod
    def from_config(cls, section: Optional[Dict[str, Any]]) -> 'ColumnLayout':
        """Build a layout from the 'attribute_layout' config section"""
        layout = cls()
        if not section:
            return layout

        for name in ('id_column', 'name_column', 'current_column',
                     'worst_column', 'threshold_column', 'raw_column'):
            if name in section:
                setattr(layout, name, int(section[name]))

        if section.get('markers'):
            layout.markers = list(section['markers'])

        labels = dict(DEFAULT_CRITICAL_LABELS)
        labels.update(section.get('critical_labels') or {})
        layout.critical_labels = {metric: labels[metric] for metric in CRITICAL_METRICS}
        return layout


def _to_int(token: str) -> Optional[int]:
    try:
        return int(token)
    except (TypeError, ValueError):
        return None


def parse_attribute_table(text: str, layout: Optional[ColumnLayout] = None) -> List[AttributeRow]:
    """
    Extract the vendor attribute table from smartctl output.

    Collection starts at the first line containing one of the layout markers
    and stops at the next blank line. Lines that don't yield integer
    current/worst/threshold fields (header line, model-specific noise) are
    skipped; a non-numeric id such as "B1" is kept as text. No marker means
    no table: an empty list, never an exception.
    """
    layout = layout or ColumnLayout()
    rows: List[AttributeRow] = []
    collecting = False

    for line in (text or '').splitlines():
        if not collecting:
            if any(marker in line for marker in layout.markers):
                collecting = True
            else:
                continue

        if not line.strip():
            break

        tokens = line.split()
        if len(tokens) < max(layout.min_tokens, 6):
            continue

        id_token = tokens[layout.id_column]
        current = _to_int(tokens[layout.current_column])
        worst = _to_int(tokens[layout.worst_column])
        threshold = _to_int(tokens[layout.threshold_column])
        if None in (current, worst, threshold):
            continue
        attr_id = _to_int(id_token)

        rows.append(AttributeRow(
            id=id_token if attr_id is None else attr_id,
            name=tokens[layout.name_column],
            current=current,
            worst=worst,
            threshold=threshold,
        ))

    return rows


def _label_pattern(label: str) -> re.Pattern:
    # "5 Reallocated_Sector_Ct" must not match "205 Reallocated_Sector_Ct"
    parts = [re.escape(part) for part in label.split()]
    return re.compile(r'(?<!\S)' + r'\s+'.join(parts) + r'(?!\S)')


def parse_raw_value(token: Optional[str]) -> Optional[int]:
    """Leading digits of a raw value token ("12", "36 (Min/Max 20/45)" -> 36)"""
    if not token:
        return None
    match = _LEADING_DIGITS.match(token)
    return int(match.group(1)) if match else None


def extract_critical_metrics(text: str, layout: Optional[ColumnLayout] = None) -> Dict[str, Optional[int]]:
    """
    Find the raw values of the critical attributes by label.

    Independent of parse_attribute_table: row order and table size don't
    matter. A metric whose label is missing is reported as None.
    """
    layout = layout or ColumnLayout()
    lines = (text or '').splitlines()
    metrics: Dict[str, Optional[int]] = {}

    for metric in CRITICAL_METRICS:
        pattern = _label_pattern(layout.critical_labels[metric])
        value = None
        for line in lines:
            if pattern.search(line):
                tokens = line.split()
                if len(tokens) > layout.raw_column:
                    value = parse_raw_value(tokens[layout.raw_column])
                break
        metrics[metric] = value

    return metrics


def build_snapshot(text: str, when: Optional[date] = None,
                   layout: Optional[ColumnLayout] = None) -> CriticalSnapshot:
    """Critical metrics of one run, stamped with the run date"""
    return CriticalSnapshot(
        timestamp=when or date.today(),
        metrics=extract_critical_metrics(text, layout),
    )


def smart_overall_result(text: str) -> Optional[str]:
    """
    Result word of the "SMART overall-health self-assessment" line.

    None means smartctl printed no overall health line, i.e. the device
    doesn't offer S.M.A.R.T. reporting and is left out of the check.
    """
    for line in (text or '').splitlines():
        if 'SMART overall' in line:
            tokens = line.split()
            return tokens[5] if len(tokens) > 5 else None
    return None


def parse_serial(text: str) -> Optional[str]:
    """Serial number from the smartctl information section"""
    match = _SERIAL_LINE.search(text or '')
    return match.group(1) if match else None


def get_disk_identifier(serial: str) -> str:
    """Directory-safe identity for a serial number"""
    return serial.strip().replace(' ', '_').replace('/', '-')
