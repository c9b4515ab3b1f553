#!/usr/bin/env python3
"""
smartcheck - Disk History Logger

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
"""

import csv
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from smart_parser import CriticalSnapshot, CRITICAL_METRICS

# Directory structure below the output dir:
#   {serial}/smarthistory.csv             critical values, one row per run
#   {serial}/full_log/{ts}_smartinfo.log  verbatim smartctl -a output
HISTORY_FILE_NAME = 'smarthistory.csv'
FULL_LOG_DIR_NAME = 'full_log'
LEDGER_HEADER = ['Timestamp'] + CRITICAL_METRICS
LEDGER_DATE_FORMAT = '%Y%m%d'


class LedgerFormatError(ValueError):
    """A ledger row that can't be turned back into a snapshot"""


def snapshot_to_row(snapshot: CriticalSnapshot) -> List[str]:
    """Ledger row in fixed column order; unknown values become empty cells"""
    row = [snapshot.timestamp.strftime(LEDGER_DATE_FORMAT)]
    for metric in CRITICAL_METRICS:
        value = snapshot.value(metric)
        row.append('' if value is None else str(value))
    return row


def row_to_snapshot(row: List[str]) -> CriticalSnapshot:
    """Parse a ledger row, raising LedgerFormatError on short or garbled rows"""
    if len(row) < len(LEDGER_HEADER):
        raise LedgerFormatError(f"expected {len(LEDGER_HEADER)} columns, got {len(row)}")

    try:
        timestamp = datetime.strptime(row[0].strip(), LEDGER_DATE_FORMAT).date()
    except ValueError:
        raise LedgerFormatError(f"bad timestamp {row[0]!r}")

    metrics = {}
    for metric, cell in zip(CRITICAL_METRICS, row[1:]):
        cell = cell.strip()
        if not cell:
            metrics[metric] = None
            continue
        try:
            value = int(cell)
        except ValueError:
            raise LedgerFormatError(f"bad {metric} value {cell!r}")
        if value < 0:
            raise LedgerFormatError(f"negative {metric} value {value}")
        metrics[metric] = value

    return CriticalSnapshot(timestamp=timestamp, metrics=metrics)


class HistoryStore:
    """
    Append-only per-drive ledger of critical S.M.A.R.T. values.

    Drives are keyed by serial number, so a disk that moves from /dev/sdb to
    /dev/sdc keeps writing to the same ledger. Rows are only ever appended.
    Assumes a single writer: two overlapping runs are not coordinated.
    """

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)

    def disk_dir(self, identity: str) -> Path:
        return self.output_dir / identity

    def ledger_path(self, identity: str) -> Path:
        return self.disk_dir(identity) / HISTORY_FILE_NAME

    def _read_rows(self, identity: str) -> List[List[str]]:
        ledger = self.ledger_path(identity)
        if not ledger.exists():
            return []
        with open(ledger, 'r', newline='') as f:
            rows = [row for row in csv.reader(f) if row]
        # First row is the header
        return rows[1:]

    def load_last(self, identity: str) -> Optional[CriticalSnapshot]:
        """
        Most recent snapshot for a drive, or None.

        None covers: no ledger yet, header only, or a malformed last row.
        A malformed row is reported but never stops the run.
        """
        try:
            rows = self._read_rows(identity)
        except (OSError, csv.Error) as e:
            print(f"Warning: Could not read history for {identity}: {e}")
            return None

        if not rows:
            return None

        try:
            return row_to_snapshot(rows[-1])
        except LedgerFormatError as e:
            print(f"Warning: Ignoring malformed last history row for {identity}: {e}")
            return None

    def append(self, identity: str, snapshot: CriticalSnapshot) -> Path:
        """Append one snapshot row, creating the ledger with its header if needed"""
        disk_dir = self.disk_dir(identity)
        disk_dir.mkdir(parents=True, exist_ok=True)
        ledger = self.ledger_path(identity)
        is_new = not ledger.exists() or ledger.stat().st_size == 0

        with open(ledger, 'a', newline='') as f:
            writer = csv.writer(f, lineterminator='\n')
            if is_new:
                writer.writerow(LEDGER_HEADER)
            writer.writerow(snapshot_to_row(snapshot))

        return ledger

    def read_history(self, identity: str) -> List[CriticalSnapshot]:
        """All well-formed snapshots for a drive, oldest first"""
        history = []
        for row in self._read_rows(identity):
            try:
                history.append(row_to_snapshot(row))
            except LedgerFormatError:
                continue
        return history

    def list_identities(self) -> List[str]:
        """Serials that have a ledger under the output dir"""
        if not self.output_dir.exists():
            return []
        return sorted(
            entry.name for entry in self.output_dir.iterdir()
            if entry.is_dir() and (entry / HISTORY_FILE_NAME).exists()
        )

    def archive_full_output(self, identity: str, smart_output: str, run_timestamp: str) -> Path:
        """Store the complete smartctl -a output for this run verbatim"""
        log_dir = self.disk_dir(identity) / FULL_LOG_DIR_NAME
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"{run_timestamp}_smartinfo.log"
        with open(log_file, 'w') as f:
            f.write(smart_output)
        return log_file


def detect_regressions(new: CriticalSnapshot, previous: Optional[CriticalSnapshot]) -> List[str]:
    """
    Compare this run's critical values with the last recorded ones.

    Only strict increases are findings. A first run has nothing to compare
    with, and a metric that is unknown on either side is skipped.
    """
    if previous is None:
        return []

    findings = []
    for metric in CRITICAL_METRICS:
        curr_value = new.value(metric)
        prev_value = previous.value(metric)
        if curr_value is None or prev_value is None:
            continue
        if curr_value > prev_value:
            findings.append(f"{metric} increased from {prev_value} to {curr_value}")

    return findings
