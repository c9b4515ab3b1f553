#!/usr/bin/env python3
"""
smartcheck - S.M.A.R.T. Drive Health Check

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

Runs smartctl against every drive, rates each one Good/Warn/Bad, tracks the
critical raw values per serial number and writes a summary log per run.
This isn't a failure predictor: drives may fail regardless of how healthy
their S.M.A.R.T. values look.
"""

import argparse
import subprocess
import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional

from pySMART import DeviceList

import config_manager
from decision_engine import evaluate_drive_health
from disk_logger import HistoryStore, detect_regressions
from smart_parser import (
    ColumnLayout,
    build_snapshot,
    get_disk_identifier,
    parse_attribute_table,
    parse_serial,
    smart_overall_result,
)
from summary_report import (
    build_run_summary,
    format_device_entry,
    rotate_summaries,
    write_run_summary,
)

RUN_TIMESTAMP_FORMAT = '%Y%m%dT%H%M%S'

VERBOSITY_LEVELS = ['debug', 'info', 'warning', 'error']
_verbosity = 'info'


def set_verbosity(level: str) -> None:
    global _verbosity
    _verbosity = level if level in VERBOSITY_LEVELS else 'info'


def log_message(level: str, message: str) -> None:
    """Print a console message if it passes the configured verbosity"""
    if VERBOSITY_LEVELS.index(level) < VERBOSITY_LEVELS.index(_verbosity):
        return
    stream = sys.stderr if level in ('warning', 'error') else sys.stdout
    print(message, file=stream)


class SmartctlError(RuntimeError):
    """smartctl could not be run or produced no output"""


def read_smart_output(device_path: str, smartctl: str = 'smartctl', timeout: Optional[float] = 60) -> str:
    """
    Return the full "smartctl -a" text for a device.

    smartctl's exit status is a bit mask; a non-zero status with output on
    stdout still carries usable data.
    """
    try:
        proc = subprocess.run(
            [smartctl, '-a', device_path],
            capture_output=True,
            text=True,
            timeout=timeout
        )
    except FileNotFoundError:
        raise SmartctlError(f"{smartctl} not found in PATH")
    except subprocess.TimeoutExpired:
        raise SmartctlError(f"smartctl timed out after {timeout}s on {device_path}")

    if proc.stdout.strip():
        return proc.stdout
    raise SmartctlError(proc.stderr.strip() or f"smartctl failed for {device_path}")


def scan_device_paths() -> List[str]:
    """Ask pySMART for all storage devices smartctl can see"""
    devlist = DeviceList()
    return [f"/dev/{dev.name}" for dev in devlist.devices if dev is not None]


@dataclass
class DeviceResult:
    identity: str
    device_path: str
    decision: Dict
    findings: List[str]
    entry: str


@dataclass
class RunResult:
    run_timestamp: str
    results: List[DeviceResult] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    summary: str = ''
    summary_file: Optional[Path] = None

    @property
    def failure_count(self) -> int:
        return len(self.failed)


class SMARTCheck:
    """One polling run over all drives"""

    def __init__(self,
                 output_dir: Path,
                 device_paths: Optional[List[str]] = None,
                 reader: Optional[Callable[[str], str]] = None,
                 layout: Optional[ColumnLayout] = None,
                 rotate: bool = True,
                 is_monitored: Callable[[str], bool] = lambda serial: True):
        self.output_dir = Path(output_dir)
        self.device_paths = device_paths
        self.reader = reader or read_smart_output
        self.layout = layout or ColumnLayout()
        self.rotate = rotate
        self.is_monitored = is_monitored
        self.store = HistoryStore(self.output_dir)

    def get_device_paths(self) -> List[str]:
        """Devices to check, in path order"""
        paths = self.device_paths if self.device_paths else scan_device_paths()
        return sorted(set(paths))

    def check_device(self, device_path: str, run_time: datetime, run_timestamp: str) -> Optional[DeviceResult]:
        """
        Evaluate a single drive and record its history.

        Returns None for drives without S.M.A.R.T. reporting, without a
        serial number, or disabled in settings (by serial, never by path).
        """
        smart_output = self.reader(device_path)

        overall = smart_overall_result(smart_output)
        if overall is None:
            log_message('info', f"Skipping {device_path}: no S.M.A.R.T. reporting")
            return None

        serial = parse_serial(smart_output)
        if not serial:
            log_message('warning', f"Warning: Skipping {device_path}: no serial number in smartctl output")
            return None
        identity = get_disk_identifier(serial)
        if not self.is_monitored(identity):
            log_message('debug', f"Skipping {device_path} ({identity}): disabled in settings")
            return None

        table = parse_attribute_table(smart_output, self.layout)
        snapshot = build_snapshot(smart_output, run_time.date(), self.layout)
        decision = evaluate_drive_health(table, snapshot)

        # Compare against the ledger as it stood before this run
        previous = self.store.load_last(identity)
        findings = detect_regressions(snapshot, previous)
        entry = format_device_entry(identity, decision, findings)

        self.store.append(identity, snapshot)

        # The ledger row is committed; losing the raw copy must not lose the entry
        try:
            self.store.archive_full_output(identity, smart_output, run_timestamp)
        except OSError as e:
            log_message('warning', f"Warning: Could not archive smartctl output for {identity}: {e}")

        for note in decision['notes']:
            log_message('debug', f"ℹ️  {identity}: {note}")
        log_message('info', f"✓ {device_path} ({identity}): {decision['status']}")

        return DeviceResult(
            identity=identity,
            device_path=device_path,
            decision=decision,
            findings=findings,
            entry=entry
        )

    def run(self, run_time: Optional[datetime] = None) -> RunResult:
        """Check every drive; one drive's failure never stops the others"""
        run_time = run_time or datetime.now()
        run_timestamp = run_time.strftime(RUN_TIMESTAMP_FORMAT)
        result = RunResult(run_timestamp=run_timestamp)

        self.output_dir.mkdir(parents=True, exist_ok=True)
        if self.rotate:
            rotate_summaries(self.output_dir)

        try:
            device_paths = self.get_device_paths()
        except Exception as e:
            log_message('error', f"Error scanning devices: {e}")
            device_paths = []
            result.failed.append('device-scan')

        for device_path in device_paths:
            try:
                device_result = self.check_device(device_path, run_time, run_timestamp)
            except Exception as e:
                log_message('error', f"Error checking {device_path}: {e}")
                result.failed.append(device_path)
                continue

            if device_result is None:
                result.skipped.append(device_path)
            else:
                result.results.append(device_result)

        result.summary = build_run_summary([r.entry for r in result.results], run_time)
        result.summary_file = write_run_summary(self.output_dir, result.summary, run_timestamp)
        return result


def print_history(output_dir: Path, serial: str) -> int:
    """Print a drive's ledger as a table"""
    store = HistoryStore(output_dir)
    identity = get_disk_identifier(serial)
    history = store.read_history(identity)
    if not history:
        print(f"No history for {serial}")
        return 1

    print(f"\nHistory for {serial}:")
    print(f"{'Date':<12} {'Reallocated':>12} {'Pending':>10} {'Uncorrectable':>14}")
    print("-" * 52)
    for snapshot in history:
        values = [
            'N/A' if v is None else str(v)
            for v in snapshot.metrics.values()
        ]
        print(f"{snapshot.timestamp.isoformat():<12} {values[0]:>12} {values[1]:>10} {values[2]:>14}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description='smartcheck - track S.M.A.R.T. health of your drives',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        '-d', '--device',
        action='append',
        help='Device to check (e.g., /dev/sda); repeat for more. Default: all drives'
    )

    parser.add_argument(
        '-o', '--output-dir',
        type=str,
        help='Directory for summaries, history and raw output'
    )

    parser.add_argument(
        '--no-rotate',
        action='store_true',
        help='Leave earlier summary logs in place'
    )

    parser.add_argument(
        '--history',
        type=str,
        metavar='SERIAL',
        help='Show recorded critical values for a drive and exit'
    )

    parser.add_argument(
        '-q', '--quiet',
        action='store_true',
        help='Do not print the run summary'
    )

    parser.add_argument(
        '--show-config',
        action='store_true',
        help='Print the current settings as JSON and exit'
    )

    parser.add_argument(
        '--reset-config',
        action='store_true',
        help='Restore all settings to defaults and exit'
    )

    args = parser.parse_args(argv)

    if args.show_config:
        print(config_manager.export_config())
        return 0

    if args.reset_config:
        if not config_manager.restore_defaults():
            return 1
        print(f"✓ Settings restored to defaults: {config_manager.CONFIG_FILE}")
        return 0

    set_verbosity(config_manager.get_verbosity())
    output_dir = Path(args.output_dir).expanduser() if args.output_dir else config_manager.get_output_dir()

    if args.history:
        return print_history(output_dir, args.history)

    smartctl_settings = config_manager.get_smartctl_settings()
    check = SMARTCheck(
        output_dir=output_dir,
        device_paths=args.device or config_manager.get_configured_devices() or None,
        reader=lambda path: read_smart_output(
            path,
            smartctl=smartctl_settings.get('path', 'smartctl'),
            timeout=smartctl_settings.get('timeout', 60)
        ),
        layout=ColumnLayout.from_config(config_manager.get_attribute_layout()),
        rotate=config_manager.should_rotate_summaries() and not args.no_rotate,
        is_monitored=config_manager.is_device_monitored
    )

    result = check.run()

    if not args.quiet:
        print(result.summary, end='')

    if result.failed:
        print(f"⚠️  {result.failure_count} device(s) could not be checked: {', '.join(result.failed)}",
              file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
