#!/usr/bin/env python3
# smartcheck
# Copyright (C) 2026 Magnus S. Modig
# Licensed under GPLv3. See LICENSE for details.

import shutil
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Any

SUMMARY_SUFFIX = '_summary.log'
SUMMARY_ARCHIVE_DIR = 'summary'


def format_device_entry(identity: str, decision: Dict[str, Any], findings: List[str]) -> str:
    """Summary block for one drive: header, reasons, regressions, blank line"""
    lines = [
        "-----",
        f"{identity} - {decision['status']}",
        "-----",
    ]
    lines.extend(f" {reason}" for reason in decision.get('reasons', []))
    lines.extend(f" {finding}" for finding in findings)
    lines.append(" ")
    return "\n".join(lines) + "\n"


def format_run_header(run_time: datetime) -> str:
    return "\n".join([
        "=" * 20,
        run_time.strftime('%a %b %d %H:%M:%S %Y'),
        " ",
    ]) + "\n"


def build_run_summary(entries: List[str], run_time: datetime) -> str:
    """Run header followed by every drive entry in processing order"""
    return format_run_header(run_time) + "".join(entries)


def summary_path(output_dir: Path, run_timestamp: str) -> Path:
    return Path(output_dir) / f"{run_timestamp}{SUMMARY_SUFFIX}"


def write_run_summary(output_dir: Path, summary: str, run_timestamp: str) -> Path:
    """Write the summary for this run; returns the file path"""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = summary_path(output_dir, run_timestamp)
    with open(path, 'w') as f:
        f.write(summary)
    return path


def rotate_summaries(output_dir: Path) -> List[Path]:
    """Move earlier summary logs into the summary/ archive dir"""
    output_dir = Path(output_dir)
    archive_dir = output_dir / SUMMARY_ARCHIVE_DIR
    archive_dir.mkdir(parents=True, exist_ok=True)

    moved = []
    for old_summary in sorted(output_dir.glob(f"*{SUMMARY_SUFFIX}")):
        target = archive_dir / old_summary.name
        shutil.move(str(old_summary), str(target))
        moved.append(target)
    return moved


def list_summaries(output_dir: Path) -> List[Path]:
    """Current and archived summary logs, oldest first"""
    output_dir = Path(output_dir)
    found = list(output_dir.glob(f"*{SUMMARY_SUFFIX}"))
    found += list((output_dir / SUMMARY_ARCHIVE_DIR).glob(f"*{SUMMARY_SUFFIX}"))
    return sorted(found, key=lambda p: p.name)
