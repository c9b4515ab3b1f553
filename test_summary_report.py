#!/usr/bin/env python3
"""
Test run summary assembly and summary log rotation
"""

from datetime import datetime

from summary_report import (
    build_run_summary,
    format_device_entry,
    list_summaries,
    rotate_summaries,
    write_run_summary,
)


def test_entry_layout():
    decision = {'status': 'Bad', 'reasons': ['critical attribute(s) are above zero']}
    entry = format_device_entry('WD-1', decision, ['ReallocatedSectorCount increased from 0 to 3'])
    assert entry.splitlines() == [
        '-----',
        'WD-1 - Bad',
        '-----',
        ' critical attribute(s) are above zero',
        ' ReallocatedSectorCount increased from 0 to 3',
        ' ',
    ]


def test_good_entry_has_no_reason_lines():
    entry = format_device_entry('WD-2', {'status': 'Good', 'reasons': []}, [])
    assert entry.splitlines() == ['-----', 'WD-2 - Good', '-----', ' ']


def test_run_summary_keeps_entry_order():
    run_time = datetime(2026, 10, 19, 8, 30, 0)
    entries = [
        format_device_entry('WD-B', {'status': 'Good', 'reasons': []}, []),
        format_device_entry('WD-A', {'status': 'Warn', 'reasons': ['x']}, []),
    ]
    summary = build_run_summary(entries, run_time)
    lines = summary.splitlines()
    assert lines[0] == '=' * 20
    assert lines[1] == 'Mon Oct 19 08:30:00 2026'
    assert summary.index('WD-B - Good') < summary.index('WD-A - Warn')


def test_write_and_rotate(tmp_path):
    first = write_run_summary(tmp_path, 'first\n', '20261018T080000')
    assert first.name == '20261018T080000_summary.log'

    moved = rotate_summaries(tmp_path)
    assert moved == [tmp_path / 'summary' / '20261018T080000_summary.log']
    assert not first.exists()

    write_run_summary(tmp_path, 'second\n', '20261019T080000')
    names = [p.name for p in list_summaries(tmp_path)]
    assert names == ['20261018T080000_summary.log', '20261019T080000_summary.log']


def test_rotate_on_empty_dir(tmp_path):
    assert rotate_summaries(tmp_path) == []
    assert (tmp_path / 'summary').is_dir()
