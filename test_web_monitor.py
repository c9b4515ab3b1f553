#!/usr/bin/env python3
"""
Test the read-only report viewer API
"""

from datetime import date

import pytest

from disk_logger import HistoryStore
from smart_parser import CriticalSnapshot
from summary_report import write_run_summary
from web_monitor import app


@pytest.fixture
def client(tmp_path):
    app.config['TESTING'] = True
    app.config['OUTPUT_DIR'] = tmp_path
    with app.test_client() as client:
        yield client
    app.config['OUTPUT_DIR'] = None


def record(tmp_path, serial, day, realloc):
    HistoryStore(tmp_path).append(serial, CriticalSnapshot(
        timestamp=date(2026, 10, day),
        metrics={
            'ReallocatedSectorCount': realloc,
            'CurrentPendingSectorCount': 0,
            'OfflineUncorrectableCount': None,
        }
    ))


def test_summaries(client, tmp_path):
    assert client.get('/api/summaries/latest').status_code == 404

    write_run_summary(tmp_path, 'old run\n', '20261018T030000')
    write_run_summary(tmp_path, 'new run\n', '20261019T030000')

    data = client.get('/api/summaries').get_json()
    assert data['summaries'] == ['20261018T030000_summary.log', '20261019T030000_summary.log']

    latest = client.get('/api/summaries/latest').get_json()
    assert latest['summary'] == 'new run\n'

    one = client.get('/api/summaries/20261018T030000_summary.log').get_json()
    assert one['summary'] == 'old run\n'
    assert client.get('/api/summaries/settings.json').status_code == 400


def test_devices_and_history(client, tmp_path):
    record(tmp_path, 'SER-A', 18, 0)
    record(tmp_path, 'SER-A', 19, 2)

    devices = client.get('/api/devices').get_json()['devices']
    assert devices == [{
        'serial': 'SER-A',
        'last_timestamp': '2026-10-19',
        'last_metrics': {
            'ReallocatedSectorCount': 2,
            'CurrentPendingSectorCount': 0,
            'OfflineUncorrectableCount': None,
        }
    }]

    history = client.get('/api/devices/SER-A/history').get_json()['history']
    assert [h['metrics']['ReallocatedSectorCount'] for h in history] == [0, 2]
    assert client.get('/api/devices/SER-X/history').status_code == 404


def test_history_export(client, tmp_path):
    record(tmp_path, 'SER-A', 19, 5)
    response = client.get('/api/devices/SER-A/history/export')
    assert response.status_code == 200
    assert response.headers['Content-Type'].startswith('text/csv')
    assert response.get_data(as_text=True).splitlines() == [
        'Timestamp,ReallocatedSectorCount,CurrentPendingSectorCount,OfflineUncorrectableCount',
        '20261019,5,0,',
    ]
