#!/usr/bin/env python3
"""
smartcheck - Report Viewer

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

Read-only HTTP view of the run summaries and per-drive history ledgers.
Nothing here runs smartctl or writes to the output dir.
"""

import argparse
import csv
import re
from io import StringIO
from pathlib import Path

from flask import Flask, jsonify, make_response
from flask_cors import CORS
from waitress import serve

import config_manager
from disk_logger import HistoryStore, LEDGER_HEADER, snapshot_to_row
from smart_parser import get_disk_identifier
from summary_report import list_summaries

app = Flask(__name__)
CORS(app)

_SUMMARY_NAME = re.compile(r'^\d{8}T\d{6}_summary\.log$')


def _output_dir() -> Path:
    if app.config.get('OUTPUT_DIR'):
        return Path(app.config['OUTPUT_DIR'])
    return config_manager.get_output_dir()


def _safe_identity(serial: str):
    identity = get_disk_identifier(serial)
    if not identity or identity.startswith('.'):
        return None
    return identity


@app.route('/api/summaries')
def api_summaries():
    """List all summary logs, oldest first"""
    summaries = list_summaries(_output_dir())
    return jsonify({'summaries': [p.name for p in summaries]})


@app.route('/api/summaries/latest')
def api_latest_summary():
    """Text of the most recent run summary"""
    summaries = list_summaries(_output_dir())
    if not summaries:
        return jsonify({'error': 'No summaries recorded yet'}), 404
    latest = summaries[-1]
    return jsonify({'name': latest.name, 'summary': latest.read_text()})


@app.route('/api/summaries/<name>')
def api_summary(name):
    """Text of one run summary"""
    if not _SUMMARY_NAME.match(name):
        return jsonify({'error': 'Invalid summary name'}), 400
    for path in list_summaries(_output_dir()):
        if path.name == name:
            return jsonify({'name': name, 'summary': path.read_text()})
    return jsonify({'error': 'Summary not found'}), 404


@app.route('/api/devices')
def api_devices():
    """Drives with a history ledger and their latest values"""
    store = HistoryStore(_output_dir())
    devices = []
    for identity in store.list_identities():
        last = store.load_last(identity)
        devices.append({
            'serial': identity,
            'last_timestamp': last.timestamp.isoformat() if last else None,
            'last_metrics': last.metrics if last else None
        })
    return jsonify({'devices': devices})


@app.route('/api/devices/<serial>/history')
def api_history(serial):
    """Recorded critical values for a drive"""
    identity = _safe_identity(serial)
    if identity is None:
        return jsonify({'error': 'Invalid serial'}), 400

    history = HistoryStore(_output_dir()).read_history(identity)
    if not history:
        return jsonify({'error': 'No history for this drive'}), 404

    return jsonify({
        'serial': identity,
        'history': [
            {'timestamp': s.timestamp.isoformat(), 'metrics': s.metrics}
            for s in history
        ]
    })


@app.route('/api/devices/<serial>/history/export')
def export_history(serial):
    """Export the ledger as CSV"""
    identity = _safe_identity(serial)
    if identity is None:
        return jsonify({'error': 'Invalid serial'}), 400

    history = HistoryStore(_output_dir()).read_history(identity)
    if not history:
        return jsonify({'error': 'No history for this drive'}), 404

    output = StringIO()
    writer = csv.writer(output, lineterminator='\n')
    writer.writerow(LEDGER_HEADER)
    for snapshot in history:
        writer.writerow(snapshot_to_row(snapshot))

    # Return as downloadable file
    response = make_response(output.getvalue())
    response.headers['Content-Type'] = 'text/csv'
    response.headers['Content-Disposition'] = f'attachment; filename={identity}_smarthistory.csv'
    return response


def main():
    settings = config_manager.get_web_settings()

    parser = argparse.ArgumentParser(
        description='smartcheck viewer - browse run summaries and drive history'
    )

    parser.add_argument(
        '-p', '--port',
        type=int,
        default=settings.get('port', 5000),
        help='Port to run web server on (default: 5000)'
    )

    parser.add_argument(
        '--host',
        type=str,
        default=settings.get('host', '127.0.0.1'),
        help='Host to bind to (default: 127.0.0.1)'
    )

    parser.add_argument(
        '-o', '--output-dir',
        type=str,
        help='smartcheck output directory (default: from settings)'
    )

    parser.add_argument(
        '--dev',
        action='store_true',
        help='Run in development mode (Flask dev server)'
    )

    args = parser.parse_args()

    app.config['OUTPUT_DIR'] = (
        Path(args.output_dir).expanduser() if args.output_dir else config_manager.get_output_dir()
    )

    print("Starting smartcheck viewer...")
    print(f"Reports: {app.config['OUTPUT_DIR']}")
    print(f"Dashboard: http://{args.host}:{args.port}")
    print("Press Ctrl+C to stop")

    if args.dev:
        print("⚠️  Running Flask development server (--dev mode)")
        app.run(host=args.host, port=args.port, debug=True)
    else:
        print("✓ Running production server (waitress)")
        serve(app, host=args.host, port=args.port)


if __name__ == '__main__':
    main()
