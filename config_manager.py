#!/usr/bin/env python3
# smartcheck
# Copyright (C) 2026 Magnus S. Modig
# Licensed under GPLv3. See LICENSE for details.

import json
from pathlib import Path
from typing import Dict, Any, List

# Configuration file location
CONFIG_DIR = Path.home() / '.smartcheck'
CONFIG_FILE = CONFIG_DIR / 'settings.json'

# Default configuration
DEFAULT_CONFIG = {
    # General Settings
    'general': {
        'output_dir': '~/smartmonitoring',
        'rotate_summaries': True
    },

    # Disk Selection
    'disk_selection': {
        'devices': [],  # Explicit device paths, empty = ask pySMART
        'monitored_devices': {}  # Per-serial enable/disable
    },

    # smartctl invocation
    'smartctl': {
        'path': 'smartctl',
        'timeout': 60
    },

    # Column layout of the "smartctl -a" attribute table
    'attribute_layout': {
        'markers': ['Raw_Read_Error_Rate', 'ID# ATTRIBUTE_NAME'],
        'id_column': 0,
        'name_column': 1,
        'current_column': 3,
        'worst_column': 4,
        'threshold_column': 5,
        'raw_column': 9,
        'critical_labels': {
            'ReallocatedSectorCount': '5 Reallocated_Sector_Ct',
            'CurrentPendingSectorCount': '197 Current_Pending_Sector',
            'OfflineUncorrectableCount': '198 Offline_Uncorrectable'
        }
    },

    # Logging
    'logging': {
        'verbosity': 'info'  # 'debug', 'info', 'warning', 'error'
    },

    # Report viewer
    'web': {
        'host': '127.0.0.1',
        'port': 5000
    }
}


def ensure_config_dir():
    """Create config directory if it doesn't exist"""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)


def load_config() -> Dict[str, Any]:
    """Load configuration from file, return defaults if not found"""
    ensure_config_dir()

    if not CONFIG_FILE.exists():
        save_config(DEFAULT_CONFIG)
        return _deep_merge(DEFAULT_CONFIG, {})

    try:
        with open(CONFIG_FILE, 'r') as f:
            config = json.load(f)

        # Merge with defaults to add any new fields from updates
        return _deep_merge(DEFAULT_CONFIG, config)
    except (OSError, ValueError) as e:
        print(f"⚠️ Error loading config: {e}, using defaults")
        return _deep_merge(DEFAULT_CONFIG, {})


def save_config(config: Dict[str, Any]) -> bool:
    """Save configuration to file"""
    ensure_config_dir()

    try:
        with open(CONFIG_FILE, 'w') as f:
            json.dump(config, f, indent=2)
        return True
    except OSError as e:
        print(f"⚠️ Error saving config: {e}")
        return False


def get_section(section: str) -> Dict[str, Any]:
    """Get a specific configuration section"""
    config = load_config()
    return config.get(section, DEFAULT_CONFIG.get(section, {}))


def update_section(section: str, data: Dict[str, Any]) -> bool:
    """Update a specific configuration section"""
    config = load_config()
    if section in config:
        config[section].update(data)
    else:
        config[section] = data
    return save_config(config)


def restore_defaults() -> bool:
    """Restore all settings to defaults"""
    return save_config(DEFAULT_CONFIG)


def export_config() -> str:
    """Export configuration as JSON string"""
    config = load_config()
    return json.dumps(config, indent=2)


def _deep_merge(base: dict, overlay: dict) -> dict:
    """Deep merge two dictionaries, overlay takes precedence"""
    result = {}
    for key, value in base.items():
        result[key] = _deep_merge(value, {}) if isinstance(value, dict) else value

    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


# Convenience functions for common operations
def get_output_dir() -> Path:
    """Get the directory holding summaries, ledgers and raw output archives"""
    return Path(get_section('general').get('output_dir', '~/smartmonitoring')).expanduser()


def should_rotate_summaries() -> bool:
    """Check if old summary logs are moved aside before a run"""
    return bool(get_section('general').get('rotate_summaries', True))


def get_configured_devices() -> List[str]:
    """Get explicitly configured device paths (empty list = autodetect)"""
    return list(get_section('disk_selection').get('devices', []))


def is_device_monitored(serial: str) -> bool:
    """Check if a drive is monitored; keyed by serial since /dev paths move"""
    monitored = get_section('disk_selection').get('monitored_devices', {})
    return monitored.get(serial, True)  # Default to monitored


def get_smartctl_settings() -> Dict[str, Any]:
    """Get smartctl executable path and timeout"""
    return get_section('smartctl')


def get_attribute_layout() -> Dict[str, Any]:
    """Get the attribute table column layout"""
    return get_section('attribute_layout')


def get_verbosity() -> str:
    """Get console verbosity level"""
    return get_section('logging').get('verbosity', 'info')


def get_web_settings() -> Dict[str, Any]:
    """Get host/port for the report viewer"""
    return get_section('web')


if __name__ == '__main__':
    # Test configuration
    print("Loading configuration...")
    config = load_config()
    print(json.dumps(config, indent=2))

    print("\nConfiguration file location:", CONFIG_FILE)
