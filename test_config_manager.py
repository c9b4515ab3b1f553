#!/usr/bin/env python3
"""
Test configuration loading and merging
"""

import json

import pytest

import config_manager


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    monkeypatch.setattr(config_manager, 'CONFIG_DIR', tmp_path)
    monkeypatch.setattr(config_manager, 'CONFIG_FILE', tmp_path / 'settings.json')
    return tmp_path / 'settings.json'


def test_defaults_written_on_first_load(config_file):
    config = config_manager.load_config()
    assert config_file.exists()
    assert config['smartctl']['timeout'] == 60
    assert config['attribute_layout']['raw_column'] == 9


def test_saved_values_merge_with_defaults(config_file):
    config_file.write_text(json.dumps({'smartctl': {'timeout': 5}, 'general': {'output_dir': '/srv/smart'}}))

    config = config_manager.load_config()
    assert config['smartctl'] == {'path': 'smartctl', 'timeout': 5}
    assert str(config_manager.get_output_dir()) == '/srv/smart'
    assert config['logging']['verbosity'] == 'info'


def test_merge_does_not_leak_into_defaults(config_file):
    config = config_manager.load_config()
    config['disk_selection']['monitored_devices']['WD-WCC7K0TEST1'] = False
    assert config_manager.DEFAULT_CONFIG['disk_selection']['monitored_devices'] == {}


def test_corrupt_file_falls_back_to_defaults(config_file):
    config_file.write_text('{not json')
    config = config_manager.load_config()
    assert config['general']['rotate_summaries'] is True


def test_device_monitoring_toggle(config_file):
    """Drives are enabled or disabled by serial number"""
    assert config_manager.is_device_monitored('WD-WCC7K0TEST1') is True
    config_manager.update_section('disk_selection', {'monitored_devices': {'WD-WCC7K0TEST1': False}})
    assert config_manager.is_device_monitored('WD-WCC7K0TEST1') is False
    assert config_manager.is_device_monitored('S3Z9NB0K123456') is True


def test_convenience_getters(config_file):
    config_manager.update_section('disk_selection', {'devices': ['/dev/sdb']})
    config_manager.update_section('general', {'rotate_summaries': False})
    assert config_manager.get_configured_devices() == ['/dev/sdb']
    assert config_manager.should_rotate_summaries() is False
    assert config_manager.get_verbosity() == 'info'
    assert config_manager.get_attribute_layout()['markers'] == ['Raw_Read_Error_Rate', 'ID# ATTRIBUTE_NAME']


def test_export_and_restore_defaults(config_file):
    config_manager.update_section('smartctl', {'timeout': 5})
    assert json.loads(config_manager.export_config())['smartctl']['timeout'] == 5

    assert config_manager.restore_defaults() is True
    assert json.loads(config_file.read_text()) == config_manager.DEFAULT_CONFIG
