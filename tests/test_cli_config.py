"""Tests for CLI configuration module."""

import json

from cli.config import Config


def test_config_creates_default_file(tmp_path):
    """Test that config file is created with defaults if missing."""
    config_path = tmp_path / '.redcloud' / 'fsck.json'
    config = Config(config_path)

    assert config_path.exists()

    assert config.data['namenode_host'] == 'localhost'
    assert config.data['namenode_port'] == 8000
    assert config.data['timeout'] == 30
    assert config.data['max_retries'] == 3
    assert config.data['retry_backoff_multiplier'] == 2
    assert config.data['quarantine_dir'] == '/lost+found'


def test_config_loads_existing_file(tmp_path):
    """Test loading existing config file."""
    config_path = tmp_path / '.redcloud' / 'fsck.json'
    config_path.parent.mkdir(parents=True)

    with open(config_path, 'w') as f:
        json.dump({'namenode_host': 'nn.example.com', 'namenode_port': 9870}, f)

    config = Config(config_path)

    assert config.get_base_url() == 'http://nn.example.com:9870'
    assert config.get_timeout() == 30
    assert config.get_retry_config() == {'max_retries': 3, 'retry_backoff_multiplier': 2}


def test_unreadable_config_is_backed_up(tmp_path):
    """Test that a corrupt config file is moved aside and defaults are used."""
    config_path = tmp_path / '.redcloud' / 'fsck.json'
    config_path.parent.mkdir(parents=True)
    config_path.write_text('{not json')

    config = Config(config_path)

    assert config.data['namenode_host'] == 'localhost'
    assert config_path.with_suffix('.json.bak').read_text() == '{not json'


def test_set_namenode_persists(temp_config):
    """Test that switching the namespace service is saved."""
    temp_config.set_namenode('nn2', 9000)

    with open(temp_config.config_path, 'r') as f:
        data = json.load(f)
    assert data['namenode_host'] == 'nn2'
    assert data['namenode_port'] == 9000
    assert Config(temp_config.config_path).get_base_url() == 'http://nn2:9000'


def test_custom_quarantine_dir_and_log_level(temp_config_dir):
    config_path = temp_config_dir / 'fsck.json'
    config_path.write_text(json.dumps({'quarantine_dir': '/quarantine', 'log_level': 'DEBUG'}))

    config = Config(config_path)

    assert config.get_quarantine_dir() == '/quarantine'
    assert config.get_log_level() == 'DEBUG'
