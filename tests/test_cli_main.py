"""Tests for the fsck command-line entry point."""

import io

import pytest
from fastapi.testclient import TestClient

import cli.main
from cli.main import main
from cli.metadata_client import MetadataClient
from common.logging_config import setup_logging
from conftest import remove_all_replicas
from controller.main import app


@pytest.fixture(autouse=True)
def detach_cli_logging():
    """Point component loggers away from captured streams once a test ends."""
    yield
    for component in ('cli', 'fsck'):
        setup_logging(component, stream=io.StringIO())


@pytest.fixture
def served_client(served_namespace, monkeypatch):
    """Route the CLI's metadata client to the in-process namespace service."""
    def build_client(config):
        client = MetadataClient(config)
        client.session = TestClient(app)
        return client

    monkeypatch.setattr(cli.main, 'MetadataClient', build_client)
    return served_namespace


def test_healthy_run_exits_zero(served_client, temp_config, capsys):
    assert main(['/'], config=temp_config) == 0

    out = capsys.readouterr().out
    assert "The filesystem under path '/' is HEALTHY" in out


def test_corrupt_run_exits_one(served_client, temp_config, capsys):
    remove_all_replicas(served_client, '/docs/readme')

    assert main(['/', '-files'], config=temp_config) == 1

    out = capsys.readouterr().out
    assert '/docs/readme 10 bytes, 1 block(s): MISSING' in out
    assert 'is CORRUPT' in out


def test_move_through_cli(served_client, temp_config, capsys):
    remove_all_replicas(served_client, '/docs/readme')

    assert main(['/docs', '-move'], config=temp_config) == 1
    assert served_client.resolve('/lost+found/docs/readme') is not None
    assert main(['/'], config=temp_config) == 0


def test_list_corrupt_files_through_cli(served_client, temp_config, capsys):
    remove_all_replicas(served_client, '/audio/audio2')

    assert main(['-list-corruptfiles', '/audio'], config=temp_config) == 1

    out = capsys.readouterr().out
    assert out == (
        "/audio/audio2\n"
        "\n"
        "There is at least 1 corrupt file under '/audio', which is CORRUPT\n"
    )


def test_missing_path_exits_minus_one(served_client, temp_config, capsys):
    assert main(['/nope'], config=temp_config) == -1

    out = capsys.readouterr().out
    assert 'FAILURE' in out
    assert 'is HEALTHY' not in out


def test_usage_error_exits_minus_one(temp_config, capsys):
    assert main(['/', '-move', '-delete'], config=temp_config) == -1

    err = capsys.readouterr().err
    assert '-move and -delete cannot be combined' in err
    assert 'Usage:' in err


def test_help(temp_config, capsys):
    assert main(['--help'], config=temp_config) == 0
    assert 'Usage:' in capsys.readouterr().out


def test_unreachable_service_exits_minus_one(temp_config, capsys):
    temp_config.data['namenode_port'] = 1

    assert main(['/'], config=temp_config) == -1
    assert 'FAILURE' in capsys.readouterr().out


def test_unexpected_error_exits_minus_one(temp_config, monkeypatch, capsys):
    class BrokenClient:
        def __init__(self, config):
            pass

        def resolve(self, path):
            raise RuntimeError("unexpected reply")

        def close(self):
            pass

    monkeypatch.setattr(cli.main, 'MetadataClient', BrokenClient)

    assert main(['/'], config=temp_config) == -1

    out = capsys.readouterr().out
    assert 'unexpected reply' in out
    assert out.rstrip().endswith("The filesystem check under path '/' ended in FAILURE")


def test_file_removed_mid_run_over_http(served_client, temp_config, monkeypatch, capsys):
    real_get_block_locations = served_client.get_block_locations

    def remove_then_read(path):
        if path == '/audio/audio2':
            served_client.delete('/audio/audio2')
        return real_get_block_locations(path)

    monkeypatch.setattr(served_client, 'get_block_locations', remove_then_read)

    assert main(['/'], config=temp_config) == 0

    out = capsys.readouterr().out
    assert "The filesystem under path '/' is HEALTHY" in out
    assert 'FAILURE' not in out
