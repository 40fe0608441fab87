"""Shared pytest fixtures for all tests."""

import pytest

from cli.config import Config
from controller.namespace import Namespace
from controller.service_locator import set_namespace

STORAGE_NODES = ['dn1', 'dn2', 'dn3', 'dn4']


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to temporary .redcloud directory
    """
    config_dir = tmp_path / '.redcloud'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Create temporary config instance with retries disabled.

    Args:
        temp_config_dir: Temporary config directory fixture

    Returns:
        Config instance with temp config file
    """
    config = Config(temp_config_dir / 'fsck.json')
    config.data['max_retries'] = 0
    return config


@pytest.fixture
def namespace():
    """
    Build a small namespace on four live storage nodes.

    Layout (block size 1024, replication 3):
        /audio/audio1      2500 bytes, 3 blocks
        /audio/audio2       100 bytes, 1 block
        /audiobook/book1    500 bytes, 1 block
        /docs/readme         10 bytes, 1 block

    Returns:
        Namespace instance
    """
    ns = Namespace(block_size=1024, default_replication=3)
    for node_id in STORAGE_NODES:
        ns.register_node(node_id)
    ns.create_file('/audio/audio1', 2500)
    ns.create_file('/audio/audio2', 100)
    ns.create_file('/audiobook/book1', 500)
    ns.create_file('/docs/readme', 10)
    return ns


@pytest.fixture
def served_namespace(namespace):
    """
    Install the sample namespace behind the HTTP API for one test.

    Yields:
        The installed Namespace instance
    """
    set_namespace(namespace)
    yield namespace
    set_namespace(None)


def remove_all_replicas(ns, path, block_index=None):
    """Drop every replica of a file's blocks (or of one block) so they go MISSING."""
    block_ids = ns.block_ids(path)
    if block_index is not None:
        block_ids = [block_ids[block_index]]
    for block_id in block_ids:
        for node_id in STORAGE_NODES:
            ns.remove_replica(block_id, node_id)


def corrupt_all_replicas(ns, path, block_index=0):
    """Report every replica of one block bad so the block goes CORRUPT."""
    block = ns.get_block_locations(path).blocks[block_index]
    for replica in block.replicas:
        ns.report_bad_replica(block.block_id, replica.node_id)
