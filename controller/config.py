"""Configuration settings for the Controller (namespace service)."""

import os
from common.constants import BLOCK_SIZE_BYTES, DEFAULT_REPLICATION, QUARANTINE_DIR


CONTROLLER_HOST = os.environ.get("DFS_CONTROLLER_HOST", "0.0.0.0")

CONTROLLER_PORT = int(os.environ.get("DFS_CONTROLLER_PORT", "8000"))

DEFAULT_FILE_REPLICATION = int(os.environ.get("DFS_DEFAULT_REPLICATION", str(DEFAULT_REPLICATION)))

DEFAULT_BLOCK_SIZE = int(os.environ.get("DFS_BLOCK_SIZE", str(BLOCK_SIZE_BYTES)))

FSCK_QUARANTINE_DIR = os.environ.get("DFS_QUARANTINE_DIR", QUARANTINE_DIR)
