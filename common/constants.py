"""Project-wide constants (block size, replication defaults, reserved paths)."""

BLOCK_SIZE_BYTES: int = 64 * 1024 * 1024  # 64 MiB default block size
DEFAULT_REPLICATION: int = 3

PATH_SEPARATOR: str = "/"
ROOT_PATH: str = "/"
QUARANTINE_DIR: str = "/lost+found"
