"""Configuration management for the RedCloud fsck CLI."""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from common.constants import QUARANTINE_DIR
from common.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / '.redcloud' / 'fsck.json'


class Config:
    """Manages CLI configuration stored in JSON file."""

    DEFAULT_CONFIG = {
        "namenode_host": os.environ.get("DFS_NAMENODE_HOST", "localhost"),
        "namenode_port": int(os.environ.get("DFS_NAMENODE_PORT", "8000")),
        "timeout": 30,
        "max_retries": 3,
        "retry_backoff_multiplier": 2,
        "log_level": os.environ.get("LOG_LEVEL", "WARNING"),
        "quarantine_dir": QUARANTINE_DIR,
    }

    def __init__(self, config_path: Path = DEFAULT_CONFIG_PATH):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.redcloud/fsck.json)
        """
        self.config_path = config_path
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        A file that cannot be parsed is kept as a .bak copy and defaults are used.

        Returns:
            Configuration dictionary
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            self.config_path = Path(tempfile.gettempdir()) / '.redcloud' / self.config_path.name
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                config = self.DEFAULT_CONFIG.copy()
                config.update(data)
                return config
            except (json.JSONDecodeError, IOError) as e:
                logger.warning(f"Unreadable config {self.config_path}: {e}; using defaults")
                backup_path = self.config_path.with_suffix('.json.bak')
                try:
                    self.config_path.replace(backup_path)
                except OSError as backup_error:
                    logger.warning(f"Could not back up config: {backup_error}")
                return self.DEFAULT_CONFIG.copy()
        else:
            config = self.DEFAULT_CONFIG.copy()
            try:
                with open(self.config_path, 'w') as f:
                    json.dump(config, f, indent=2)
            except IOError as e:
                logger.debug(f"Could not write default config: {e}")
            return config

    def save(self) -> None:
        """Save current configuration to file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except IOError as e:
            logger.warning(f"Could not save config {self.config_path}: {e}")

    def get_base_url(self) -> str:
        """
        Get namespace service base URL.

        Returns:
            Base URL string (e.g., "http://localhost:8000")
        """
        host = self.data.get('namenode_host', 'localhost')
        port = self.data.get('namenode_port', 8000)
        return f"http://{host}:{port}"

    def get_timeout(self) -> int:
        """
        Get request timeout in seconds.

        Returns:
            Timeout value in seconds
        """
        return self.data.get('timeout', 30)

    def get_retry_config(self) -> dict:
        """
        Get retry configuration.

        Returns:
            Dictionary with 'max_retries' and 'retry_backoff_multiplier'
        """
        return {
            'max_retries': self.data.get('max_retries', 3),
            'retry_backoff_multiplier': self.data.get('retry_backoff_multiplier', 2),
        }

    def get_log_level(self) -> str:
        return self.data.get('log_level', 'WARNING')

    def get_quarantine_dir(self) -> str:
        return self.data.get('quarantine_dir', QUARANTINE_DIR)

    def set_namenode(self, host: str, port: Optional[int] = None) -> None:
        """
        Point the CLI at another namespace service and save.

        Args:
            host: Hostname of the namespace service
            port: Port (unchanged if None)
        """
        self.data['namenode_host'] = host
        if port is not None:
            self.data['namenode_port'] = port
        self.save()
