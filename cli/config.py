"""Configuration management for the Vault CLI."""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional


class Config:
    """Manages CLI configuration stored in JSON file."""

    DEFAULT_CONFIG = {
        "vault_host": os.environ.get("VAULT_HOST", "localhost"),
        "vault_port": int(os.environ.get("VAULT_PORT", "8000")),
        "caller_id": os.environ.get("VAULT_CALLER_ID"),
        "timeout": 30,
        "max_retries": 3,
        "retry_backoff_multiplier": 2,
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.vault/config.json)
        """
        self.config_path = config_path
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, falling back to defaults.

        Returns:
            Configuration dictionary
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            self.config_path = Path(tempfile.gettempdir()) / '.vault' / 'config.json'
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        config = self.DEFAULT_CONFIG.copy()
        if not self.config_path.exists():
            return config

        try:
            with open(self.config_path, 'r') as f:
                config.update(json.load(f))
        except (json.JSONDecodeError, IOError):
            return self.DEFAULT_CONFIG.copy()
        return config

    def save(self) -> None:
        """Save current configuration to file."""
        with open(self.config_path, 'w') as f:
            json.dump(self.data, f, indent=2)

    def get_caller_id(self) -> Optional[str]:
        return self.data.get('caller_id')

    def set_caller_id(self, caller_id: str) -> None:
        """
        Set caller identity and save to file.
        """
        self.data['caller_id'] = caller_id
        self.save()

    def get_base_url(self) -> str:
        """
        Get Vault base URL (e.g., "http://localhost:8000").
        """
        host = self.data.get('vault_host', 'localhost')
        port = self.data.get('vault_port', 8000)
        return f"http://{host}:{port}"

    def get_timeout(self) -> int:
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
