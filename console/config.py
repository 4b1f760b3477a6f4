"""
Warden - Configuration Manager
================================
Handles loading and saving of console configuration from two sources:

1. config.yaml  - Non-sensitive settings (backend URL, alert durations, etc.)
2. .env         - Secrets (backend API token)

Usage:
    config = ConfigManager(project_dir="/path/to/warden")
    settings = config.load()                      # Returns merged config dict
    config.update({"backend": {"url": ...}})      # Updates config.yaml
    config.set_secret("WARDEN_BACKEND_TOKEN", "t") # Updates .env
"""

import logging
import os
import yaml
from dotenv import dotenv_values

logger = logging.getLogger(__name__)


# Default configuration values used when config.yaml is missing or incomplete.
DEFAULTS = {
    "web": {
        "port": 8080,
        "host": "0.0.0.0",
    },
    "backend": {
        "url": "http://127.0.0.1:2500",
        "ping_path": "/api/v1/auth/ping",
        "timeout": 10,
    },
    "alerts": {
        "duration": 30,
        "fast_duration": 10,
        "urgent_duration": 10,
    },
    "routes": {
        "login": "/login",
    },
}

SECTIONS = list(DEFAULTS)

# Environment override for backend.url
BACKEND_URL = "WARDEN_BACKEND_URL"

# Secrets the console knows how to use.
BACKEND_TOKEN = "WARDEN_BACKEND_TOKEN"
KNOWN_SECRETS = [BACKEND_TOKEN]


class ConfigManager:
    """
    Unified configuration manager for Warden.

    Attributes:
        project_dir: Root directory of the Warden project.
        config_path: Full path to config.yaml.
        env_path:    Full path to .env file.
    """

    def __init__(self, project_dir: str):
        self.project_dir = project_dir
        self.config_path = os.path.join(project_dir, "config.yaml")
        self.env_path = os.path.join(project_dir, ".env")

    def load(self) -> dict:
        """
        Load and merge configuration from config.yaml with defaults.

        Returns:
            A dictionary containing the full configuration. If config.yaml is
            unreadable the defaults are returned with the error under
            "_config_error".
        """
        config = _deep_copy(DEFAULTS)

        if os.path.exists(self.config_path):
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    user_config = yaml.safe_load(f) or {}
                _deep_merge(config, user_config)
            except (yaml.YAMLError, OSError) as e:
                logger.error("Could not read %s: %s", self.config_path, e)
                config["_config_error"] = str(e)

        # Environment wins over config.yaml (set by app.py --backend)
        backend_url = os.environ.get(BACKEND_URL)
        if backend_url:
            config["backend"]["url"] = backend_url

        return config

    def save(self, config: dict) -> None:
        """Save the known sections back to config.yaml. Internal keys are dropped."""
        clean = {section: config[section] for section in SECTIONS if section in config}

        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.dump(
                clean,
                f,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=False,
            )

    def update(self, updates: dict) -> dict:
        """
        Partially update configuration and save.

        Args:
            updates: Dictionary of settings to update (can be partial).

        Returns:
            The full updated configuration.

        Raises:
            ValueError: If updates contains an unknown section.
        """
        unknown = [key for key in updates if key not in SECTIONS]
        if unknown:
            raise ValueError(f"Unknown config section(s): {', '.join(unknown)}")

        config = self.load()
        _deep_merge(config, updates)
        self.save(config)
        return config

    # -- Secret Management ----------------------------------------------------

    def get_secret(self, key_name: str) -> str | None:
        """Return a secret from .env, falling back to the process environment."""
        return self._env_values().get(key_name) or os.environ.get(key_name)

    def get_secrets(self) -> dict:
        """
        List known secrets with masked values.

        Returns:
            Dict with 'keys' mapping names to masked values.
            Example: {"keys": {"WARDEN_BACKEND_TOKEN": "eyJhbG****x9Qk"}}
        """
        env_values = self._env_values()
        return {
            "keys": {
                name: _mask_key(env_values.get(name) or "")
                for name in KNOWN_SECRETS
            }
        }

    def set_secret(self, key_name: str, value: str) -> None:
        """
        Set or update a secret in the .env file.

        Raises:
            ValueError: If the name is not a known secret or the value is empty.
        """
        if key_name not in KNOWN_SECRETS:
            raise ValueError(f"Unknown secret '{key_name}'")
        if not value:
            raise ValueError(f"Empty value for '{key_name}'")
        self._write_env_key(key_name, value)

    def delete_secret(self, key_name: str) -> None:
        """
        Remove a secret from the .env file.

        Raises:
            KeyError: If the key is not found in the .env file.
        """
        if not os.path.exists(self.env_path):
            raise KeyError(f"Secret '{key_name}' not found")

        with open(self.env_path, "r", encoding="utf-8") as f:
            lines = f.readlines()

        new_lines = [line for line in lines if not line.strip().startswith(f"{key_name}=")]
        if len(new_lines) == len(lines):
            raise KeyError(f"Secret '{key_name}' not found")

        with open(self.env_path, "w", encoding="utf-8") as f:
            f.writelines(new_lines)

    def _env_values(self) -> dict:
        return dotenv_values(self.env_path) if os.path.exists(self.env_path) else {}

    def _write_env_key(self, key_name: str, value: str) -> None:
        """Replace key_name in .env in place, or append it."""
        lines = []
        if os.path.exists(self.env_path):
            with open(self.env_path, "r", encoding="utf-8") as f:
                lines = f.readlines()

        found = False
        new_lines = []
        for line in lines:
            if line.strip().startswith(f"{key_name}="):
                new_lines.append(f"{key_name}={value}\n")
                found = True
            else:
                new_lines.append(line)

        if not found:
            new_lines.append(f"{key_name}={value}\n")

        with open(self.env_path, "w", encoding="utf-8") as f:
            f.writelines(new_lines)


# -- Helper Functions ---------------------------------------------------------

def _deep_copy(d: dict) -> dict:
    """Create a deep copy of a nested dictionary."""
    result = {}
    for key, value in d.items():
        if isinstance(value, dict):
            result[key] = _deep_copy(value)
        elif isinstance(value, list):
            result[key] = list(value)
        else:
            result[key] = value
    return result


def _deep_merge(base: dict, override: dict) -> None:
    """
    Recursively merge 'override' into 'base' (in-place).

    For nested dicts, values are merged recursively.
    For all other types, override replaces base.
    """
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


def _mask_key(value: str) -> str:
    """
    Mask a secret for display: first 6 and last 4 characters are kept.
    Values shorter than 12 characters are fully masked.
    """
    if not value or len(value) < 12:
        return "****" if value else ""
    return f"{value[:6]}****{value[-4:]}"
