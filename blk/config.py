"""
Configuration management for BLK.

Provides a hierarchical configuration system with sensible defaults.
Supports both global (~/.config/blk/config.toml) and local (blk.toml) configurations.
"""
import os
import tomli
import tomli_w
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field, asdict

from blk.constants import (
    DEFAULT_DATABASE,
    DEFAULT_JSON_PATH,
    DEFAULT_SHARE_BASE_URL,
    DEFAULT_STORAGE_KEY,
)


@dataclass
class BlkConfig:
    """
    BLK configuration with sensible defaults.

    Configuration hierarchy (highest to lowest priority):
    1. Command-line arguments
    2. Environment variables (BLK_*)
    3. Config file given with --config
    4. Local config file (./blk.toml, ./.blkrc or ./.blk/config.toml)
    5. User config file (~/.config/blk/config.toml)
    6. System defaults
    """

    # Storage settings
    storage_backend: str = field(default="sqlite")  # sqlite, json or memory
    database: str = field(default=DEFAULT_DATABASE)
    database_url: Optional[str] = field(default=None)  # Full SQLAlchemy URL (overrides database)
    database_echo: bool = field(default=False)
    json_path: str = field(default=DEFAULT_JSON_PATH)
    storage_key: str = field(default=DEFAULT_STORAGE_KEY)

    # Sharing
    share_base_url: str = field(default=DEFAULT_SHARE_BASE_URL)

    # Display settings
    output_format: str = field(default="table")  # table, json, plain
    color_output: bool = field(default=True)
    confirm_delete: bool = field(default=True)

    # Export defaults
    export_pretty: bool = field(default=True)

    # Advanced
    log_level: str = field(default="WARNING")

    @classmethod
    def load(cls, config_file: Optional[Path] = None) -> "BlkConfig":
        """
        Load configuration from files and environment.

        Args:
            config_file: Specific config file to load (overrides search)

        Returns:
            Merged configuration object
        """
        config = cls()

        user_config_path = Path.home() / ".config" / "blk" / "config.toml"
        if user_config_path.exists():
            config._merge(cls._load_toml(user_config_path))

        # First local config found wins
        local_paths = [
            Path.cwd() / "blk.toml",
            Path.cwd() / ".blkrc",
            Path.cwd() / ".blk" / "config.toml"
        ]

        for path in local_paths:
            if path.exists():
                config._merge(cls._load_toml(path))
                break

        if config_file and config_file.exists():
            config._merge(cls._load_toml(config_file))

        config._apply_env_vars()
        config._expand_paths()

        return config

    @staticmethod
    def _load_toml(path: Path) -> Dict[str, Any]:
        """Load TOML configuration file."""
        with open(path, "rb") as f:
            return tomli.load(f)

    def _merge(self, data: Dict[str, Any]):
        """Merge configuration data into this instance, ignoring unknown keys."""
        for key, value in data.items():
            if hasattr(self, key):
                setattr(self, key, value)

    def _apply_env_vars(self):
        """Apply environment variables with BLK_ prefix."""
        prefix = "BLK_"
        for key, value in os.environ.items():
            if key.startswith(prefix):
                config_key = key[len(prefix):].lower()
                if hasattr(self, config_key):
                    current_value = getattr(self, config_key)
                    if isinstance(current_value, bool):
                        setattr(self, config_key, value.lower() in ("true", "1", "yes"))
                    elif isinstance(current_value, int):
                        setattr(self, config_key, int(value))
                    else:
                        setattr(self, config_key, value)

    def _expand_paths(self):
        """Expand ~ and environment variables in paths."""
        path_fields = ["database", "json_path"]
        for field_name in path_fields:
            value = getattr(self, field_name)
            if isinstance(value, str):
                expanded = os.path.expanduser(os.path.expandvars(value))
                setattr(self, field_name, expanded)

    def save(self, path: Optional[Path] = None):
        """
        Save current configuration to TOML file.

        Args:
            path: Path to save to (defaults to user config)
        """
        if path is None:
            path = Path.home() / ".config" / "blk" / "config.toml"

        path.parent.mkdir(parents=True, exist_ok=True)

        # TOML has no null, so unset optional values are left out
        data = {k: v for k, v in asdict(self).items() if v is not None}
        with open(path, "wb") as f:
            tomli_w.dump(data, f)

    def get_database_path(self) -> Path:
        """Get the resolved database path."""
        path = Path(self.database)
        if not path.is_absolute():
            path = Path.cwd() / path
        return path

    def get_json_path(self) -> Path:
        """Get the resolved JSON storage file path."""
        path = Path(self.json_path)
        if not path.is_absolute():
            path = Path.cwd() / path
        return path


# Global configuration instance
_config: Optional[BlkConfig] = None


def get_config(reload: bool = False, config_file: Optional[Path] = None) -> BlkConfig:
    """
    Get the global configuration instance.

    Args:
        reload: Force reload configuration from files
        config_file: Specific config file to load

    Returns:
        Global configuration instance
    """
    global _config
    if _config is None or reload or config_file:
        _config = BlkConfig.load(config_file)
    return _config


def init_config(database: Optional[str] = None, config_file: Optional[Path] = None,
                **kwargs) -> BlkConfig:
    """
    Initialize configuration with command-line overrides.

    Args:
        database: Database path override
        config_file: Explicit config file to load
        **kwargs: Other configuration overrides

    Returns:
        Configured instance
    """
    config = get_config(config_file=config_file)

    if database:
        config.database = database

    for key, value in kwargs.items():
        if hasattr(config, key) and value is not None:
            setattr(config, key, value)

    return config
