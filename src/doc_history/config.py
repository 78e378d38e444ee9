"""
Configuration management for doc-history.

Handles loading and managing configuration from files, environment variables,
and command-line options.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .version.diff_engine import DEFAULT_MAX_BYTES, DEFAULT_MAX_EDIT_DISTANCE, DEFAULT_MAX_LINES

logger = logging.getLogger(__name__)


@dataclass
class DiffConfig:
    """Defaults for comparisons."""

    context_lines: int = 3
    word_diff: bool = True
    collapse_unchanged: bool = True
    max_lines: int = DEFAULT_MAX_LINES
    max_bytes: int = DEFAULT_MAX_BYTES
    max_edit_distance: int = DEFAULT_MAX_EDIT_DISTANCE
    compare_workers: int = 4


@dataclass
class StoreConfig:
    """Where and as whom versions are recorded."""

    storage_path: Optional[Path] = field(default_factory=lambda: Path(".doc_history"))
    default_actor: str = field(default_factory=lambda: os.getenv("USER", "doc-history"))


@dataclass
class DocHistoryConfig:
    """Main configuration for doc-history."""

    diff: DiffConfig = field(default_factory=DiffConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    log_level: str = "WARNING"


def _parse_bool(value: str) -> bool:
    return value.lower() in ('true', '1', 'yes', 'on')


class ConfigManager:
    """Manages doc-history configuration from multiple sources."""

    _INT_SETTINGS = ('context_lines', 'max_lines', 'max_bytes', 'max_edit_distance', 'compare_workers')
    _BOOL_SETTINGS = ('word_diff', 'collapse_unchanged')

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = config_dir or Path.home() / '.doc-history'
        self.config_file = self.config_dir / 'config.yaml'
        self._config: Optional[DocHistoryConfig] = None

    def load_config(self) -> DocHistoryConfig:
        """Load configuration from all sources."""
        if self._config:
            return self._config

        # Start with defaults
        config = DocHistoryConfig()

        # Load from file if it exists
        if self.config_file.exists():
            file_config = self._load_from_file()
            config = self._merge_configs(config, file_config)

        # Override with environment variables
        env_config = self._load_from_env()
        config = self._merge_configs(config, env_config)

        self._config = config
        return config

    def _load_from_file(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        try:
            with open(self.config_file, 'r') as f:
                return yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Could not load config file {self.config_file}: {e}")
            return {}

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        env_config: Dict[str, Any] = {}

        for setting in self._INT_SETTINGS:
            value = os.getenv(f'DOC_HISTORY_{setting.upper()}')
            if value:
                try:
                    env_config.setdefault('diff', {})[setting] = int(value)
                except ValueError:
                    logger.warning(f"Ignoring non-integer DOC_HISTORY_{setting.upper()}={value!r}")

        for setting in self._BOOL_SETTINGS:
            value = os.getenv(f'DOC_HISTORY_{setting.upper()}')
            if value:
                env_config.setdefault('diff', {})[setting] = _parse_bool(value)

        storage_path = os.getenv('DOC_HISTORY_STORAGE_PATH')
        if storage_path:
            env_config.setdefault('store', {})['storage_path'] = storage_path

        actor = os.getenv('DOC_HISTORY_ACTOR')
        if actor:
            env_config.setdefault('store', {})['default_actor'] = actor

        log_level = os.getenv('DOC_HISTORY_LOG_LEVEL')
        if log_level:
            env_config['log_level'] = log_level.upper()

        return env_config

    def _merge_configs(self, base: DocHistoryConfig, override: Dict[str, Any]) -> DocHistoryConfig:
        """Merge configuration dictionaries."""
        if 'diff' in override:
            diff_overrides = override['diff'] or {}
            for setting in self._INT_SETTINGS:
                if setting in diff_overrides:
                    setattr(base.diff, setting, int(diff_overrides[setting]))
            for setting in self._BOOL_SETTINGS:
                if setting in diff_overrides:
                    value = diff_overrides[setting]
                    setattr(base.diff, setting, _parse_bool(value) if isinstance(value, str) else bool(value))

        if 'store' in override:
            store_overrides = override['store'] or {}
            if 'storage_path' in store_overrides:
                path = store_overrides['storage_path']
                base.store.storage_path = Path(path).expanduser() if path else None
            if 'default_actor' in store_overrides:
                base.store.default_actor = store_overrides['default_actor']

        if 'log_level' in override:
            base.log_level = str(override['log_level']).upper()

        return base

    def save_config(self, config: DocHistoryConfig) -> None:
        """Save configuration to file."""
        self.config_dir.mkdir(parents=True, exist_ok=True)

        config_dict = {
            'diff': {
                'context_lines': config.diff.context_lines,
                'word_diff': config.diff.word_diff,
                'collapse_unchanged': config.diff.collapse_unchanged,
                'max_lines': config.diff.max_lines,
                'max_bytes': config.diff.max_bytes,
                'max_edit_distance': config.diff.max_edit_distance,
                'compare_workers': config.diff.compare_workers,
            },
            'store': {
                'storage_path': str(config.store.storage_path) if config.store.storage_path else None,
                'default_actor': config.store.default_actor,
            },
            'log_level': config.log_level,
        }

        with open(self.config_file, 'w') as f:
            yaml.dump(config_dict, f, default_flow_style=False, indent=2)
        self._config = config

    def create_default_config(self) -> Path:
        """Create a default configuration file."""
        self.save_config(DocHistoryConfig())
        return self.config_file

    def get_config_info(self) -> Dict[str, Any]:
        """Get information about current configuration."""
        config = self.load_config()

        return {
            'config_file': str(self.config_file),
            'config_exists': self.config_file.exists(),
            'storage_path': str(config.store.storage_path),
            'context_lines': config.diff.context_lines,
            'max_lines': config.diff.max_lines,
            'max_bytes': config.diff.max_bytes,
            'max_edit_distance': config.diff.max_edit_distance,
        }


# Global config manager instance
_config_manager: Optional[ConfigManager] = None

def get_config_manager() -> ConfigManager:
    """Get the global config manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager

def load_config() -> DocHistoryConfig:
    """Load the current configuration."""
    return get_config_manager().load_config()
