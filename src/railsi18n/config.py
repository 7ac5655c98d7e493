# src/railsi18n/config.py
import configparser
from pathlib import Path
from typing import Any, Optional, Union


class Config:
    """Configuration manager for RailsI18n"""

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        self.config = configparser.ConfigParser()
        if config_path is None:
            self.config_path = Path(__file__).parent.parent / "config.ini"
        else:
            self.config_path = Path(config_path)

        # Set defaults
        self._set_defaults()

        # Load config file if it exists
        if self.config_path.exists():
            self.config.read(self.config_path, encoding='utf-8')

    def _set_defaults(self):
        """Set default configuration values"""
        self.config.add_section('resolver')
        self.config.set('resolver', 'locale_pattern', 'config/locales/**/*.yml')
        self.config.set('resolver', 'load_all_translations', 'false')
        self.config.set('resolver', 'default_locale', '')
        self.config.set('resolver', 'fallback_to_base_locale', 'true')
        self.config.set('resolver', 'load_paths_timeout_seconds', '30')

        self.config.add_section('watcher')
        self.config.set('watcher', 'enabled', 'true')
        self.config.set('watcher', 'poll_interval_seconds', '1.0')

        self.config.add_section('logging')
        self.config.set('logging', 'log_level', 'INFO')
        self.config.set('logging', 'enable_performance_logging', 'true')

    def get(self, section: str, key: str, fallback: Any = None) -> Any:
        """Get configuration value with type conversion"""
        try:
            value = self.config.get(section, key)
            if key.endswith('_seconds'):
                return float(value)
            if key in ('load_all_translations', 'fallback_to_base_locale',
                       'enabled', 'enable_performance_logging'):
                return value.strip().lower() == 'true'
            if key == 'default_locale':
                return value.strip() or fallback

            return value
        except (configparser.NoSectionError, configparser.NoOptionError):
            return fallback

    def set(self, section: str, key: str, value: Any) -> None:
        """Override a value at runtime (booleans are stored as 'true'/'false')."""
        if not self.config.has_section(section):
            self.config.add_section(section)
        if isinstance(value, bool):
            value = 'true' if value else 'false'
        self.config.set(section, key, str(value))

# Global config instance
config = Config()
