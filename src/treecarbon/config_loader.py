"""
Configuration loader for treecarbon.
Provides unified access to YAML, TOML, and JSON configuration files.

Supports:
- YAML (.yaml, .yml) - table layouts, species image settings
- TOML (.toml) - structured configuration with types
- JSON (.json) - alternative format for the same data

Features:
- Configuration file caching
- Built-in defaults when a configuration file is absent
- Unified API for all configuration types
"""
import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .exceptions import ConfigurationError, InvalidDataError
from .logging_config import get_logger

# Handle TOML imports for different Python versions
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

__all__ = [
    'ConfigLoader',
    'get_config_loader',
    'set_config_dir',
    'get_table_layout',
    'get_image_settings',
    'TABLE_LAYOUTS_FILE',
    'SPECIES_IMAGES_FILE',
]

logger = get_logger(__name__)

TABLE_LAYOUTS_FILE = 'table_layouts.yaml'
SPECIES_IMAGES_FILE = 'species_images.yaml'

# Defaults mirror the packaged cfg/ files and are used when a file is absent
DEFAULT_TABLE_LAYOUTS: Dict[str, Dict[str, Any]] = {
    'growth_coefficients': {
        'columns': {
            'region': 0, 'scientific_name': 1, 'species_code': 2,
            'independent_variable': 3, 'dependent_variable': 4,
            'equation_form': 7, 'a': 8, 'b': 9, 'c': 10, 'd': 11, 'e': 12,
            'mse': 15,
        },
    },
    'biomass_density': {
        'columns': {
            'species_code': 0, 'scientific_name': 1, 'common_name': 2,
            'density': 3,
        },
    },
}

DEFAULT_IMAGE_SETTINGS: Dict[str, Any] = {
    'seed_url_template': 'https://picsum.photos/seed/{seed}/480/320',
    'fallback_image': ('https://images.unsplash.com/photo-1501004318641-b39e6451bec6'
                       '?auto=format&fit=crop&w=800&q=80'),
    'overrides': {
        'acer palmatum': 'https://upload.wikimedia.org/wikipedia/commons/6/6d/Acer_palmatum0.jpg',
    },
}


class ConfigLoader:
    """Loads and manages treecarbon configuration from the cfg/ directory.

    Attributes:
        cfg_dir: Path to the configuration directory
    """

    def __init__(self, cfg_dir: Optional[Path] = None):
        """Initialize the configuration loader.

        Args:
            cfg_dir: Path to the configuration directory. Defaults to the
                cfg/ directory inside the package.
        """
        if cfg_dir is None:
            cfg_dir = Path(__file__).parent / 'cfg'
        self.cfg_dir = Path(cfg_dir)

        # Cache for configuration files (loaded once, reused)
        self._cache: Dict[str, Dict[str, Any]] = {}

    def _load_config_file(self, file_path: Path) -> Dict[str, Any]:
        """Load configuration from a YAML, TOML or JSON file.

        Args:
            file_path: Path to the configuration file

        Returns:
            Dictionary containing configuration data

        Raises:
            ConfigurationError: If the file is missing or the format is not supported
            InvalidDataError: If parsing fails or the file is empty
        """
        if not file_path.exists():
            raise ConfigurationError(f"Configuration file not found: {file_path}")

        suffix = file_path.suffix.lower()

        try:
            if suffix in ['.yaml', '.yml']:
                with open(file_path, 'r', encoding='utf-8') as f:
                    data = yaml.safe_load(f)
            elif suffix == '.toml':
                with open(file_path, 'rb') as f:
                    data = tomllib.load(f)
            elif suffix == '.json':
                with open(file_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            else:
                raise ConfigurationError(f"Unsupported configuration file format: {suffix}. "
                                         f"Supported formats: .yaml, .yml, .toml, .json")
        except yaml.YAMLError as e:
            raise InvalidDataError("YAML configuration", f"parsing error: {str(e)}") from e
        except json.JSONDecodeError as e:
            raise InvalidDataError("JSON configuration", f"parsing error: {str(e)}") from e
        except tomllib.TOMLDecodeError as e:
            raise InvalidDataError("TOML configuration", f"parsing error: {str(e)}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to load configuration from {file_path}: {str(e)}") from e

        if data is None:
            raise InvalidDataError("configuration file", f"{file_path.name} is empty or contains only comments")
        if not isinstance(data, dict):
            raise InvalidDataError("configuration file", f"{file_path.name} must contain a mapping")
        return data

    def load_config_file(self, filename: str) -> Dict[str, Any]:
        """Load a configuration file from cfg_dir with caching.

        Args:
            filename: File name relative to cfg_dir

        Returns:
            Dictionary containing configuration data
        """
        if filename not in self._cache:
            self._cache[filename] = self._load_config_file(self.cfg_dir / filename)
            logger.debug(f"Loaded configuration file {filename}")
        return self._cache[filename]

    def _load_or_default(self, filename: str, default: Dict[str, Any]) -> Dict[str, Any]:
        if not (self.cfg_dir / filename).exists():
            logger.debug(f"{filename} not found in {self.cfg_dir}; using built-in defaults")
            return default
        return self.load_config_file(filename)

    def get_table_layout(self, table: str) -> Dict[str, int]:
        """Get the column positions for a reference table.

        Args:
            table: Table name ('growth_coefficients' or 'biomass_density')

        Returns:
            Mapping of field name to zero-based column position

        Raises:
            ConfigurationError: If the table is not configured
        """
        layouts = self._load_or_default(TABLE_LAYOUTS_FILE, DEFAULT_TABLE_LAYOUTS)
        if table not in layouts:
            raise ConfigurationError(
                f"No layout configured for table '{table}'. "
                f"Configured tables: {list(layouts.keys())}"
            )
        columns = layouts[table].get('columns', {})
        try:
            return {name: int(position) for name, position in columns.items()}
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid column position in layout '{table}': {e}") from e

    def get_image_settings(self) -> Dict[str, Any]:
        """Get species image settings (seed URL template, fallback, overrides).

        Missing keys are filled from DEFAULT_IMAGE_SETTINGS; override keys are
        lower-cased.
        """
        data = self._load_or_default(SPECIES_IMAGES_FILE, DEFAULT_IMAGE_SETTINGS)
        settings = {**DEFAULT_IMAGE_SETTINGS, **data}
        settings['overrides'] = {
            str(name).lower().strip(): url
            for name, url in (settings.get('overrides') or {}).items()
        }
        return settings

    def clear_cache(self) -> None:
        """Clear the configuration file cache.

        Useful for testing or when configuration files may have changed.
        """
        self._cache.clear()


# Global configuration loader instance
_config_loader: Optional[ConfigLoader] = None


def get_config_loader() -> ConfigLoader:
    """Get the shared configuration loader instance."""
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader


def set_config_dir(cfg_dir: Union[str, Path, None]) -> ConfigLoader:
    """Point the shared loader at another configuration directory.

    Args:
        cfg_dir: Directory path, or None to restore the packaged cfg/ directory

    Returns:
        The new shared ConfigLoader
    """
    global _config_loader
    _config_loader = ConfigLoader(Path(cfg_dir) if cfg_dir is not None else None)
    return _config_loader


def get_table_layout(table: str) -> Dict[str, int]:
    """Convenience function to get a table's column layout."""
    return get_config_loader().get_table_layout(table)


def get_image_settings() -> Dict[str, Any]:
    """Convenience function to get species image settings."""
    return get_config_loader().get_image_settings()
