"""
YAML settings parser for searcher.

This module loads optional user settings (default color mode and log level)
from a YAML file. It handles settings file discovery, parsing and validation,
and reports configuration problems as ConfigurationError.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List, Union
import logging
from dataclasses import dataclass
from pydantic import ValidationError

from ..errors import SearcherError
from ..models.config import SearchSettings


logger = logging.getLogger(__name__)


@dataclass
class ConfigParseResult:
    """
    Result of a settings parsing operation.

    Attributes:
        settings: The parsed and validated settings
        warnings: List of non-fatal warnings
        config_path: Path to the settings file used
        is_default: Whether default settings were used
    """
    settings: SearchSettings
    warnings: List[str]
    config_path: Optional[Path]
    is_default: bool


class ConfigurationError(SearcherError):
    """Raised when settings parsing or validation fails."""
    pass


class ConfigParser:
    """
    YAML settings parser with validation and error handling.

    Settings files are optional. When no path is given the parser searches
    the current directory, the home directory and the XDG config directory
    for one of DEFAULT_CONFIG_NAMES and falls back to defaults.
    """

    DEFAULT_CONFIG_NAMES = [
        '.searcher.yaml',
        '.searcher.yml',
        'searcher.yaml',
        'searcher.yml',
    ]

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def load_config(self, config_path: Optional[Union[str, Path]] = None) -> ConfigParseResult:
        """
        Load and parse settings from file or use defaults.

        Args:
            config_path: Path to settings file. If None, searches for default files.

        Returns:
            ConfigParseResult containing parsed settings and metadata

        Raises:
            ConfigurationError: If the settings file is invalid or cannot be read
        """
        warnings: List[str] = []

        if config_path:
            config_path = Path(config_path)
            if not config_path.exists():
                raise ConfigurationError(f"Configuration file not found: {config_path}")
            config_data = self._load_yaml_file(config_path, warnings)
            is_default = False
        else:
            config_path, config_data = self._find_and_load_config(warnings)
            is_default = config_data is None
            if is_default:
                config_data = {}

        settings = self._validate_config_data(config_data, warnings)
        self.logger.info(f"Settings loaded from {config_path or 'defaults'}")

        return ConfigParseResult(
            settings=settings,
            warnings=warnings,
            config_path=config_path,
            is_default=is_default
        )

    def get_search_paths(self) -> List[Path]:
        """Directories searched for a settings file, in priority order."""
        return [
            Path.cwd(),
            Path.home(),
            Path.home() / '.config' / 'searcher',
        ]

    def _find_and_load_config(self, warnings: List[str]) -> tuple[Optional[Path], Optional[Dict[str, Any]]]:
        """
        Find and load a settings file from the default locations.

        Returns:
            Tuple of (config_path, config_data) or (None, None) if not found
        """
        for search_path in self.get_search_paths():
            for config_name in self.DEFAULT_CONFIG_NAMES:
                config_file = search_path / config_name
                if config_file.is_file():
                    self.logger.debug(f"Found settings file: {config_file}")
                    return config_file, self._load_yaml_file(config_file, warnings)

        self.logger.debug("No settings file found, using defaults")
        return None, None

    def _load_yaml_file(self, file_path: Path, warnings: List[str]) -> Dict[str, Any]:
        """
        Load and parse a YAML file.

        Raises:
            ConfigurationError: If the file cannot be read or parsed
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                content = f.read()

            if not content.strip():
                warnings.append(f"Configuration file is empty: {file_path}")
                return {}

            data = yaml.safe_load(content)
            if data is None:
                return {}

            if not isinstance(data, dict):
                raise ConfigurationError(
                    f"Configuration file must contain a YAML object, got {type(data).__name__}"
                )

            return data

        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {file_path}: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigurationError(f"Cannot read configuration file {file_path}: {e}") from e

    def _validate_config_data(self, config_data: Dict[str, Any], warnings: List[str]) -> SearchSettings:
        """
        Validate settings data, ignoring unknown keys with a warning.

        Raises:
            ConfigurationError: If a known key has an invalid value
        """
        known_keys = set(SearchSettings.model_fields)
        for key in config_data:
            if key not in known_keys:
                warnings.append(f"Unknown configuration key ignored: {key}")

        known = {key: value for key, value in config_data.items() if key in known_keys}
        try:
            return SearchSettings(**known)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e


def load_config(config_path: Optional[Union[str, Path]] = None) -> ConfigParseResult:
    """
    Convenience function to load settings.

    Raises:
        ConfigurationError: If the settings file is invalid
    """
    parser = ConfigParser()
    return parser.load_config(config_path)
