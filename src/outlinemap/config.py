"""Configuration management.

The whole file is validated when it is loaded; a bad value in any section
fails the load, before the editor starts.
"""

from pathlib import Path
from typing import Optional

from outlinemap.models.config import Config, EditorConfig, SimulationConfig, ViewConfig
from outlinemap.utils.logging import get_logger


logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "outlinemap" / "config.yaml"


class ConfigManager:
    """
    Configuration manager with per-section accessors.

    Unlike a credentials file, the Outlinemap config is entirely optional:
    a missing default file means "use the defaults".

    Example:
        >>> config_mgr = ConfigManager.load_default()
        >>> config_mgr.simulation.link_distance
        100.0
    """

    def __init__(self, config: Config):
        """
        Initialize config manager with loaded config.

        Args:
            config: Loaded and validated Config instance
        """
        self._config = config

    @classmethod
    def load_default(cls) -> "ConfigManager":
        """
        Load configuration from ~/.config/outlinemap/config.yaml, or defaults.

        Returns:
            ConfigManager instance

        Raises:
            ValueError: If the file exists but is invalid
        """
        if not DEFAULT_CONFIG_PATH.exists():
            logger.info("config_default_used", path=str(DEFAULT_CONFIG_PATH))
            return cls(Config())
        return cls.load_from_path(DEFAULT_CONFIG_PATH)

    @classmethod
    def load(cls, path: Optional[Path]) -> "ConfigManager":
        """Load from an explicit path when given, otherwise the default location."""
        if path is None:
            return cls.load_default()
        return cls.load_from_path(path)

    @classmethod
    def load_from_path(cls, path: Path) -> "ConfigManager":
        """
        Load configuration from specific path.

        Args:
            path: Path to config.yaml file

        Returns:
            ConfigManager instance with loaded config

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        logger.info("config_loading", path=str(path))

        try:
            config = Config.load(path)
            logger.info("config_loaded", path=str(path))
            return cls(config)

        except FileNotFoundError as e:
            logger.error("config_not_found", path=str(path), error=str(e))
            raise

        except Exception as e:
            logger.error("config_validation_error", path=str(path), error=str(e))
            raise ValueError(f"Configuration validation failed: {e}") from e

    @property
    def config(self) -> Config:
        return self._config

    @property
    def simulation(self) -> SimulationConfig:
        """Force simulation settings."""
        return self._config.simulation

    @property
    def view(self) -> ViewConfig:
        """Graph canvas settings."""
        return self._config.view

    @property
    def editor(self) -> EditorConfig:
        """Source editor settings."""
        return self._config.editor
