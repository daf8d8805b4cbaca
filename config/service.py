"""Configuration service facade for simplified configuration access.

Gives the session layer flat access to configuration values and derives the
objects the parser needs (match settings, alias tables) from the loaded data.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from config.config import AppConfig, ConfigLoader
from tally_parser.alias_table import build_alias_table, normalize_species
from tally_parser.config import MatchSettings


class ConfigurationService:
    """Facade for application configuration.

    Example:
        config_service = ConfigurationService(config)
        settings = config_service.match_settings
        table = config_service.alias_table()

    Attributes:
        _config: Underlying AppConfig instance
    """

    def __init__(self, config: AppConfig):
        self._config = config

    # Matching configuration
    @property
    def match_settings(self) -> MatchSettings:
        """Matching constants for the parser."""
        return MatchSettings.from_matching_config(self._config.matching)

    # Session configuration
    @property
    def session_log_dir(self) -> str:
        return self._config.session.log_dir

    @property
    def suppress_duplicate_finals(self) -> bool:
        return self._config.session.suppress_duplicate_finals

    @property
    def max_log_entries(self) -> int:
        return self._config.session.max_log_entries

    # General configuration
    @property
    def debug(self) -> bool:
        return self._config.debug

    @property
    def log_level(self) -> str:
        """Effective log level; debug mode forces DEBUG."""
        return "DEBUG" if self._config.debug else self._config.log_level

    # Species data
    @property
    def species_aliases(self) -> Dict[str, List[str]]:
        """Canonical species -> aliases, as configured."""
        species = self._config.species_data.get("species", {})
        if isinstance(species, list):
            # A plain list of species names without aliases
            return {str(name): [] for name in species}
        return {str(name): list(aliases or []) for name, aliases in species.items()}

    @property
    def known_species(self) -> List[str]:
        return sorted(normalize_species(name) for name in self.species_aliases)

    @property
    def selected_species(self) -> List[str]:
        return [normalize_species(name) for name in self._config.species_data.get("selected", [])]

    def alias_table(self, species: Optional[List[str]] = None) -> Dict[str, str]:
        """Alias table for ``species`` (all configured species when None)."""
        return build_alias_table(self.species_aliases, species)

    def to_dict(self) -> Dict[str, Any]:
        """Configuration as a dictionary for session logging."""
        return {
            "matching": self.match_settings.to_dict(),
            "session": {
                "log_dir": self.session_log_dir,
                "suppress_duplicate_finals": self.suppress_duplicate_finals,
                "max_log_entries": self.max_log_entries,
            },
            "species": len(self.species_aliases),
            "selected": self.selected_species,
            "debug": self.debug,
            "log_level": self.log_level,
        }


class ConfigurationServiceFactory:
    """Factory methods for ConfigurationService instances."""

    @staticmethod
    def create_from_args(args: list[str], config_dir: Optional[Path] = None) -> tuple[ConfigurationService, list[str]]:
        loader = ConfigLoader(config_dir) if config_dir is not None else ConfigLoader()
        config, unknown_args = loader.load(args)
        return ConfigurationService(config), unknown_args

    @staticmethod
    def create_from_config(config: AppConfig) -> ConfigurationService:
        return ConfigurationService(config)

    @staticmethod
    def create_default(config_dir: Optional[Path] = None) -> ConfigurationService:
        loader = ConfigLoader(config_dir) if config_dir is not None else ConfigLoader()
        config, _ = loader.load([])
        return ConfigurationService(config)
