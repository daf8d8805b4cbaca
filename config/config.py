"""Hierarchical configuration loading and validation.

Implements a configuration system with the following precedence:
1. Default values (lowest priority)
2. JSON configuration files
3. Environment variables
4. Command-line arguments (highest priority)

Configuration is deep-merged across all sources, allowing partial overrides
at any level of the configuration hierarchy.
"""
from __future__ import annotations

import argparse
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from core.exceptions import ConfigurationError

_SCORE_FIELDS = (
    "min_fuzzy_score",
    "single_word_threshold",
    "single_word_edit_floor",
    "last_word_bonus",
    "longer_alias_bonus",
    "prefix_bonus",
    "phonetic_bonus",
    "specificity_bonus",
)

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class MatchingConfig:
    """Phrase matching thresholds and score bonuses.

    Attributes:
        min_fuzzy_score: Acceptance threshold for multi-word phrases
        single_word_threshold: Acceptance threshold for single words
        single_word_max_edits: Edit distance that still accepts a single word
        single_word_edit_floor: Minimum score when accepting on edit distance
        last_word_bonus: Bonus when phrase and alias share their last word
        longer_alias_bonus: Bonus when the alias is longer than the phrase
        prefix_bonus: Bonus when the alias starts with the phrase's first word
        phonetic_bonus: Bonus for equal phonetic codes (0 disables phonetics)
        specificity_bonus: Tie-break nudge for longer aliases
        max_phrase_words: Maximum words considered in front of a numeral
    """
    min_fuzzy_score: float = 0.94
    single_word_threshold: float = 0.82
    single_word_max_edits: int = 2
    single_word_edit_floor: float = 0.80
    last_word_bonus: float = 0.02
    longer_alias_bonus: float = 0.01
    prefix_bonus: float = 0.01
    phonetic_bonus: float = 0.0
    specificity_bonus: float = 0.005
    max_phrase_words: int = 5

    def __post_init__(self):
        for name in _SCORE_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"Invalid {name}: {value!r} (expected 0.0-1.0)")
        if not isinstance(self.single_word_max_edits, int) or self.single_word_max_edits < 0:
            raise ConfigurationError(f"Invalid single_word_max_edits: {self.single_word_max_edits!r}")
        if not isinstance(self.max_phrase_words, int) or self.max_phrase_words < 1:
            raise ConfigurationError(f"Invalid max_phrase_words: {self.max_phrase_words!r}")


@dataclass(frozen=True)
class SessionConfig:
    """Listening session configuration.

    Attributes:
        log_dir: Directory for session log files
        suppress_duplicate_finals: Ignore a final transcript identical to the previous one
        max_log_entries: Size of the in-memory speech log
    """
    log_dir: str = "logs/sessions"
    suppress_duplicate_finals: bool = True
    max_log_entries: int = 500

    def __post_init__(self):
        if not isinstance(self.max_log_entries, int) or self.max_log_entries < 1:
            raise ConfigurationError(f"Invalid max_log_entries: {self.max_log_entries!r}")


@dataclass(frozen=True)
class AppConfig:
    """Complete application configuration.

    Attributes:
        matching: Phrase matching settings
        session: Listening session settings
        species_data: Alias data loaded from aliases.json
            ({"species": {canonical: [aliases]}, "selected": [canonical]})
        debug: Debug mode flag
        log_level: Logging verbosity level
    """
    matching: MatchingConfig = field(default_factory=MatchingConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    species_data: Dict[str, Any] = field(default_factory=dict)
    debug: bool = False
    log_level: str = "INFO"

    def __post_init__(self):
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid log_level: {self.log_level}")


class ConfigLoader:
    """Configuration loader applying defaults → files → env → CLI with deep merging."""

    JSON_FILES = {
        "matching": "matching.json",
        "session": "session.json",
        "species_data": "aliases.json",
    }

    def __init__(self, config_dir: Path = Path("config")):
        self.config_dir = Path(config_dir)

    def load(self, argv: List[str]) -> Tuple[AppConfig, List[str]]:
        """Load configuration.

        Args:
            argv: Command-line arguments to parse

        Returns:
            Tuple of (AppConfig instance, unknown CLI arguments)

        Raises:
            ConfigurationError: If a value is invalid
        """
        config_dict = self._get_defaults()

        self._deep_update(config_dict, self._load_json_configs())
        self._deep_update(config_dict, self._load_env_overrides())

        cli_overrides, unknown_args = self._parse_cli_args(argv)
        self._deep_update(config_dict, cli_overrides)

        return self._build_config(config_dict), unknown_args

    def _get_defaults(self) -> Dict[str, Any]:
        return {
            "matching": dict(MatchingConfig().__dict__),
            "session": dict(SessionConfig().__dict__),
            "species_data": {"species": {}, "selected": []},
            "debug": False,
            "log_level": "INFO",
        }

    def _load_json_configs(self) -> Dict[str, Any]:
        """Load the JSON files that exist; unreadable files are skipped with a warning."""
        json_configs: Dict[str, Any] = {}

        for key, filename in self.JSON_FILES.items():
            file_path = self.config_dir / filename
            if not file_path.exists():
                continue
            try:
                with open(file_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except (json.JSONDecodeError, IOError) as e:
                logger.warning(f"Failed to load {filename}: {e}")
                continue
            if not isinstance(data, dict):
                logger.warning(f"Ignoring {filename}: expected a JSON object")
                continue
            json_configs[key] = data

        return json_configs

    def _load_env_overrides(self) -> Dict[str, Any]:
        """Read overrides from the environment.

        Supported environment variables:
        - TALLY_MIN_FUZZY_SCORE: Multi-word acceptance threshold
        - TALLY_PHONETIC_BONUS: Phonetic bonus (0 disables)
        - TALLY_SESSION_LOG_DIR: Session log directory
        - DEBUG: Enable debug mode
        - LOG_LEVEL: Logging level
        """
        overrides: Dict[str, Any] = {}

        min_score = os.getenv("TALLY_MIN_FUZZY_SCORE")
        if min_score:
            overrides.setdefault("matching", {})["min_fuzzy_score"] = self._env_float(
                "TALLY_MIN_FUZZY_SCORE", min_score)

        phonetic = os.getenv("TALLY_PHONETIC_BONUS")
        if phonetic:
            overrides.setdefault("matching", {})["phonetic_bonus"] = self._env_float(
                "TALLY_PHONETIC_BONUS", phonetic)

        log_dir = os.getenv("TALLY_SESSION_LOG_DIR")
        if log_dir:
            overrides.setdefault("session", {})["log_dir"] = log_dir

        if self._env_bool("DEBUG"):
            overrides["debug"] = True

        log_level = os.getenv("LOG_LEVEL")
        if log_level:
            overrides["log_level"] = log_level.upper()

        return overrides

    def _parse_cli_args(self, argv: List[str]) -> Tuple[Dict[str, Any], List[str]]:
        parser = argparse.ArgumentParser(description="Voice tally", add_help=False)
        parser.add_argument("--min-fuzzy-score", type=float,
                            help="Acceptance threshold for multi-word fuzzy matches")
        parser.add_argument("--phonetic-bonus", type=float,
                            help="Score bonus for phonetically equal phrases (0 disables)")
        parser.add_argument("--session-log-dir", help="Directory for session log files")
        parser.add_argument("--allow-duplicate-finals", action="store_true",
                            help="Parse a final transcript even if it repeats the previous one")
        parser.add_argument("--debug", action="store_true", help="Enable debug mode")
        parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                            help="Set logging level")

        known, unknown = parser.parse_known_args(argv)

        overrides: Dict[str, Any] = {}
        if known.min_fuzzy_score is not None:
            overrides.setdefault("matching", {})["min_fuzzy_score"] = known.min_fuzzy_score
        if known.phonetic_bonus is not None:
            overrides.setdefault("matching", {})["phonetic_bonus"] = known.phonetic_bonus
        if known.session_log_dir:
            overrides.setdefault("session", {})["log_dir"] = known.session_log_dir
        if known.allow_duplicate_finals:
            overrides.setdefault("session", {})["suppress_duplicate_finals"] = False
        if known.debug:
            overrides["debug"] = True
        if known.log_level:
            overrides["log_level"] = known.log_level

        return overrides, unknown

    def _build_config(self, config_dict: Dict[str, Any]) -> AppConfig:
        try:
            matching = MatchingConfig(**config_dict.get("matching", {}))
            session = SessionConfig(**config_dict.get("session", {}))
        except TypeError as e:
            raise ConfigurationError(f"Unknown configuration key: {e}") from e

        return AppConfig(
            matching=matching,
            session=session,
            species_data=config_dict.get("species_data", {}),
            debug=config_dict.get("debug", False),
            log_level=config_dict.get("log_level", "INFO"),
        )

    @staticmethod
    def _env_float(name: str, raw: str) -> float:
        try:
            return float(raw)
        except ValueError as e:
            raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e

    @staticmethod
    def _env_bool(name: str, default: bool = False) -> bool:
        """True for "1", "true", "yes", "y", "on"."""
        val = os.getenv(name)
        if val is None:
            return default
        return val.strip().lower() in {"1", "true", "yes", "y", "on"}

    @staticmethod
    def _deep_update(target: Dict[str, Any], updates: Dict[str, Any]) -> None:
        """Recursively merge ``updates`` into ``target`` without clobbering nested dicts."""
        for key, new_val in updates.items():
            if isinstance(new_val, dict) and isinstance(target.get(key), dict):
                ConfigLoader._deep_update(target[key], new_val)
            else:
                target[key] = new_val


def parse_app_args(argv: List[str], config_dir: Optional[Path] = None) -> Tuple[AppConfig, List[str]]:
    """Create a ConfigLoader and load configuration for ``argv``."""
    loader = ConfigLoader(config_dir) if config_dir is not None else ConfigLoader()
    return loader.load(argv)


__all__ = ["AppConfig", "MatchingConfig", "SessionConfig", "ConfigLoader", "parse_app_args"]
