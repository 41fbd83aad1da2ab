"""
Configuration management for Song Ranker
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from loguru import logger

VALID_STRATEGIES = ("adaptive", "legacy")
VALID_LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@dataclass
class RankingConfig:
    """Configuration for pair selection and Elo updates."""

    strategy: str = "adaptive"  # adaptive or legacy
    k_factor: float = 32.0
    fast_decision_ms: int = 3000  # Faster than this = strong preference
    slow_decision_ms: int = 10000  # Slower than this = weak preference
    fast_k_factor: float = 48.0
    slow_k_factor: float = 16.0

    def validate(self) -> None:
        """Validate ranking configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if self.strategy not in VALID_STRATEGIES:
            raise ValueError(
                f"Invalid strategy: {self.strategy!r}. "
                f"Valid strategies are: {', '.join(VALID_STRATEGIES)}"
            )
        if min(self.k_factor, self.fast_k_factor, self.slow_k_factor) <= 0:
            raise ValueError("K-factors must be positive")
        if self.fast_decision_ms > self.slow_decision_ms:
            raise ValueError(
                f"fast_decision_ms ({self.fast_decision_ms}) must not exceed "
                f"slow_decision_ms ({self.slow_decision_ms})"
            )


@dataclass
class DeduplicationConfig:
    """Configuration for duplicate detection."""

    fuzzy_threshold: int = 85  # Similarity must be strictly above this
    exclude_instrumentals: bool = True

    def validate(self) -> None:
        """Validate deduplication configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if not 0 <= self.fuzzy_threshold <= 100:
            raise ValueError(
                f"fuzzy_threshold must be between 0 and 100, got {self.fuzzy_threshold}"
            )


@dataclass
class SessionConfig:
    """Configuration for building ranking sessions."""

    large_session_warning: int = 150  # Warn above this many songs

    def validate(self) -> None:
        """Validate session configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if self.large_session_warning < 1:
            raise ValueError(
                f"large_session_warning must be positive, got {self.large_session_warning}"
            )


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # TRACE, DEBUG, INFO, SUCCESS, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = (
        None  # Custom log file path (default: ~/.local/share/song-ranker/song-ranker.log)
    )
    console_output: bool = False  # Also output to stderr (for debugging)

    def validate(self) -> None:
        """Validate logging configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if self.level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: {self.level!r}. "
                f"Valid levels are: {', '.join(VALID_LOG_LEVELS)}"
            )
        if self.log_file is not None and not isinstance(self.log_file, str):
            raise ValueError(f"log_file must be a path string, got {self.log_file!r}")


@dataclass
class Config:
    """Main configuration object."""

    ranking: RankingConfig = field(default_factory=RankingConfig)
    deduplication: DeduplicationConfig = field(default_factory=DeduplicationConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "song-ranker"
    return Path.home() / ".config" / "song-ranker"


def _find_project_config() -> Optional[Path]:
    """Find config.toml in project root by looking for pyproject.toml.

    Used during development so the project's config file is found even when
    the working directory is elsewhere.

    Returns:
        Path to config.toml in project root, or None if not found
    """
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            config_path = parent / "config.toml"
            return config_path if config_path.exists() else None
    return None


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Project root (detected via pyproject.toml) - for development
    2. Current working directory
    3. XDG_CONFIG_HOME/song-ranker (or ~/.config/song-ranker)
    """
    project_config = _find_project_config()
    if project_config:
        return project_config

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "song-ranker"
    return Path.home() / ".local" / "share" / "song-ranker"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# Song Ranker Configuration

[ranking]
# Pair selection strategy: "adaptive" (phase-aware) or "legacy"
strategy = "adaptive"

# Default Elo K-factor
k_factor = 32.0

# Decisions faster than this (ms) count as strong preferences
fast_decision_ms = 3000
fast_k_factor = 48.0

# Decisions slower than this (ms) count as weak preferences
slow_decision_ms = 10000
slow_k_factor = 16.0

[deduplication]
# Fuzzy matches need a similarity strictly above this (0-100)
fuzzy_threshold = 85

# Drop instrumental and a cappella versions before ranking
exclude_instrumentals = true

[session]
# Warn when a session would contain more songs than this
large_session_warning = 150

[logging]
# Log level (TRACE, DEBUG, INFO, SUCCESS, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/song-ranker/song-ranker.log)
# log_file = "/path/to/custom/song-ranker.log"

# Also output logs to console (useful for debugging)
console_output = false
""".strip()


def _section(section_cls, data: dict, defaults):
    """Build a config section, falling back to defaults on invalid values."""
    if not isinstance(data, dict):
        logger.warning(f"Expected a table for {section_cls.__name__}, got {data!r}. Using defaults.")
        return section_cls()

    known = {name: data[name] for name in defaults.__dataclass_fields__ if name in data}
    unknown = set(data) - set(known)
    if unknown:
        logger.warning(f"Ignoring unknown {section_cls.__name__} keys: {sorted(unknown)}")

    section = section_cls(**{**defaults.__dict__, **known})
    validate = getattr(section, "validate", None)
    if validate is not None:
        try:
            validate()
        except (ValueError, TypeError, AttributeError) as e:
            # Wrong-typed TOML values surface here as TypeError / AttributeError
            logger.warning(f"Invalid {section_cls.__name__}: {e}. Using defaults.")
            return section_cls()
    return section


def parse_config(toml_data: dict) -> Config:
    """Parse a loaded TOML document into a Config."""
    config = Config()

    if "ranking" in toml_data:
        config.ranking = _section(RankingConfig, toml_data["ranking"], config.ranking)
    if "deduplication" in toml_data:
        config.deduplication = _section(
            DeduplicationConfig, toml_data["deduplication"], config.deduplication
        )
    if "session" in toml_data:
        config.session = _section(SessionConfig, toml_data["session"], config.session)
    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        if isinstance(logging_data, dict) and isinstance(logging_data.get("log_file"), str):
            logging_data = dict(logging_data)
            logging_data["log_file"] = str(Path(logging_data["log_file"]).expanduser())
        config.logging = _section(LoggingConfig, logging_data, config.logging)

    return config


def _apply_env_overrides(config: Config) -> Config:
    """Environment variables override TOML values:
    - SONG_RANKER_STRATEGY
    - SONG_RANKER_LOG_LEVEL
    """
    strategy = os.environ.get("SONG_RANKER_STRATEGY")
    if strategy:
        if strategy in VALID_STRATEGIES:
            config.ranking.strategy = strategy
        else:
            logger.warning(f"Ignoring invalid SONG_RANKER_STRATEGY={strategy!r}")

    level = os.environ.get("SONG_RANKER_LOG_LEVEL")
    if level:
        if level.upper() in VALID_LOG_LEVELS:
            config.logging.level = level.upper()
        else:
            logger.warning(f"Ignoring invalid SONG_RANKER_LOG_LEVEL={level!r}")

    return config


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file or create default.

    Args:
        config_path: Explicit file to read (default: get_config_path())
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    path = config_path or get_config_path()

    if not path.exists():
        if config_path is None:
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(create_default_config(), encoding="utf-8")
                logger.info(f"Created default configuration at: {path}")
            except OSError as e:
                logger.warning(f"Could not write default configuration to {path}: {e}")
        return _apply_env_overrides(Config())

    try:
        with open(path, "rb") as f:
            toml_data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        logger.error(f"Error parsing {path}: {e}. Using default configuration.")
        return _apply_env_overrides(Config())

    try:
        config = parse_config(toml_data)
    except (TypeError, AttributeError, ValueError) as e:
        logger.error(f"Error loading configuration from {path}: {e}. Using default configuration.")
        return _apply_env_overrides(Config())

    return _apply_env_overrides(config)
