"""Configuration management for txclassifier."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .classifier.engine import DETECTOR_PRIORITIES
from .classifier.registry import REGISTRY_FILENAME

logger = logging.getLogger(__name__)

DEFAULT_CACHE_SIZE = 100
DEFAULT_CACHE_TTL = 3600
DEFAULT_MAX_WORKERS = 4
DEFAULT_CLASSIFICATION_TIMEOUT = 2.0
DEFAULT_CONFLICT_MARGIN = 0.10

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass
class Config:
    """Classifier configuration loaded from environment."""

    config_dir: Path = Path("./config")
    registry_file: Optional[Path] = None

    # Engine
    debug_trace: bool = False
    parallel_detectors: bool = False
    max_workers: int = DEFAULT_MAX_WORKERS
    classification_timeout: float = DEFAULT_CLASSIFICATION_TIMEOUT
    conflict_margin: float = DEFAULT_CONFLICT_MARGIN
    disabled_detectors: set[str] = field(default_factory=set)

    # Result cache (0 disables)
    cache_size: int = DEFAULT_CACHE_SIZE
    cache_ttl_seconds: int = DEFAULT_CACHE_TTL

    log_level: str = "INFO"

    def __post_init__(self):
        """Normalize paths."""
        self.config_dir = Path(self.config_dir)
        if self.registry_file is None:
            self.registry_file = self.config_dir / REGISTRY_FILENAME
        else:
            self.registry_file = Path(self.registry_file)
        self.log_level = (self.log_level or "INFO").upper()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid integer for %s: %r (using %s)", name, raw, default)
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Invalid number for %s: %r (using %s)", name, raw, default)
        return default


def load_config() -> Config:
    """Load configuration from environment variables."""
    load_dotenv()

    # Parse disabled detectors from comma-separated string
    disabled_str = os.getenv("DISABLED_DETECTORS", "")
    disabled = {d.strip().lower() for d in disabled_str.split(",") if d.strip()}

    registry_file = os.getenv("REGISTRY_FILE", "").strip()

    return Config(
        config_dir=Path(os.getenv("CONFIG_DIR", "./config")),
        registry_file=Path(registry_file) if registry_file else None,
        debug_trace=_env_bool("DEBUG_CLASSIFIER"),
        parallel_detectors=_env_bool("CLASSIFIER_PARALLEL"),
        max_workers=_env_int("CLASSIFIER_MAX_WORKERS", DEFAULT_MAX_WORKERS),
        classification_timeout=_env_float("CLASSIFICATION_TIMEOUT", DEFAULT_CLASSIFICATION_TIMEOUT),
        conflict_margin=_env_float("CONFLICT_MARGIN", DEFAULT_CONFLICT_MARGIN),
        disabled_detectors=disabled,
        cache_size=_env_int("CLASSIFIER_CACHE_SIZE", DEFAULT_CACHE_SIZE),
        cache_ttl_seconds=_env_int("CLASSIFIER_CACHE_TTL", DEFAULT_CACHE_TTL),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )


def validate_config(config: Config) -> list[str]:
    """Validate configuration and return list of error messages."""
    errors: list[str] = []
    if config.cache_size < 0:
        errors.append("CLASSIFIER_CACHE_SIZE must be >= 0")
    if config.cache_ttl_seconds < 0:
        errors.append("CLASSIFIER_CACHE_TTL must be >= 0")
    if config.max_workers < 1:
        errors.append("CLASSIFIER_MAX_WORKERS must be >= 1")
    if config.classification_timeout <= 0:
        errors.append("CLASSIFICATION_TIMEOUT must be > 0")
    if not 0 <= config.conflict_margin <= 1:
        errors.append("CONFLICT_MARGIN must be between 0 and 1")
    if config.log_level not in _LOG_LEVELS:
        errors.append(f"LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}")

    unknown = sorted(config.disabled_detectors - set(DETECTOR_PRIORITIES))
    if unknown:
        errors.append(f"DISABLED_DETECTORS has unknown detector ids: {', '.join(unknown)}")
    if set(DETECTOR_PRIORITIES) <= config.disabled_detectors:
        errors.append("DISABLED_DETECTORS disables every detector")

    if config.registry_file and not config.registry_file.exists():
        # Embedded tables still apply.
        logger.info("No registry overlay at %s; using embedded signal tables", config.registry_file)

    return errors
