"""
TRW Configuration System
========================

Loads settings from trw.yaml with environment variable overrides.

Author: TRW maintainers | 2026-10-18
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "trw.yaml"

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# =============================================================================
# Configuration Data Classes
# =============================================================================

@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "WARNING"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class IOConfig:
    """File handling configuration for the CLI."""
    rules: Optional[str] = None  # Default rules file
    backup_suffix: str = ""  # Keep original as FILE+suffix on in-place rewrite


@dataclass
class TRWConfig:
    """Root configuration container."""
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    io: IOConfig = field(default_factory=IOConfig)


# =============================================================================
# Configuration Loader
# =============================================================================

def find_config_file(start_path: Optional[Path] = None) -> Optional[Path]:
    """
    Find trw.yaml by searching upward from start_path.

    Search order:
    1. start_path / trw.yaml
    2. start_path / .trw / trw.yaml
    3. Parent directories (recursive)
    4. ~/.config/trw/trw.yaml

    Args:
        start_path: Starting directory (defaults to cwd)

    Returns:
        Path to config file or None if not found
    """
    if start_path is None:
        start_path = Path.cwd()

    current = Path(start_path).resolve()
    for _ in range(10):  # Max 10 levels up
        for candidate in (current / CONFIG_FILENAME, current / ".trw" / CONFIG_FILENAME):
            if candidate.exists():
                return candidate

        parent = current.parent
        if parent == current:
            break
        current = parent

    user_config = Path.home() / ".config" / "trw" / CONFIG_FILENAME
    if user_config.exists():
        return user_config

    return None


def load_config(config_path: Optional[Path] = None) -> TRWConfig:
    """
    Load configuration from YAML file with environment variable overrides.

    Environment variables override config file values:
    - TRW_LOG_LEVEL -> logging.level
    - TRW_RULES -> io.rules
    - TRW_BACKUP_SUFFIX -> io.backup_suffix

    Args:
        config_path: Path to config file (auto-detected if None)

    Returns:
        TRWConfig instance
    """
    config = TRWConfig()

    if config_path is None:
        config_path = find_config_file()

    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            config = _parse_config_dict(data)
        except (OSError, yaml.YAMLError, TypeError, AttributeError) as e:
            logger.warning(f"Failed to load config: {e}, using defaults")
    else:
        logger.info("No config file found, using defaults")

    config = _apply_env_overrides(config)
    _validate_config(config)

    return config


def _parse_config_dict(data: Dict[str, Any]) -> TRWConfig:
    """Parse configuration dictionary into TRWConfig."""
    config = TRWConfig()

    if "logging" in data:
        log = data["logging"] or {}
        config.logging = LoggingConfig(
            level=str(log.get("level", config.logging.level)).upper(),
            format=log.get("format", config.logging.format),
        )

    if "io" in data:
        io = data["io"] or {}
        config.io = IOConfig(
            rules=io.get("rules", config.io.rules),
            backup_suffix=io.get("backup_suffix", config.io.backup_suffix) or "",
        )
    return config


def _apply_env_overrides(config: TRWConfig) -> TRWConfig:
    """Apply environment variable overrides to config."""
    if os.environ.get("TRW_LOG_LEVEL"):
        config.logging.level = os.environ["TRW_LOG_LEVEL"].upper()

    if os.environ.get("TRW_RULES"):
        config.io.rules = os.environ["TRW_RULES"]

    if os.environ.get("TRW_BACKUP_SUFFIX"):
        config.io.backup_suffix = os.environ["TRW_BACKUP_SUFFIX"]

    return config


def _validate_config(config: TRWConfig) -> None:
    """Validate configuration and log warnings."""
    if config.logging.level not in VALID_LOG_LEVELS:
        logger.warning(f"Unknown log level '{config.logging.level}', defaulting to 'WARNING'")
        config.logging.level = "WARNING"

    if config.io.backup_suffix and "/" in config.io.backup_suffix:
        logger.warning(f"Backup suffix '{config.io.backup_suffix}' contains '/', disabling backups")
        config.io.backup_suffix = ""


def save_config(config: TRWConfig, path: Path) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: TRWConfig instance
        path: Output path
    """
    data = {
        "logging": {
            "level": config.logging.level,
            "format": config.logging.format,
        },
        "io": {
            "rules": config.io.rules,
            "backup_suffix": config.io.backup_suffix,
        },
    }

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    logger.info(f"Configuration saved to: {path}")


def configure_logging(config: TRWConfig, level: Optional[str] = None) -> None:
    """Set up root logging from the configuration (``level`` overrides it)."""
    logging.basicConfig(
        level=getattr(logging, (level or config.logging.level).upper(), logging.WARNING),
        format=config.logging.format,
    )


# =============================================================================
# Global Config Instance
# =============================================================================

_global_config: Optional[TRWConfig] = None


def get_config() -> TRWConfig:
    """Get the global configuration instance (lazy-loaded)."""
    global _global_config
    if _global_config is None:
        _global_config = load_config()
    return _global_config


def reload_config(config_path: Optional[Path] = None) -> TRWConfig:
    """Reload configuration from file."""
    global _global_config
    _global_config = load_config(config_path)
    return _global_config
