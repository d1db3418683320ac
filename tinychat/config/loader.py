"""Configuration loading utilities."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from tinychat.config.schema import Config
from tinychat.logging import get_logger
from tinychat.utils.helpers import atomic_write_text

logger = get_logger(__name__)


def get_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".tinychat" / "settings.json"


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from file or create default.

    A missing file yields the defaults. An unreadable or invalid file is
    reported and the defaults are used instead.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        Loaded configuration object.
    """
    path = config_path or get_config_path()

    if not path.exists():
        return Config()

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return Config.model_validate(data)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.warning("config_load_failed", path=str(path), error=str(e))
        return Config()


def save_config(config: Config, config_path: Path | None = None) -> None:
    """
    Save configuration to file.

    Write failures are logged; the running client keeps the in-memory settings.

    Args:
        config: Configuration to save.
        config_path: Optional path to save to. Uses default if not provided.
    """
    path = config_path or get_config_path()
    data = config.model_dump(by_alias=True)
    try:
        atomic_write_text(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")
    except OSError as e:
        logger.warning("config_save_failed", path=str(path), error=str(e))
        return
    logger.debug("config_saved", path=str(path), model=config.model, memory=config.memory)
