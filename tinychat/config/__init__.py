"""Configuration module for tinychat."""

from tinychat.config.loader import get_config_path, load_config, save_config
from tinychat.config.schema import Config, MemoryType, ModelType

__all__ = ["Config", "MemoryType", "ModelType", "get_config_path", "load_config", "save_config"]
