"""Configuration loading, validation, and defaults."""

from livingscore.config.loader import load_config
from livingscore.config.schema import LivingScoreConfig

__all__ = ["load_config", "LivingScoreConfig"]
