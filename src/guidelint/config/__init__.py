"""Configuration management."""

from guidelint.config.loader import load_config
from guidelint.config.settings import Settings

__all__ = ["Settings", "load_config"]
