"""Configuration defaults, loading and validation."""

from .defaults import Settings, get_default_config
from .loader import ConfigLoader

__all__ = ["Settings", "get_default_config", "ConfigLoader"]
