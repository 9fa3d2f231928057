"""Configuration model and loader."""

from .loader import load_config
from .schema import ServerConfig

__all__ = ["ServerConfig", "load_config"]
