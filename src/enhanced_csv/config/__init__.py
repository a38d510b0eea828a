"""
Configuration management with typed Pydantic models.

Provides the reader options model and YAML-based config loading.
"""

from enhanced_csv.config.loader import load_config
from enhanced_csv.config.settings import ReaderConfig

__all__ = [
    "ReaderConfig",
    "load_config",
]
