"""
Operations package for the Block Dominance Map

This package centralizes the operational tools:
- Configuration management
- The command-line map pipeline

The Config class is exposed at the package level for convenient imports:
    from ops import Config
"""

from .config_loader import Config

__all__ = ["Config"]
