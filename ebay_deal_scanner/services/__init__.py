"""
Service layer for the eBay Deal Scanner.

This module contains services shared by the entry point and the
orchestrator, such as configuration loading.
"""

from .config_manager import ConfigurationManager

__all__ = [
    "ConfigurationManager",
]
