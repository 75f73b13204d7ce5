"""
Outbound batch collectors.

Each collector adheres to the `ItemCollector` interface and recognises one
host update-check endpoint.
"""

from .base import ItemCollector, decode_field
from .plugin_collector import PluginCollector
from .theme_collector import ThemeCollector, ThemeRegistry

__all__ = [
    "ItemCollector",
    "PluginCollector",
    "ThemeCollector",
    "ThemeRegistry",
    "decode_field",
]
