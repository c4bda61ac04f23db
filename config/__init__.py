"""Configuration package for the English check proxy and client."""
from .presets import Presets, load_presets
from .settings import DEFAULT_WEBHOOK_URL, Settings, settings

__all__ = [
    "DEFAULT_WEBHOOK_URL",
    "Presets",
    "Settings",
    "load_presets",
    "settings",
]
