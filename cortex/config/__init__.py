"""Configuration loading for Cortex.

Settings come from config/default.toml, an optional config/{CORTEX_ENV}.toml
and CORTEX_* environment variables:

    from cortex.config import get_settings

    settings = get_settings()
    threshold = settings.memory.link_threshold
"""

from functools import lru_cache

from cortex.config.loader import config_files
from cortex.config.settings import Settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process.

    Unlike a bare ``Settings()``, this requires config/default.toml to
    exist. Use reload_settings() after changing files or environment.
    """
    config_files()
    return Settings()


def reload_settings() -> Settings:
    """Clear the settings cache and reload configuration."""
    get_settings.cache_clear()
    return get_settings()


__all__ = ["get_settings", "reload_settings", "Settings"]
