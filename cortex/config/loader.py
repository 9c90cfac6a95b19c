"""Locate the TOML files that feed Settings.

Cortex reads ``default.toml`` and then ``{CORTEX_ENV}.toml`` from one
directory. Parsing and merging are left to pydantic-settings; this module
only decides which files take part.
"""

import os
from pathlib import Path

CONFIG_DIR_ENV = "CORTEX_CONFIG_DIR"
ENVIRONMENT_ENV = "CORTEX_ENV"
DEFAULT_ENVIRONMENT = "development"
SEARCH_DEPTH = 5


def get_config_dir() -> Path:
    """Directory holding the TOML files.

    CORTEX_CONFIG_DIR wins when set and must exist. Otherwise the nearest
    ``config/`` directory at or above the working directory is used,
    falling back to a relative ``config/``.
    """
    explicit = os.environ.get(CONFIG_DIR_ENV)
    if explicit:
        path = Path(explicit)
        if not path.is_dir():
            raise FileNotFoundError(f"Config directory not found: {explicit}")
        return path

    here = Path.cwd()
    for candidate in [here, *here.parents][:SEARCH_DEPTH]:
        if (candidate / "config").is_dir():
            return candidate / "config"
    return Path("config")


def get_environment() -> str:
    """Name of the active environment (CORTEX_ENV, default "development")."""
    return os.environ.get(ENVIRONMENT_ENV, DEFAULT_ENVIRONMENT)


def config_files(*, required: bool = True) -> list[Path]:
    """TOML files to load, lowest priority first.

    ``default.toml`` comes first, followed by the environment file when one
    exists.

    Raises:
        FileNotFoundError: If ``required`` and default.toml is missing
    """
    config_dir = get_config_dir()
    default = config_dir / "default.toml"
    if not default.is_file():
        if required:
            raise FileNotFoundError(
                f"Default configuration file not found: {default}. "
                f"Create config/default.toml or set {CONFIG_DIR_ENV}."
            )
        return []

    files = [default]
    overlay = config_dir / f"{get_environment()}.toml"
    if overlay.is_file():
        files.append(overlay)
    return files
