"""Root settings model for Cortex configuration."""

from typing import Literal

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from cortex.config.loader import config_files
from cortex.config.models.graph import GraphConfig
from cortex.config.models.memory import MemoryConfig
from cortex.config.models.observability import ObservabilityConfig

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Memory, graph and observability settings for one process.

    Sources, highest priority first: constructor arguments, CORTEX_*
    environment variables (nested with ``__``), the environment TOML file,
    default.toml, then model defaults. Sections are merged key by key, so
    an environment file only needs the values it changes.
    """

    model_config = SettingsConfigDict(
        env_prefix="CORTEX_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="cortex", description="Application name for logging")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: LogLevel = Field(default="INFO", description="Logging level")

    memory: MemoryConfig = Field(
        default_factory=MemoryConfig,
        description="Memory store tuning",
    )
    graph: GraphConfig = Field(
        default_factory=GraphConfig,
        description="Knowledge graph tuning",
    )
    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig,
        description="Observability configuration",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # One source per file: pydantic-settings deep-merges across sources
        toml_sources = [
            TomlConfigSettingsSource(settings_cls, toml_file=path)
            for path in reversed(config_files(required=False))
        ]
        return (init_settings, env_settings, *toml_sources)
