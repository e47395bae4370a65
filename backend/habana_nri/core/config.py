from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_LOG_LEVEL_ALIASES = {"WARN": "WARNING", "FATAL": "CRITICAL"}


class RuntimeMode(str, Enum):
    LEGACY = "legacy"
    MODERN = "modern"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="HABANA_NRI_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = Field(default="Habana NRI Device Injector")
    api_prefix: str = Field(default="/nri")
    plugin_name: str = Field(default="habana", description="Plugin name reported to the container runtime")
    plugin_idx: str = Field(default="10", description="Plugin index reported to the container runtime")
    runtime_mode: RuntimeMode = Field(
        default=RuntimeMode.MODERN,
        description="legacy delegates device handling to a prestart hook; modern injects devices directly",
    )
    always_mount: bool = Field(
        default=False,
        description="Inject into every container, not only those declaring HABANA_VISIBLE_DEVICES",
    )
    mount_accelerators: bool = Field(default=True)
    mount_uverbs: bool = Field(default=True)
    binaries_dir: str = Field(default="/usr/local/bin", description="Directory searched for habana-container-hook")
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        level = _LOG_LEVEL_ALIASES.get(level, level)
        if level not in _LOG_LEVELS:
            raise ValueError(f"unknown log level {value!r}")
        return level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
