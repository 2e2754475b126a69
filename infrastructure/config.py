"""Application settings

Values come from ``config.json`` (camelCase keys, grouped under ``database``
and ``logging``) and from ``HOTEL_*`` environment variables. Any key that is
missing or malformed falls back to its default.
"""
import json
import logging
import os
from pathlib import Path
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.json"
CONFIG_FILE_ENV = "HOTEL_CONFIG"


class _Section(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator("*", mode="wrap")
    @classmethod
    def fall_back_to_default(cls, value: Any, handler, info):
        try:
            return handler(value)
        except ValidationError:
            default = cls.model_fields[info.field_name].default
            logger.warning(
                "Invalid config value %r for %s, using default %r", value, info.field_name, default
            )
            return default


class DatabaseSettings(_Section):
    """Where the collections, backups and reports live"""
    data_directory: str = "data"
    backup_directory: str = "backups"
    report_directory: str = "reports"
    auto_backup: bool = True
    backup_interval: int = Field(default=60, gt=0)  # minutes


LogLevel = Annotated[
    Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
    BeforeValidator(lambda v: v.strip().upper() if isinstance(v, str) else v),
]


class LoggingSettings(_Section):
    level: LogLevel = "INFO"
    log_to_file: bool = True
    log_file: str = "hotel.log"


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="HOTEL_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def _read_config_file(path: Path) -> dict:
    if not path.exists():
        logger.warning("Configuration file %s not found, using defaults", path)
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error("Failed to load configuration from %s: %s", path, e)
        return {}
    if not isinstance(raw, dict):
        logger.error("Configuration file %s is not a JSON object, using defaults", path)
        return {}
    logger.info("Configuration loaded successfully from %s", path)
    return raw


def load_settings(config_file: Optional[Union[str, Path]] = None) -> Settings:
    """Build Settings from the config file, falling back to defaults"""
    path = Path(config_file or os.environ.get(CONFIG_FILE_ENV, CONFIG_FILE))
    raw = _read_config_file(path)
    sections = {
        name: value for name, value in raw.items()
        if name in ("database", "logging") and isinstance(value, dict)
    }
    return Settings(**sections)
