"""Settings for the confcheck command line, using Pydantic models."""

import logging
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import SettingsError
from .tags import TagScheme

logger = logging.getLogger(__name__)

SETTINGS_FILE_NAME = ".confcheck.json"


class OutputFormat(str, Enum):
    """Report output formats."""
    TABLE = "table"
    JSON = "json"
    MARKDOWN = "markdown"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"

    def to_logging(self) -> str:
        return "WARNING" if self is LogLevel.WARN else self.value.upper()


class SchemeConfig(BaseModel):
    """Naming scheme section: which tag key to read and how to join paths."""
    tag_key: str = Field(alias="tagKey", default="json")
    separator: str = "."

    @field_validator("tag_key", "separator")
    @classmethod
    def validate_not_empty(cls, v):
        if not v:
            raise ValueError("must not be empty")
        return v

    def to_scheme(self) -> TagScheme:
        return TagScheme(self.tag_key, self.separator)

    model_config = ConfigDict(populate_by_name=True)


class OutputConfig(BaseModel):
    """Output configuration section."""
    format: OutputFormat = OutputFormat.TABLE

    model_config = ConfigDict(use_enum_values=True)


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.WARN


class ConfcheckSettings(BaseModel):
    """Complete confcheck settings model."""
    scheme: SchemeConfig = Field(default_factory=SchemeConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")


def load_settings(settings_path: str | Path | None = None) -> ConfcheckSettings:
    """Settings from ``settings_path``, else the nearest settings file, else defaults.

    Raises:
        SettingsError: If an explicitly given file does not exist, or a file
            cannot be read or holds invalid settings.
    """
    if settings_path is not None:
        path = Path(settings_path)
        if not path.is_file():
            raise SettingsError("Settings file not found", str(path))
    else:
        path = find_settings_file()
        if path is None:
            logger.debug(f"No {SETTINGS_FILE_NAME} found, using default settings")
            return ConfcheckSettings()

    try:
        settings = ConfcheckSettings.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise SettingsError("Cannot read settings", str(path), e) from e
    except ValidationError as e:
        raise SettingsError("Invalid settings", str(path), e) from e

    logger.debug(f"Loaded settings from {path}")
    return settings


def find_settings_file(start_dir: Path | None = None) -> Path | None:
    """Nearest settings file in ``start_dir`` (default: cwd) or one of its ancestors."""
    start = Path(start_dir or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        candidate = directory / SETTINGS_FILE_NAME
        if candidate.is_file():
            return candidate
    return None
