"""Configuration schema models using Pydantic."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class TablesConfig(BaseModel):
    """Source and target table identifiers."""

    source: str = Field("GL701", min_length=1, description="Table holding survey reports")
    target: str = Field("GL101", min_length=1, description="Table receiving employer scores")

    @field_validator("source", "target")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        """Strip whitespace from table identifiers."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("Table identifier cannot be empty or whitespace-only")
        return stripped


class SyncConfig(BaseModel):
    """Run behaviour for a sync."""

    dry_run: bool = Field(True, description="Log payloads instead of writing them")
    page_size: int = Field(200, ge=1, le=1000, description="Rows requested per page")
    write_delay_ms: int = Field(
        150, ge=0, le=60000, description="Pause after each write to the target table"
    )
    page_delay_ms: int = Field(
        50, ge=0, le=60000, description="Pause between paginated reads"
    )

    @property
    def write_delay_seconds(self) -> float:
        return self.write_delay_ms / 1000.0

    @property
    def page_delay_seconds(self) -> float:
        return self.page_delay_ms / 1000.0


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True, "validate_default": True}


class AdvancedConfig(BaseModel):
    """HTTP client settings for the NocoDB API."""

    http_request_timeout: int = Field(
        120, ge=5, le=300, description="Request timeout for NocoDB API calls (seconds)"
    )
    user_agent: str = Field(
        "GhostScoreSync/1.0",
        min_length=1,
        description="User-Agent string for HTTP requests",
    )

    @field_validator("user_agent")
    @classmethod
    def strip_user_agent(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("user_agent cannot be empty")
        return stripped


class AppConfig(BaseModel):
    """Root configuration object for the GhostScore sync."""

    tables: TablesConfig = Field(default_factory=TablesConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    advanced: AdvancedConfig = Field(default_factory=AdvancedConfig)

    @model_validator(mode="after")
    def validate_tables_differ(self):
        """Refuse to write scores back into the report table."""
        if self.tables.source == self.tables.target:
            raise ValueError(
                f"Source and target tables must differ, both are '{self.tables.source}'"
            )
        return self
