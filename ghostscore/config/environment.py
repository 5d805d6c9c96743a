"""Environment variable loading and validation."""

import os
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from .exceptions import ConfigurationError

TRUE_VALUES = {"true", "1", "yes", "on"}
FALSE_VALUES = {"false", "0", "no", "off"}


class EnvironmentConfig:
    """Environment variable configuration holder.

    Besides the NocoDB credentials, the environment may override any of the
    run settings from the YAML file; overrides left as ``None`` are not applied.
    """

    def __init__(
        self,
        nocodb_url: str,
        nocodb_api_key: str,
        log_level: Optional[str] = None,
        source_table: Optional[str] = None,
        target_table: Optional[str] = None,
        page_size: Optional[int] = None,
        dry_run: Optional[bool] = None,
        rate_limit_ms: Optional[int] = None,
    ):
        self.nocodb_url = nocodb_url.rstrip("/")
        self.nocodb_api_key = nocodb_api_key
        self.log_level = log_level
        self.source_table = source_table
        self.target_table = target_table
        self.page_size = page_size
        self.dry_run = dry_run
        self.rate_limit_ms = rate_limit_ms

    def overrides(self) -> Dict[str, Dict[str, Any]]:
        """Return the set overrides shaped like the YAML config sections."""
        tables = {"source": self.source_table, "target": self.target_table}
        sync = {
            "page_size": self.page_size,
            "dry_run": self.dry_run,
            "write_delay_ms": self.rate_limit_ms,
        }
        result = {}
        for section, values in (("tables", tables), ("sync", sync)):
            present = {k: v for k, v in values.items() if v is not None}
            if present:
                result[section] = present
        return result


def parse_bool(value: str) -> bool:
    """Parse a boolean environment value.

    Raises:
        ValueError: If the value is not a recognised boolean spelling
    """
    normalized = value.strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise ValueError(f"not a boolean: '{value}'")


def load_environment_config() -> EnvironmentConfig:
    """
    Load and validate environment variables.

    Required environment variables:
    - NOCODB_URL: Base URL of the NocoDB instance
    - NOCODB_API_KEY: API token sent as the ``xc-token`` header

    Optional environment variables:
    - SOURCE_TABLE / TARGET_TABLE: Table identifiers
    - PAGE_SIZE: Rows per page when listing tables
    - DRY_RUN: true/false, whether to skip writes
    - RATE_LIMIT_MS: Pause after each write in milliseconds
    - LOG_LEVEL: Override log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        EnvironmentConfig object with validated values

    Raises:
        ConfigurationError: If required variables are missing or invalid
    """
    errors = []

    nocodb_url = os.getenv("NOCODB_URL", "").strip()
    nocodb_api_key = os.getenv("NOCODB_API_KEY", "").strip()

    if not nocodb_url:
        errors.append("Missing required environment variable: NOCODB_URL")
    else:
        parsed = urlparse(nocodb_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            errors.append(
                f"Invalid NOCODB_URL: '{nocodb_url}'. Must be an http(s) URL."
            )

    if not nocodb_api_key:
        errors.append("Missing required environment variable: NOCODB_API_KEY")

    log_level = os.getenv("LOG_LEVEL") or None
    if log_level:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if log_level.upper() not in valid_levels:
            errors.append(
                f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(valid_levels)}"
            )
        else:
            log_level = log_level.upper()

    page_size = _read_int("PAGE_SIZE", errors, minimum=1)
    rate_limit_ms = _read_int("RATE_LIMIT_MS", errors, minimum=0)

    dry_run = None
    dry_run_str = os.getenv("DRY_RUN")
    if dry_run_str:
        try:
            dry_run = parse_bool(dry_run_str)
        except ValueError:
            errors.append(
                f"Invalid DRY_RUN: '{dry_run_str}'. Use true or false."
            )

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Copy .env.example to .env and fill in your NocoDB credentials",
                "Ensure NOCODB_URL and NOCODB_API_KEY are set",
                "Numeric settings (PAGE_SIZE, RATE_LIMIT_MS) must be whole numbers",
            ],
        )

    return EnvironmentConfig(
        nocodb_url=nocodb_url,
        nocodb_api_key=nocodb_api_key,
        log_level=log_level,
        source_table=os.getenv("SOURCE_TABLE") or None,
        target_table=os.getenv("TARGET_TABLE") or None,
        page_size=page_size,
        dry_run=dry_run,
        rate_limit_ms=rate_limit_ms,
    )


def _read_int(name: str, errors: list, minimum: int = 0) -> Optional[int]:
    raw = os.getenv(name)
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError:
        errors.append(f"Invalid {name}: '{raw}'. Must be a valid integer.")
        return None
    if value < minimum:
        errors.append(f"Invalid {name}: {value}. Must be at least {minimum}.")
        return None
    return value
