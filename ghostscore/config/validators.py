"""Additional validation utilities for configuration."""

import warnings
from typing import List

from .models import AppConfig


def check_for_warnings(app_config: AppConfig) -> List[str]:
    """
    Check a validated configuration for settings worth a second look.

    Args:
        app_config: Fully merged configuration (file + environment)

    Returns:
        List of warning messages
    """
    warning_messages = []

    if not app_config.sync.dry_run:
        warning_messages.append(
            f"Live mode: rows in target table '{app_config.tables.target}' will be created and updated"
        )

    if not app_config.sync.dry_run and app_config.sync.write_delay_ms == 0:
        warning_messages.append(
            "write_delay_ms is 0; consecutive writes may trigger NocoDB rate limits"
        )

    if app_config.sync.page_size > 500:
        warning_messages.append(
            f"Large page_size ({app_config.sync.page_size}) may exceed the server's page limit"
        )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit warning messages using Python's warnings module."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
