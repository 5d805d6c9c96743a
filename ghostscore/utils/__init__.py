"""Shared utilities."""

from .timestamps import ensure_utc, format_timestamp, parse_timestamp, utc_now

__all__ = ["ensure_utc", "format_timestamp", "parse_timestamp", "utc_now"]
