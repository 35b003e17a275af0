"""Structured logging utilities."""

from .audit import JsonlRunLogger, RunEvent, sanitize_metadata, utc_millis, utc_timestamp

__all__ = ["JsonlRunLogger", "RunEvent", "sanitize_metadata", "utc_millis", "utc_timestamp"]
