"""Observability - structured event logging and metrics."""

from .telemetry import LOG_LEVELS, Telemetry, configure_logging

__all__ = [
    "LOG_LEVELS",
    "Telemetry",
    "configure_logging",
]
