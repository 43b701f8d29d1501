"""Observability for elector: structured logging with election context."""

from elector.observability.logging import (
    ConsoleFormatter,
    JsonFormatter,
    LogContext,
    candidate_id_var,
    configure_logging,
    group_key_var,
)

__all__ = [
    "configure_logging",
    "LogContext",
    "JsonFormatter",
    "ConsoleFormatter",
    "candidate_id_var",
    "group_key_var",
]
