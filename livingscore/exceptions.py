"""Exception hierarchy for the Living Score engine."""

from __future__ import annotations


class LivingScoreError(Exception):
    """Base class for all Living Score errors."""


class FetchError(LivingScoreError):
    """An upstream backend call (signal definitions or tap events) failed.

    Raised by every ``SignalSource`` implementation.  The service layer
    is the one place that turns this into an empty result.
    """

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        self.detail = detail
        message = f"{operation} failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ConfigError(LivingScoreError):
    """Configuration could not be loaded or is invalid."""
