"""Shared error classes for the trending engine and repositories."""

from __future__ import annotations


class TrendingError(RuntimeError):
    """Base exception raised by the trending engine."""

    def __init__(self, message: str, code: str = "TRENDING_ERROR") -> None:
        super().__init__(message)
        self.code = code


class TrendingValidationError(TrendingError):
    """Raised when a request cannot be served with the supplied parameters."""


class TrendingNotFoundError(TrendingError):
    """Raised when a requested company is not tracked."""


class TrendingDataUnavailableError(TrendingError):
    """Raised when there are no companies to score."""


class TrendingDataError(TrendingError):
    """Raised when company data cannot be loaded or parsed."""
