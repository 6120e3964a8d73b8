#!/usr/bin/env python3
"""
Exception types shared across lara-sync.

Parsers raise ParseError for input they refuse to degrade on (PO syntax,
unparseable TS objects). Translation providers raise ProviderError; the
engine escalates fatal ones (401, 5xx) to FatalProviderError, which stops
the whole run.
"""

from typing import Optional


class LaraSyncError(Exception):
    """Base class for every error raised by lara-sync."""


class ConfigError(LaraSyncError):
    """Configuration file is missing or invalid."""


class ParseError(LaraSyncError, ValueError):
    """A file could not be parsed into a flat map."""


class ProviderError(LaraSyncError):
    """
    Translation provider failure.

    Attributes:
        status_code: HTTP-like status code reported by the provider (if any)
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_fatal(self) -> bool:
        """Authentication and service failures abort the whole run."""
        if self.status_code is None:
            return False
        return self.status_code == 401 or self.status_code >= 500


class FatalProviderError(LaraSyncError):
    """Provider failure that must stop the run immediately."""

    def __init__(self, message: str, cause: ProviderError):
        super().__init__(message)
        self.cause = cause

    @property
    def hint(self) -> str:
        if self.cause.status_code == 401:
            return (
                "Authentication failed: the provider credentials are invalid or expired. "
                "Re-run your credential setup and try again."
            )
        return f"Translation service unavailable ({self.cause.status_code}). Try again later."
