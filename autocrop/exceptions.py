#!/usr/bin/env python3
"""
Exception hierarchy for the autocrop system.

Expected per-frame outcomes (skips, resets, failed windows) are reported
through Status objects; these exceptions cover configuration and input
faults that callers cannot treat as ordinary control flow.
"""

from typing import Optional, Any, Dict


class AutocropError(Exception):
    """Base exception for all autocrop errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class ConfigurationError(AutocropError):
    """Raised when configuration is invalid or missing."""
    pass


class FrameFormatError(AutocropError):
    """Raised when a frame is built from unsupported pixel data."""
    pass


class FileError(AutocropError):
    """Raised when file operations fail."""
    pass
