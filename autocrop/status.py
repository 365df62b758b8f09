#!/usr/bin/env python3
"""
Status objects for the autocrop system.
Provides structured return values for operations.
"""

from typing import Optional, Any, Dict, Generic, TypeVar
from dataclasses import dataclass
from enum import Enum
import time


class StatusLevel(Enum):
    """Status levels for operations."""
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class FrameOutcome(Enum):
    """What the accumulator did with a single incoming frame."""
    SKIPPED = "skipped"          # metadata incomplete, window untouched
    DISABLED = "disabled"        # crop fraction <= 0
    STARTED = "started"          # frame seeded a new window
    ACCUMULATED = "accumulated"  # frame merged into the open window
    RESET = "reset"              # slew or parameter change, window discarded
    FLUSHED = "flushed"          # window written out and cleared
    FAILED = "failed"            # crop/sum/persistence error


T = TypeVar('T')


@dataclass
class Status(Generic[T]):
    """Generic status object for operation results."""

    level: StatusLevel
    message: str
    data: Optional[T] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: Optional[float] = None

    def __post_init__(self) -> None:
        if self.timestamp is None:
            self.timestamp = time.time()

    @property
    def is_success(self) -> bool:
        """Check if status indicates success."""
        return self.level == StatusLevel.SUCCESS

    @property
    def is_error(self) -> bool:
        """Check if status indicates an error."""
        return self.level in (StatusLevel.ERROR, StatusLevel.CRITICAL)

    @property
    def is_warning(self) -> bool:
        """Check if status indicates a warning."""
        return self.level == StatusLevel.WARNING

    @property
    def error_kind(self) -> Optional[str]:
        """Machine-readable error category, if one was recorded."""
        if self.details:
            return self.details.get('error_kind')
        return None

    def __str__(self) -> str:
        return f"{self.level.value.upper()}: {self.message}"


@dataclass
class AccumulationStatus(Status[Any]):
    """Status object for one pass of a frame through the accumulator."""

    outcome: Optional[FrameOutcome] = None
    skip_reason: Optional[str] = None
    frame_count: int = 0
    elapsed_s: Optional[float] = None
    output_path: Optional[str] = None

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.details:
            if self.skip_reason is None:
                self.skip_reason = self.details.get('skip_reason')
            if self.output_path is None:
                self.output_path = self.details.get('output_path')


# Factory functions for creating status objects
def success_status(message: str, data: Optional[T] = None, details: Optional[Dict[str, Any]] = None) -> Status[T]:
    """Create a success status."""
    return Status(StatusLevel.SUCCESS, message, data, details)


def warning_status(message: str, data: Optional[T] = None, details: Optional[Dict[str, Any]] = None) -> Status[T]:
    """Create a warning status."""
    return Status(StatusLevel.WARNING, message, data, details)


def error_status(message: str, data: Optional[T] = None, details: Optional[Dict[str, Any]] = None) -> Status[T]:
    """Create an error status."""
    return Status(StatusLevel.ERROR, message, data, details)

