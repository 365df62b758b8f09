#!/usr/bin/env python3
"""
Autocrop
========

Cropped live-stacking of astronomical frames: every incoming capture is
cropped to a central region and summed into a running window that is
written out as one FITS file once the aggregation time is exceeded.

Modules:
--------
- config_manager: Configuration management
- capture.frame: Frame and metadata model
- capture.ingestor: Per-frame metadata validation
- processing.cropper: Centered region extraction
- processing.summer: Overflow-safe pairwise summation
- processing.accumulator: Accumulation window state machine
- services.flush_scheduler: Hand-off of finished windows to a sink
- services.frame_writer: Atomic FITS persistence
- services.frame_source: FITS directory feeder
- exceptions: Custom exception hierarchy
- status: Status object system
"""

__version__ = "1.0.0"
__author__ = "Autocrop Team"

from .exceptions import AutocropError
from .status import AccumulationStatus, FrameOutcome, Status


def get_default_config():
    """Get the default configuration instance."""
    from .config_manager import ConfigManager
    return ConfigManager()


# Lazy config instance - only created when accessed
_default_config = None


def get_config():
    """Get the default configuration instance (lazy loading)."""
    global _default_config
    if _default_config is None:
        _default_config = get_default_config()
    return _default_config
