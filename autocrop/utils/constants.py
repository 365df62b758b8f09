#!/usr/bin/env python3
"""
Shared constants for the autocrop system.
"""

from __future__ import annotations

from typing import Final, Set


# FITS header keys (a subset, centralized to avoid typos)
class FitsHeaderKeys:
    EXPOSURE: Final[str] = 'EXPOSURE'
    EXPTIME: Final[str] = 'EXPTIME'
    OBJCTRA: Final[str] = 'OBJCTRA'
    OBJCTDEC: Final[str] = 'OBJCTDEC'
    RA: Final[str] = 'RA'
    DEC: Final[str] = 'DEC'
    DATE_LOC: Final[str] = 'DATE-LOC'
    DATE_OBS: Final[str] = 'DATE-OBS'
    IMAGETYP: Final[str] = 'IMAGETYP'
    BAYERPAT: Final[str] = 'BAYERPAT'
    NCOMBINE: Final[str] = 'NCOMBINE'
    TOTEXP: Final[str] = 'TOTEXP'
    CROPFRAC: Final[str] = 'CROPFRAC'
    WINSTART: Final[str] = 'WINSTART'


# Keys astropy manages itself; never copied from a source header
STRUCTURAL_KEYS: Set[str] = {
    'SIMPLE', 'BITPIX', 'NAXIS', 'NAXIS1', 'NAXIS2', 'NAXIS3', 'EXTEND',
    'BZERO', 'BSCALE', 'END',
}

# Sample range of the only supported pixel type (uint16)
SAMPLE_MIN: Final[int] = 0
SAMPLE_MAX: Final[int] = 65535
DEFAULT_BIT_DEPTH: Final[int] = 16

# Setting limits
CROP_FRACTION_MIN: Final[float] = 0.0
CROP_FRACTION_MAX: Final[float] = 1.0
AGGREGATION_WINDOW_MIN_S: Final[float] = 0.0
AGGREGATION_WINDOW_MAX_S: Final[float] = 120.0

# Defaults
DEFAULT_CROP_FRACTION: Final[float] = 0.1
DEFAULT_AGGREGATION_WINDOW_S: Final[float] = 10.0
DEFAULT_CROP_SUBDIR: Final[str] = 'crop'
DEFAULT_OUTPUT_DIR: Final[str] = 'autocrop_frames'

# Default file formats
FITS_EXTENSIONS: Final[set[str]] = {'.fit', '.fits'}
