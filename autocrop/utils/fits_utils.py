"""Utilities to convert between FITS files/headers and Frame objects."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
import math
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np

from ..capture.frame import Frame, FrameMetadata
from ..capture.ingestor import parse_timestamp
from ..exceptions import FileError
from .constants import DEFAULT_BIT_DEPTH, SAMPLE_MAX, SAMPLE_MIN, STRUCTURAL_KEYS, FitsHeaderKeys


def _safe_float(value: Any) -> float | None:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(result) else result


def parse_ra_degrees(value: Any) -> Optional[float]:
    """RA from an ``"H M S"``/``"H:M:S"`` string, or plain degrees."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return _safe_float(value)
    from astropy.coordinates import Angle
    from astropy.units import UnitsError

    text = str(value).strip()
    if not text:
        return None
    try:
        return float(Angle(text.replace(":", " "), unit="hourangle").degree)
    except (ValueError, TypeError, UnitsError):
        return None


def parse_dec_degrees(value: Any) -> Optional[float]:
    """Dec from a ``"±D M S"``/``"±D:M:S"`` string, or plain degrees."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return _safe_float(value)
    from astropy.coordinates import Angle
    from astropy.units import UnitsError

    text = str(value).strip()
    if not text:
        return None
    try:
        return float(Angle(text.replace(":", " "), unit="deg").degree)
    except (ValueError, TypeError, UnitsError):
        return None


def format_ra_sexagesimal(ra_deg: float) -> str:
    from astropy.coordinates import Angle

    return Angle(ra_deg % 360.0, unit="deg").to_string(unit="hourangle", sep=" ", precision=2, pad=True)


def format_dec_sexagesimal(dec_deg: float) -> str:
    from astropy.coordinates import Angle

    return Angle(dec_deg, unit="deg").to_string(unit="deg", sep=" ", precision=1, pad=True, alwayssign=True)


def _to_uint16(data: np.ndarray) -> np.ndarray:
    if data.dtype == np.uint16:
        return data
    if np.issubdtype(data.dtype, np.floating):
        data = np.nan_to_num(data, nan=0.0)
        data = np.rint(data)
    return np.clip(data, SAMPLE_MIN, SAMPLE_MAX).astype(np.uint16)


def _utc_timestamp(value: Any) -> Any:
    """DATE-OBS is UTC by convention; make naive values explicitly UTC."""
    if not isinstance(value, str):
        return value
    parsed = parse_timestamp(value)
    if parsed is None:
        return value
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def metadata_from_header(header, source_path: Optional[str] = None) -> FrameMetadata:
    """Build FrameMetadata from a FITS header.

    Missing or unparseable values come back as None so that ingestion can
    skip the frame with a reason instead of failing here.
    """
    exposure = None
    for key in (FitsHeaderKeys.EXPOSURE, FitsHeaderKeys.EXPTIME):
        if key in header:
            exposure = _safe_float(header.get(key))
            if exposure is not None:
                break

    ra = parse_ra_degrees(header.get(FitsHeaderKeys.OBJCTRA))
    if ra is None:
        ra = _safe_float(header.get(FitsHeaderKeys.RA))
    dec = parse_dec_degrees(header.get(FitsHeaderKeys.OBJCTDEC))
    if dec is None:
        dec = _safe_float(header.get(FitsHeaderKeys.DEC))

    exposure_start = header.get(FitsHeaderKeys.DATE_LOC)
    if exposure_start is None:
        exposure_start = _utc_timestamp(header.get(FitsHeaderKeys.DATE_OBS))

    headers: Dict[str, Any] = {}
    for card in header.cards:
        key = card.keyword
        if not key or key in STRUCTURAL_KEYS or key in ("COMMENT", "HISTORY"):
            continue
        headers[key] = card.value

    image_type = header.get(FitsHeaderKeys.IMAGETYP)
    return FrameMetadata(
        exposure_start=exposure_start,
        exposure_time_s=exposure,
        ra_deg=ra,
        dec_deg=dec,
        image_type=str(image_type) if image_type is not None else None,
        headers=headers,
        source_path=source_path,
    )


def read_frame(path: Path | str, bit_depth: int = DEFAULT_BIT_DEPTH) -> Frame:
    """Read the primary HDU of a FITS file into a Frame."""
    import astropy.io.fits as fits

    path = Path(path)
    try:
        with fits.open(path, memmap=False) as hdul:
            header = hdul[0].header
            data = hdul[0].data
            if data is None:
                raise FileError(f"No image data in {path}")
            data = np.asarray(data)
            metadata = metadata_from_header(header, source_path=str(path))
            is_bayered = bool(header.get(FitsHeaderKeys.BAYERPAT))
    except (OSError, ValueError, TypeError, fits.VerifyError) as e:
        raise FileError(f"Failed to read FITS file {path}: {e}") from e

    if data.ndim != 2:
        raise FileError(f"Unsupported FITS image dimensions in {path}", {"shape": data.shape})
    return Frame(
        data=_to_uint16(data),
        metadata=metadata,
        bit_depth=bit_depth,
        is_bayered=is_bayered,
    )


def build_header(frame: Frame, logger: Optional[logging.Logger] = None):
    """FITS header for ``frame``: source headers plus the core metadata."""
    import astropy.io.fits as fits

    header = fits.Header()
    meta = frame.metadata
    for key, value in meta.headers.items():
        if key in STRUCTURAL_KEYS:
            continue
        try:
            header[key] = value
        except (ValueError, TypeError) as e:
            if logger:
                logger.debug(f"Dropping header {key}={value!r}: {e}")

    if meta.exposure_time_s is not None:
        header[FitsHeaderKeys.EXPTIME] = float(meta.exposure_time_s)
    if meta.ra_deg is not None and meta.dec_deg is not None:
        header[FitsHeaderKeys.RA] = float(meta.ra_deg)
        header[FitsHeaderKeys.DEC] = float(meta.dec_deg)
        header[FitsHeaderKeys.OBJCTRA] = format_ra_sexagesimal(float(meta.ra_deg))
        header[FitsHeaderKeys.OBJCTDEC] = format_dec_sexagesimal(float(meta.dec_deg))
    if meta.exposure_start is not None:
        start = meta.exposure_start
        if isinstance(start, datetime):
            if start.tzinfo is not None:
                start = start.astimezone().replace(tzinfo=None)
            start = start.isoformat()
        header[FitsHeaderKeys.DATE_LOC] = start
    if meta.image_type:
        header[FitsHeaderKeys.IMAGETYP] = meta.image_type
    if not frame.is_bayered and FitsHeaderKeys.BAYERPAT in header:
        del header[FitsHeaderKeys.BAYERPAT]
    return header
