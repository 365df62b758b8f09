#!/usr/bin/env python3
"""
Frame ingestion gate.

Checks that a frame carries the metadata the accumulator relies on before
any window state is touched. A frame that fails a check is skipped with a
reason; nothing is raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
import logging
import math
import re
from typing import Any, Optional

from ..status import Status, success_status, warning_status
from .frame import Frame


_EXCESS_FRACTION = re.compile(r"(\.\d{6})\d+")


class SkipReason(str, Enum):
    NO_EXPOSURE = "no-exposure"
    NO_COORDINATES = "no-coordinates"
    NO_TIMESTAMP = "no-timestamp"


@dataclass(frozen=True)
class IngestedFrame:
    exposure_time_s: float
    ra_deg: float
    dec_deg: float
    local_time: datetime


def parse_timestamp(text: str) -> Optional[datetime]:
    """ISO-8601 timestamp, including FITS values with 7 fractional digits."""
    text = text.strip()
    if not text:
        return None
    # Python < 3.11 does not accept a trailing 'Z'
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    # fromisoformat before 3.11 takes at most 6 fractional digits
    text = _EXCESS_FRACTION.sub(r"\1", text)
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    from astropy.time import Time

    try:
        return Time(text, format="isot").to_datetime()
    except ValueError:
        return None


def to_local_time(value: Any) -> Optional[datetime]:
    """Parse an observation timestamp and convert it to the local zone.

    Accepts ``datetime`` objects or ISO-8601 strings as written to
    ``DATE-LOC``/``DATE-OBS``. Naive values are taken as local time.
    Returns None when the value cannot be interpreted.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = parse_timestamp(str(value))
        if parsed is None:
            return None
    try:
        return parsed.astimezone()
    except (OverflowError, OSError, ValueError):
        return None


class FrameIngestor:
    """Validates exposure, coordinates and timestamp of incoming frames."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger(__name__)

    def validate(self, frame: Frame) -> Status[IngestedFrame]:
        meta = frame.metadata

        exposure = meta.exposure_time_s
        if exposure is None or not math.isfinite(exposure) or exposure < 0:
            return self._skip(SkipReason.NO_EXPOSURE, f"Exposure time missing or invalid: {exposure}")

        # 0.0 doubles as "unset" for coordinates
        ra, dec = meta.ra_deg, meta.dec_deg
        if (
            ra is None
            or dec is None
            or not (math.isfinite(ra) and math.isfinite(dec))
            or ra == 0.0
            or dec == 0.0
        ):
            return self._skip(SkipReason.NO_COORDINATES, f"Target coordinates missing: ra={ra} dec={dec}")

        local_time = to_local_time(meta.exposure_start)
        if local_time is None:
            return self._skip(SkipReason.NO_TIMESTAMP, f"Observation time not parseable: {meta.exposure_start!r}")

        self.logger.debug(
            f"Frame accepted: exposure={exposure}s ra={ra} dec={dec} local_time={local_time.isoformat()}"
        )
        return success_status(
            "Frame metadata valid",
            data=IngestedFrame(
                exposure_time_s=float(exposure),
                ra_deg=float(ra),
                dec_deg=float(dec),
                local_time=local_time,
            ),
        )

    def _skip(self, reason: SkipReason, message: str) -> Status[IngestedFrame]:
        self.logger.info(f"Skipping frame ({reason.value}): {message}")
        return warning_status(message, details={"skip_reason": reason.value})
