#!/usr/bin/env python3
"""
Centered region extraction.

The crop fraction scales both axes of the source frame; the resulting
region is centered, with offsets rounded down.
"""

from __future__ import annotations

from dataclasses import dataclass
import math

from ..capture.frame import Frame
from ..status import Status, error_status, success_status


@dataclass(frozen=True)
class CropRegion:
    left: int
    top: int
    width: int
    height: int

    def fits_within(self, width: int, height: int) -> bool:
        return (
            self.left >= 0
            and self.top >= 0
            and self.width > 0
            and self.height > 0
            and self.left + self.width <= width
            and self.top + self.height <= height
        )


def compute_crop_region(width: int, height: int, fraction: float) -> CropRegion:
    return CropRegion(
        left=math.floor((width - width * fraction) / 2),
        top=math.floor((height - height * fraction) / 2),
        width=math.floor(width * fraction),
        height=math.floor(height * fraction),
    )


def crop_frame(frame: Frame, fraction: float) -> Status[Frame]:
    """Return the centered ``fraction`` of ``frame`` as a new frame.

    Fails with ``error_kind == "invalid_crop_region"`` when the computed
    region is empty or falls outside the source.
    """
    region = compute_crop_region(frame.width, frame.height, fraction)
    if not region.fits_within(frame.width, frame.height):
        return error_status(
            f"Invalid crop region for {frame.width}x{frame.height} at fraction {fraction}",
            details={
                "error_kind": "invalid_crop_region",
                "region": region,
                "source_size": (frame.width, frame.height),
            },
        )

    rows = slice(region.top, region.top + region.height)
    cols = slice(region.left, region.left + region.width)
    cropped = frame.derive(frame.data[rows, cols].copy())
    return success_status("Frame cropped", data=cropped, details={"region": region})
