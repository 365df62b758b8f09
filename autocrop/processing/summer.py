#!/usr/bin/env python3
"""
Overflow-safe pairwise summation of 16-bit frames.
"""

from __future__ import annotations

import numpy as np

from ..capture.frame import Frame
from ..status import Status, error_status, success_status
from ..utils.constants import SAMPLE_MAX, SAMPLE_MIN


def sum_pixel_buffers(base: np.ndarray, incoming: np.ndarray) -> np.ndarray:
    """Add two equally shaped uint16 buffers and remove the common pedestal.

    Samples are added in uint64, the minimum of the sum is subtracted from
    every sample, and the result is clipped back into the uint16 range.
    """
    wide = base.astype(np.uint64) + incoming.astype(np.uint64)
    if wide.size == 0:
        return wide.astype(np.uint16)
    # wide >= min everywhere, so the subtraction cannot wrap
    adjusted = wide - wide.min()
    return np.clip(adjusted, SAMPLE_MIN, SAMPLE_MAX).astype(np.uint16)


def sum_frames(base: Frame, incoming: Frame) -> Status[Frame]:
    if base.width != incoming.width or base.height != incoming.height:
        return error_status(
            "Frames must have the same dimensions to sum",
            details={
                "error_kind": "dimension_mismatch",
                "base_size": (base.width, base.height),
                "incoming_size": (incoming.width, incoming.height),
            },
        )
    return success_status("Frames summed", data=base.derive(sum_pixel_buffers(base.data, incoming.data)))
