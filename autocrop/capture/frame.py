#!/usr/bin/env python3
"""
Dataclasses representing a captured frame with metadata.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Union

import numpy as np

from ..exceptions import FrameFormatError
from ..utils.constants import DEFAULT_BIT_DEPTH


@dataclass(frozen=True)
class FrameMetadata:
    # Either a parsed datetime or the raw header string (e.g. DATE-LOC)
    exposure_start: Optional[Union[datetime, str]] = None
    exposure_time_s: Optional[float] = None
    ra_deg: Optional[float] = None
    dec_deg: Optional[float] = None
    image_type: Optional[str] = None
    headers: Dict[str, Any] = field(default_factory=dict)
    source_path: Optional[str] = None


@dataclass(frozen=True)
class Frame:
    """A single 16-bit mono/mosaic frame.

    ``data`` is a 2-D ``uint16`` array of shape ``(height, width)`` in
    row-major order. The core never mutates it; derived frames get new
    arrays.
    """

    data: np.ndarray
    metadata: FrameMetadata = field(default_factory=FrameMetadata)
    bit_depth: int = DEFAULT_BIT_DEPTH
    is_bayered: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.data, np.ndarray):
            raise FrameFormatError(f"Frame data must be a numpy array, got {type(self.data).__name__}")
        if self.data.ndim != 2:
            raise FrameFormatError("Frame data must be 2-D", {"shape": self.data.shape})
        if self.data.dtype != np.uint16:
            raise FrameFormatError("Frame data must be uint16", {"dtype": str(self.data.dtype)})

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def pixels(self) -> np.ndarray:
        """Flat row-major view of the samples."""
        return self.data.ravel()

    def derive(self, data: np.ndarray, metadata: Optional[FrameMetadata] = None) -> "Frame":
        """New frame with replaced pixels, keeping bit depth, Bayer flag and metadata."""
        return Frame(
            data=data,
            metadata=metadata if metadata is not None else self.metadata,
            bit_depth=self.bit_depth,
            is_bayered=self.is_bayered,
        )
