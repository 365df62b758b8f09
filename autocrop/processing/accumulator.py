#!/usr/bin/env python3
"""
Accumulation window state machine.

Each incoming frame is validated, cropped to the configured central region
and summed into the open window. The window is anchored on the first frame
it admits; a change of target (slew) or crop fraction discards it. Once the
time covered by the window exceeds the aggregation time, the sum is handed
to the FlushScheduler and the window starts over.

States:
- Empty: no anchor, no buffer
- Accumulating: anchor set, buffer holds the running sum

Frames are processed one at a time under a lock so that
merge, elapsed-time check and reset form a single step.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
import threading
from typing import Any, Dict, Optional

from ..capture.frame import Frame
from ..capture.ingestor import FrameIngestor, IngestedFrame
from ..services.flush_scheduler import FlushScheduler
from ..status import AccumulationStatus, FrameOutcome, Status, StatusLevel
from .cropper import crop_frame
from .settings import AccumulationSettings
from .summer import sum_frames


@dataclass(frozen=True)
class WindowAnchor:
    timestamp: datetime
    ra_deg: float
    dec_deg: float
    crop_fraction: float

    def matches(self, ra_deg: float, dec_deg: float, crop_fraction: float) -> bool:
        # Exact comparison: any pointing or parameter change opens a new window
        return (
            self.ra_deg == ra_deg
            and self.dec_deg == dec_deg
            and self.crop_fraction == crop_fraction
        )


@dataclass
class AccumulationWindow:
    anchor: Optional[WindowAnchor] = None
    buffer: Optional[Frame] = None
    frame_count: int = 0
    total_exposure_s: float = 0.0
    last_source_path: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.anchor is None or self.buffer is None

    def clear(self) -> None:
        self.anchor = None
        self.buffer = None
        self.frame_count = 0
        self.total_exposure_s = 0.0
        self.last_source_path = None


class WindowAccumulator:
    """Crops and sums frames into a time-bounded window.

    ``on_frame`` is the single entry point; register it with whatever
    delivers frames. It always returns an AccumulationStatus describing what
    happened, errors included.
    """

    def __init__(
        self,
        settings: AccumulationSettings,
        flush_scheduler: FlushScheduler,
        ingestor: Optional[FrameIngestor] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.settings = settings
        self.flush_scheduler = flush_scheduler
        self.logger = logger or logging.getLogger(__name__)
        self.ingestor = ingestor or FrameIngestor(logger=self.logger)

        self._lock = threading.RLock()
        self._window = AccumulationWindow()

    @property
    def is_empty(self) -> bool:
        with self._lock:
            return self._window.is_empty

    @property
    def window(self) -> Dict[str, Any]:
        """Read-only summary of the current window."""
        with self._lock:
            w = self._window
            return {
                "is_empty": w.is_empty,
                "anchor": w.anchor,
                "frame_count": w.frame_count,
                "total_exposure_s": w.total_exposure_s,
                "size": (w.buffer.width, w.buffer.height) if w.buffer is not None else None,
            }

    def reset(self) -> None:
        with self._lock:
            self._window.clear()

    def on_frame(self, frame: Frame) -> AccumulationStatus:
        validation = self.ingestor.validate(frame)
        if not validation.is_success:
            return self._status(
                StatusLevel.WARNING,
                FrameOutcome.SKIPPED,
                validation.message,
                details=validation.details,
            )

        ingested: IngestedFrame = validation.data
        crop_fraction = self.settings.crop_fraction

        with self._lock:
            if self._window.is_empty:
                return self._open_window(frame, ingested, crop_fraction)
            return self._merge_into_window(frame, ingested, crop_fraction)

    def flush(self) -> AccumulationStatus:
        """Write the open window out now, regardless of elapsed time."""
        with self._lock:
            if self._window.is_empty:
                return self._status(
                    StatusLevel.WARNING,
                    FrameOutcome.SKIPPED,
                    "Nothing to flush: window is empty",
                    details={"error_kind": "empty_window"},
                )
            return self._flush_window(elapsed_s=None)

    # Transitions (callers hold the lock)

    def _open_window(
        self, frame: Frame, ingested: IngestedFrame, crop_fraction: float
    ) -> AccumulationStatus:
        if crop_fraction <= 0:
            self.logger.info(f"Autocrop disabled: crop fraction set to {crop_fraction}")
            return self._status(StatusLevel.WARNING, FrameOutcome.DISABLED, "Autocrop disabled")

        cropped = crop_frame(frame, crop_fraction)
        if not cropped.is_success:
            return self._fail_window(cropped)

        w = self._window
        w.anchor = WindowAnchor(
            timestamp=ingested.local_time,
            ra_deg=ingested.ra_deg,
            dec_deg=ingested.dec_deg,
            crop_fraction=crop_fraction,
        )
        w.buffer = cropped.data
        w.frame_count = 1
        w.total_exposure_s = ingested.exposure_time_s
        w.last_source_path = frame.metadata.source_path
        self.logger.info(
            f"Opened crop window at ra={ingested.ra_deg} dec={ingested.dec_deg} "
            f"({w.buffer.width}x{w.buffer.height}, fraction {crop_fraction})"
        )
        return self._check_elapsed(ingested, FrameOutcome.STARTED)

    def _merge_into_window(
        self, frame: Frame, ingested: IngestedFrame, crop_fraction: float
    ) -> AccumulationStatus:
        w = self._window
        if crop_fraction <= 0 or not w.anchor.matches(ingested.ra_deg, ingested.dec_deg, crop_fraction):
            dropped = w.frame_count
            w.clear()
            if crop_fraction <= 0:
                message = f"Autocrop disabled mid-window, discarded {dropped} frame(s)"
            else:
                message = f"Slew or crop change detected, discarded {dropped} frame(s)"
            self.logger.info(message)
            return self._status(
                StatusLevel.WARNING, FrameOutcome.RESET, message, details={"discarded_frames": dropped}
            )

        cropped = crop_frame(frame, crop_fraction)
        if not cropped.is_success:
            return self._fail_window(cropped)

        summed = sum_frames(w.buffer, cropped.data)
        if not summed.is_success:
            return self._fail_window(summed)

        w.buffer = summed.data
        w.frame_count += 1
        w.total_exposure_s += ingested.exposure_time_s
        w.last_source_path = frame.metadata.source_path
        self.logger.debug(f"Added frame {w.frame_count} to crop window")
        return self._check_elapsed(ingested, FrameOutcome.ACCUMULATED)

    def _check_elapsed(self, ingested: IngestedFrame, outcome: FrameOutcome) -> AccumulationStatus:
        w = self._window
        elapsed = (ingested.local_time - w.anchor.timestamp).total_seconds() + ingested.exposure_time_s
        if elapsed > self.settings.aggregation_window_s:
            return self._flush_window(elapsed_s=elapsed)
        self.logger.debug(
            f"Window holds {w.frame_count} frame(s), {elapsed:.1f}s of "
            f"{self.settings.aggregation_window_s:.1f}s"
        )
        message = "Window opened" if outcome is FrameOutcome.STARTED else "Frame accumulated"
        return self._status(StatusLevel.SUCCESS, outcome, message, elapsed_s=elapsed)

    def _flush_window(self, elapsed_s: Optional[float]) -> AccumulationStatus:
        w = self._window
        count = w.frame_count
        result = self.flush_scheduler.flush(w)
        if not result.is_success:
            # Keep the sum so a later flush can retry
            return self._status(
                StatusLevel.ERROR,
                FrameOutcome.FAILED,
                f"Failed to save cropped stack: {result.message}",
                details={"error_kind": "persistence", "flush_status": result},
                elapsed_s=elapsed_s,
            )
        output_path = str(result.data) if result.data is not None else None
        emitted = w.buffer
        w.clear()
        return self._status(
            StatusLevel.SUCCESS,
            FrameOutcome.FLUSHED,
            f"Saved cropped stack of {count} frame(s)",
            data=emitted,
            details={"output_path": output_path},
            elapsed_s=elapsed_s,
            frame_count=count,
        )

    def _fail_window(self, failure: Status) -> AccumulationStatus:
        dropped = self._window.frame_count
        self._window.clear()
        self.logger.error(f"Crop window reset after error ({dropped} frame(s) lost): {failure.message}")
        details = dict(failure.details or {})
        details["discarded_frames"] = dropped
        return self._status(StatusLevel.ERROR, FrameOutcome.FAILED, failure.message, details=details)

    def _status(
        self,
        level: StatusLevel,
        outcome: FrameOutcome,
        message: str,
        data: Any = None,
        details: Optional[Dict[str, Any]] = None,
        elapsed_s: Optional[float] = None,
        frame_count: Optional[int] = None,
    ) -> AccumulationStatus:
        return AccumulationStatus(
            level=level,
            message=message,
            data=data,
            details=details,
            outcome=outcome,
            frame_count=self._window.frame_count if frame_count is None else frame_count,
            elapsed_s=elapsed_s,
        )
