#!/usr/bin/env python3
"""
FlushScheduler: packages a finished accumulation window and hands it to a
persistence sink.
"""

from __future__ import annotations

from dataclasses import replace
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional, Protocol

from ..capture.frame import Frame
from ..status import Status, error_status
from ..utils.constants import FitsHeaderKeys
from ..utils.file_naming import CropDestinationBuilder

if TYPE_CHECKING:
    from ..processing.accumulator import AccumulationWindow


class FrameSink(Protocol):
    def write(self, frame: Frame, destination: Path) -> Status:
        ...


DestinationBuilder = Callable[..., Path]


class FlushScheduler:
    def __init__(
        self,
        sink: FrameSink,
        destination_builder: Optional[DestinationBuilder] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.sink = sink
        self.destination_builder = destination_builder or CropDestinationBuilder()
        self.logger = logger or logging.getLogger(__name__)

    def build_output_frame(self, window: "AccumulationWindow") -> Frame:
        """Attach window-derived headers to the accumulated buffer."""
        buffer = window.buffer
        anchor = window.anchor
        headers = dict(buffer.metadata.headers)
        headers[FitsHeaderKeys.NCOMBINE] = window.frame_count
        headers[FitsHeaderKeys.TOTEXP] = window.total_exposure_s
        headers[FitsHeaderKeys.CROPFRAC] = anchor.crop_fraction
        headers[FitsHeaderKeys.WINSTART] = anchor.timestamp.isoformat()
        return buffer.derive(buffer.data, metadata=replace(buffer.metadata, headers=headers))

    def flush(self, window: "AccumulationWindow") -> Status:
        """Write the window out. The sink's status is returned unchanged.

        The window itself is not touched; clearing it after a successful
        write is up to the caller.
        """
        if window.is_empty:
            return error_status("Nothing to flush: window is empty", details={"error_kind": "empty_window"})

        anchor = window.anchor
        destination = Path(
            self.destination_builder(
                anchor.timestamp, anchor.ra_deg, anchor.dec_deg, window.last_source_path
            )
        )
        output = self.build_output_frame(window)
        self.logger.info(
            f"Flushing {window.frame_count} frame(s) "
            f"({output.width}x{output.height}, {window.total_exposure_s:.1f}s total) to {destination}"
        )
        status = self.sink.write(output, destination)
        if status.is_success:
            self.logger.info(f"Cropped stack saved: {status.data or destination}")
        else:
            self.logger.error(f"Failed to save cropped stack to {destination}: {status.message}")
        return status
