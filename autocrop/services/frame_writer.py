#!/usr/bin/env python3
"""
FitsFrameWriter: persists frames as FITS files with an atomic
temp-file-then-rename write.
"""

from __future__ import annotations

import errno
import os
from pathlib import Path
import shutil
import tempfile
import time
from typing import Optional

import numpy as np

from ..capture.frame import Frame
from ..status import Status, error_status, success_status
from ..utils.fits_utils import build_header


class FitsFrameWriter:
    def __init__(
        self,
        config=None,
        logger=None,
        temp_dir: Optional[str] = None,
        overwrite: Optional[bool] = None,
    ) -> None:
        self.config = config
        self.logger = logger
        # Explicit arguments win over config
        out_cfg = {}
        if config is not None:
            try:
                out_cfg = config.get_output_config()
            except AttributeError:
                out_cfg = {}
        self.temp_dir = temp_dir if temp_dir is not None else out_cfg.get("temp_dir")
        self.overwrite = bool(out_cfg.get("overwrite", True)) if overwrite is None else overwrite

    def write(self, frame: Frame, destination: Path | str) -> Status:
        destination = Path(destination)
        if destination.exists() and not self.overwrite:
            return error_status(
                f"Destination already exists: {destination}",
                details={"error_kind": "persistence", "destination": str(destination)},
            )

        tmp_path: Optional[str] = None
        try:
            import astropy.io.fits as fits

            header = build_header(frame, self.logger)
            hdu = fits.PrimaryHDU(np.asarray(frame.data, dtype=np.uint16), header=header)

            fd, tmp_path = tempfile.mkstemp(suffix=".fits", dir=self.temp_dir)
            os.close(fd)

            t0 = time.perf_counter()
            hdu.writeto(tmp_path, overwrite=True)
            destination.parent.mkdir(parents=True, exist_ok=True)
            self._move_into_place(tmp_path, destination)
            tmp_path = None
            save_ms = (time.perf_counter() - t0) * 1000.0

            if self.logger:
                self.logger.debug(f"FITS frame saved: {destination} save_ms={save_ms:.1f}")
            return success_status(
                "FITS file saved", data=str(destination), details={"save_duration_ms": save_ms}
            )
        except (OSError, ValueError, TypeError) as e:
            return error_status(
                f"Error saving FITS file: {e}",
                details={"error_kind": "persistence", "destination": str(destination)},
            )
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    pass

    @staticmethod
    def _move_into_place(src: str, destination: Path) -> None:
        try:
            os.replace(src, destination)
        except OSError as e:
            # Temp dir on another filesystem
            if e.errno != errno.EXDEV:
                raise
            shutil.move(src, str(destination))
