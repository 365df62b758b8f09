#!/usr/bin/env python3
"""
File naming helpers for cropped stack output.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional

from .constants import DEFAULT_CROP_SUBDIR, DEFAULT_OUTPUT_DIR, FITS_EXTENSIONS


def _fmt_coord(v: float) -> str:
    return f"{float(v):+08.3f}".replace("+", "p").replace("-", "m")


def build_crop_destination(source_path: Path | str, subdir: str = DEFAULT_CROP_SUBDIR) -> Path:
    """``<source-dir>/<subdir>/<source-name>`` with a FITS suffix."""
    src = Path(source_path)
    name = src.name if src.suffix.lower() in FITS_EXTENSIONS else f"{src.name}.fits"
    return src.parent / subdir / name


def build_crop_basename(window_start: datetime, ra_deg: float, dec_deg: float) -> str:
    return (
        "crop_"
        f"{window_start.strftime('%Y%m%d_%H%M%S')}"
        f"_ra{_fmt_coord(ra_deg)}_dec{_fmt_coord(dec_deg)}.fits"
    )


class CropDestinationBuilder:
    """Resolves where a finished window is written.

    Frames read from disk are written next to their source, inside
    ``subdir``. Frames without a source path go to ``output_dir`` under a
    name derived from the window start and target.
    """

    def __init__(
        self,
        subdir: str = DEFAULT_CROP_SUBDIR,
        output_dir: Path | str = DEFAULT_OUTPUT_DIR,
    ) -> None:
        self.subdir = subdir
        self.output_dir = Path(output_dir)

    def __call__(
        self,
        window_start: datetime,
        ra_deg: float,
        dec_deg: float,
        source_path: Optional[str] = None,
    ) -> Path:
        if source_path:
            return build_crop_destination(source_path, self.subdir)
        return self.output_dir / build_crop_basename(window_start, ra_deg, dec_deg)
