import logging as _global_logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import pytest

from autocrop.capture.frame import Frame, FrameMetadata
from autocrop.config_manager import ConfigManager
from autocrop.status import error_status, success_status

# Fixed, zone-aware session start so elapsed-time arithmetic is deterministic
T0 = datetime(2024, 5, 1, 22, 0, 0).astimezone()


@pytest.fixture
def config(tmp_path):
    """Provide a default ConfigManager (no config file on disk)."""
    return ConfigManager(str(tmp_path / "missing_config.yaml"))


@pytest.fixture
def logger():
    """Provide a simple logger for tests expecting a 'logger' fixture."""
    import logging as _logging

    _logging.basicConfig(level=_logging.INFO)
    return _logging.getLogger("tests")


# Default logger fallbacks for tests that pass logger=None
if not _global_logging.getLogger().handlers:
    _global_logging.basicConfig(level=_global_logging.INFO)


def build_frame(
    value: int = 100,
    size: tuple = (20, 20),
    data: Optional[np.ndarray] = None,
    offset_s: float = 0.0,
    exposure: Optional[float] = 5.0,
    ra: Optional[float] = 150.25,
    dec: Optional[float] = 42.5,
    start: Any = "default",
    source_path: Optional[str] = None,
    is_bayered: bool = False,
    headers: Optional[Dict[str, Any]] = None,
) -> Frame:
    if data is None:
        width, height = size
        data = np.full((height, width), value, dtype=np.uint16)
    if start == "default":
        start = T0 + timedelta(seconds=offset_s)
    return Frame(
        data=data,
        metadata=FrameMetadata(
            exposure_start=start,
            exposure_time_s=exposure,
            ra_deg=ra,
            dec_deg=dec,
            image_type="LIGHT",
            headers=dict(headers or {}),
            source_path=source_path,
        ),
        is_bayered=is_bayered,
    )


@pytest.fixture
def t0():
    return T0


@pytest.fixture
def make_frame():
    """Factory for synthetic uint16 frames with complete metadata."""
    return build_frame


class RecordingSink:
    """In-memory persistence sink; optionally fails every write."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.writes: List[tuple] = []

    def write(self, frame: Frame, destination: Path):
        if self.fail:
            return error_status("disk full", details={"error_kind": "persistence"})
        self.writes.append((frame, Path(destination)))
        return success_status("FITS file saved", data=str(destination))


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def failing_sink():
    return RecordingSink(fail=True)


@pytest.fixture
def write_fits(tmp_path):
    """Write a small FITS capture with the headers capture software produces."""
    import astropy.io.fits as fits

    def _write(
        name: str = "light_0001.fits",
        value: int = 100,
        shape: tuple = (16, 16),
        headers: Optional[Dict[str, Any]] = None,
        directory: Optional[Path] = None,
    ) -> Path:
        hdr = fits.Header()
        hdr["EXPOSURE"] = 30.0
        hdr["OBJCTRA"] = "10 01 00"
        hdr["OBJCTDEC"] = "+42 30 00"
        hdr["DATE-LOC"] = "2024-05-01T22:00:00.000"
        hdr["IMAGETYP"] = "LIGHT"
        for key, val in (headers or {}).items():
            if val is None:
                hdr.remove(key, ignore_missing=True)
            else:
                hdr[key] = val
        target = (directory or tmp_path) / name
        target.parent.mkdir(parents=True, exist_ok=True)
        fits.PrimaryHDU(np.full(shape, value, dtype=np.uint16), header=hdr).writeto(target, overwrite=True)
        return target

    return _write
