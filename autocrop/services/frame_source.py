#!/usr/bin/env python3
"""
FitsFrameSource: feeds FITS files from a capture directory to a frame
callback in capture order, once or continuously.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
import stat
import threading
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Set, Tuple

from ..capture.frame import Frame
from ..exceptions import FileError
from ..utils.constants import DEFAULT_BIT_DEPTH
from ..utils.fits_utils import read_frame


class FitsFrameSource:
    def __init__(
        self,
        directory: Path | str,
        patterns: Iterable[str] = ("*.fits", "*.fit"),
        bit_depth: int = DEFAULT_BIT_DEPTH,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.directory = Path(directory)
        self.patterns = list(patterns)
        self.bit_depth = int(bit_depth)
        self.logger = logger or logging.getLogger(__name__)
        self._seen: Set[Path] = set()
        self._pending_sizes: Dict[Path, int] = {}

    @classmethod
    def from_config(cls, directory: Path | str, config, logger: Optional[logging.Logger] = None) -> "FitsFrameSource":
        cfg = config.get_input_config()
        return cls(
            directory,
            patterns=cfg.get("patterns", ["*.fits", "*.fit"]),
            bit_depth=cfg.get("bit_depth", DEFAULT_BIT_DEPTH),
            logger=logger,
        )

    @staticmethod
    def _stat(path: Path) -> Optional[os.stat_result]:
        # Files may be moved or deleted between listing and stat
        try:
            return path.stat()
        except FileNotFoundError:
            return None

    def list_files(self) -> List[Path]:
        """FITS files in the directory, oldest first (mtime, then name)."""
        found: Dict[Path, Tuple[float, str]] = {}
        for pattern in self.patterns:
            for path in self.directory.glob(pattern):
                st = self._stat(path)
                if st is not None and stat.S_ISREG(st.st_mode):
                    found[path] = (st.st_mtime, path.name)
        return sorted(found, key=lambda p: found[p])

    def _read(self, path: Path) -> Optional[Frame]:
        try:
            return read_frame(path, bit_depth=self.bit_depth)
        except FileError as e:
            self.logger.warning(f"Skipping unreadable file {path.name}: {e}")
            return None

    def iter_frames(self) -> Iterator[Frame]:
        """Yield every readable frame currently in the directory."""
        for path in self.list_files():
            self._seen.add(path)
            frame = self._read(path)
            if frame is not None:
                yield frame

    def poll(self) -> List[Frame]:
        """Frames for files that appeared since the last call.

        A new file is only read once its size is unchanged between two
        polls, so files still being written are picked up on a later poll.
        """
        frames: List[Frame] = []
        for path in self.list_files():
            if path in self._seen:
                continue
            st = self._stat(path)
            if st is None:
                self._pending_sizes.pop(path, None)
                continue
            size = st.st_size
            if self._pending_sizes.get(path) != size:
                self._pending_sizes[path] = size
                continue
            self._pending_sizes.pop(path, None)
            self._seen.add(path)
            frame = self._read(path)
            if frame is not None:
                frames.append(frame)
        return frames

    def watch(
        self,
        on_frame: Callable[[Frame], object],
        stop_event: threading.Event,
        poll_interval_s: float = 2.0,
    ) -> int:
        """Poll the directory until ``stop_event`` is set. Returns frames delivered."""
        delivered = 0
        self.logger.info(f"Watching {self.directory} for new frames (every {poll_interval_s}s)")
        while not stop_event.is_set():
            for frame in self.poll():
                on_frame(frame)
                delivered += 1
            stop_event.wait(poll_interval_s)
        return delivered
