import numpy as np
import pytest

from autocrop.capture.frame import Frame, FrameMetadata
from autocrop.exceptions import FrameFormatError


def test_dimensions_and_flat_view():
    frame = Frame(data=np.arange(12, dtype=np.uint16).reshape(3, 4))
    assert (frame.width, frame.height) == (4, 3)
    assert frame.pixels.tolist() == list(range(12))
    assert frame.bit_depth == 16


@pytest.mark.parametrize(
    "data",
    [
        np.zeros((4, 4), dtype=np.uint8),
        np.zeros((4, 4), dtype=np.float32),
        np.zeros((2, 4, 4), dtype=np.uint16),
        [[1, 2], [3, 4]],
    ],
)
def test_unsupported_data_is_rejected(data):
    with pytest.raises(FrameFormatError):
        Frame(data=data)


def test_derive_keeps_properties():
    meta = FrameMetadata(exposure_time_s=3.0)
    frame = Frame(data=np.zeros((4, 4), dtype=np.uint16), metadata=meta, bit_depth=14, is_bayered=True)
    derived = frame.derive(np.ones((2, 2), dtype=np.uint16))
    assert (derived.width, derived.height) == (2, 2)
    assert derived.bit_depth == 14
    assert derived.is_bayered
    assert derived.metadata is meta
