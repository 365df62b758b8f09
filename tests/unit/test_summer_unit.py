from hypothesis import given, settings
import hypothesis.strategies as st
import numpy as np

from autocrop.processing.summer import sum_frames, sum_pixel_buffers


def _buffers(h, w, vals_a, vals_b):
    a = np.resize(np.array(vals_a, dtype=np.uint16), h * w).reshape((h, w))
    b = np.resize(np.array(vals_b, dtype=np.uint16), h * w).reshape((h, w))
    return a, b


@given(
    h=st.integers(min_value=1, max_value=16),
    w=st.integers(min_value=1, max_value=16),
    vals_a=st.lists(st.integers(min_value=0, max_value=65535), min_size=1, max_size=64),
    vals_b=st.lists(st.integers(min_value=0, max_value=65535), min_size=1, max_size=64),
)
@settings(deadline=None, max_examples=50)
def test_sum_is_commutative_and_in_range(h, w, vals_a, vals_b):
    a, b = _buffers(h, w, vals_a, vals_b)
    ab = sum_pixel_buffers(a, b)
    ba = sum_pixel_buffers(b, a)
    np.testing.assert_array_equal(ab, ba)
    assert ab.dtype == np.uint16
    assert ab.shape == (h, w)
    # pedestal removed: the darkest sample is always zero
    assert int(ab.min()) == 0


def test_uniform_buffers_cancel_to_zero():
    a = np.full((8, 8), 1200, dtype=np.uint16)
    b = np.full((8, 8), 300, dtype=np.uint16)
    out = sum_pixel_buffers(a, b)
    assert not out.any()


def test_saturated_inputs_do_not_wrap():
    a = np.full((4, 4), 65535, dtype=np.uint16)
    b = np.full((4, 4), 65535, dtype=np.uint16)
    a[0, 0] = 0
    b[0, 0] = 0
    out = sum_pixel_buffers(a, b)
    # 131070 - 0 clipped to the sample maximum, not wrapped around
    assert out[1, 1] == 65535
    assert out[0, 0] == 0


def test_pedestal_subtracted_then_clipped():
    a = np.array([[10, 20], [30, 40000]], dtype=np.uint16)
    b = np.array([[5, 5], [5, 40000]], dtype=np.uint16)
    out = sum_pixel_buffers(a, b)
    np.testing.assert_array_equal(out, np.array([[0, 10], [20, 65535]], dtype=np.uint16))


def test_sum_frames_keeps_base_properties(make_frame):
    base = make_frame(data=np.array([[1, 2], [3, 4]], dtype=np.uint16), is_bayered=True)
    incoming = make_frame(data=np.array([[1, 1], [1, 1]], dtype=np.uint16), ra=1.0)
    status = sum_frames(base, incoming)
    assert status.is_success
    out = status.data
    np.testing.assert_array_equal(out.data, np.array([[0, 1], [2, 3]], dtype=np.uint16))
    assert out.is_bayered is True
    assert out.metadata is base.metadata


def test_sum_frames_rejects_dimension_mismatch(make_frame):
    status = sum_frames(make_frame(size=(4, 4)), make_frame(size=(4, 5)))
    assert status.is_error
    assert status.error_kind == "dimension_mismatch"
