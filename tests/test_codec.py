"""
Tests for int8 quantization and dequantization.
"""

import numpy as np
import pytest

from review_search.core.errors import EncodingError
from review_search.vector.codec import QuantizationCodec


def test_encode_unit_axis():
    """A unit axis vector maps to +/-scale on that axis and zero elsewhere."""
    codec = QuantizationCodec(127.0)

    codes = codec.encode([1.0, 0.0, 0.0, 0.0])
    assert codes.dtype == np.int8
    assert codes.tolist() == [127, 0, 0, 0]

    codes = codec.encode([0.0, -3.0, 0.0, 0.0])
    assert codes.tolist() == [0, -127, 0, 0]


def test_encode_normalizes_magnitude():
    """Scaling the input does not change the codes."""
    codec = QuantizationCodec()
    vector = np.array([0.6, 0.8, 0.0], dtype=np.float32)

    assert codec.encode(vector).tolist() == codec.encode(vector * 50).tolist()
    assert codec.encode(vector).tolist() == [76, 102, 0]


def test_zero_vector_encodes_to_zero_codes():
    """A zero vector does not divide by zero and stays all zeros."""
    codec = QuantizationCodec()
    codes = codec.encode(np.zeros(8))
    assert codes.tolist() == [0] * 8


def test_large_scale_saturates_to_int8():
    """Codes outside the int8 range saturate instead of wrapping."""
    codec = QuantizationCodec(200.0)
    assert codec.encode([1.0, 0.0]).tolist() == [127, 0]
    assert codec.encode([-1.0, 0.0]).tolist() == [-128, 0]


def test_non_finite_input_rejected():
    """NaN and infinite components raise EncodingError."""
    codec = QuantizationCodec()
    with pytest.raises(EncodingError):
        codec.encode([float("nan"), 1.0])
    with pytest.raises(EncodingError):
        codec.encode([float("inf"), 1.0])


def test_large_magnitudes_keep_direction():
    """Components far above 1 normalize without overflowing to zero codes."""
    codec = QuantizationCodec()
    assert codec.encode([1e20, 0.0, 0.0, 0.0]).tolist() == [127, 0, 0, 0]
    assert codec.encode(np.array([1e300, -1e300])).tolist() == [90, -90]


def test_invalid_scale_rejected():
    with pytest.raises(ValueError):
        QuantizationCodec(0.0)
    with pytest.raises(ValueError):
        QuantizationCodec(-1.0)


def test_decode_component():
    codec = QuantizationCodec(127.0)
    assert codec.decode_component(127) == pytest.approx(1.0)
    assert codec.decode_component(-127) == pytest.approx(-1.0)
    assert codec.decode_component(0) == 0.0


def test_round_trip_error_bounded(rng):
    """Every component survives within 0.5 / scale, and direction is preserved."""
    codec = QuantizationCodec(127.0)

    for _ in range(20):
        v = rng.standard_normal(384).astype(np.float32)
        v /= np.linalg.norm(v)

        decoded = codec.decode(codec.encode(v))
        assert np.max(np.abs(decoded - v)) <= codec.max_component_error() + 1e-6
        assert float(np.dot(v, decoded)) > 0.99


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
