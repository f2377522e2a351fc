"""
Int8 quantization of unit-normalized vectors.

Encoding normalizes the input to unit length, so magnitude is discarded and
only direction survives. Stored codes are dequantized one component at a
time (``code / scale``) during scoring.
"""

import numpy as np

from ..core.errors import EncodingError

INT8_MIN = -128
INT8_MAX = 127
DEFAULT_SCALE = 127.0


class QuantizationCodec:
    """Fixed linear scale between [-1, 1] floats and int8 codes."""

    def __init__(self, scale: float = DEFAULT_SCALE):
        if not np.isfinite(scale) or scale <= 0:
            raise ValueError(f"Quantization scale must be a positive finite number, got {scale}")
        self.scale = float(scale)

    def encode(self, vector) -> np.ndarray:
        """
        Quantize a vector to int8 codes.

        Args:
            vector: Sequence of floats

        Returns:
            1-D int8 array of the same length

        Raises:
            EncodingError: If any component is NaN or infinite
        """
        values = np.asarray(vector, dtype=np.float64).ravel()
        if not np.all(np.isfinite(values)):
            raise EncodingError("Vector contains NaN or infinite components")

        # Divide by the largest magnitude first so the sum of squares cannot overflow
        peak = float(np.max(np.abs(values))) if values.size else 0.0
        if peak > 0.0:
            values = values / peak
        norm = float(np.linalg.norm(values))
        if norm == 0.0:
            norm = 1.0

        scaled = np.clip(values / norm, -1.0, 1.0) * self.scale
        # Round half away from zero, then saturate into the int8 range
        rounded = np.sign(scaled) * np.floor(np.abs(scaled) + 0.5)
        return np.clip(rounded, INT8_MIN, INT8_MAX).astype(np.int8)

    def decode_component(self, code: int) -> float:
        """Dequantize a single code."""
        return float(code) / self.scale

    def decode(self, codes) -> np.ndarray:
        """Dequantize a full record (or a block of records) to float32."""
        return np.asarray(codes, dtype=np.float32) / np.float32(self.scale)

    def max_component_error(self) -> float:
        """Worst-case per-component round-trip error in the normalized domain."""
        return 0.5 / self.scale
