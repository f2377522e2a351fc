"""
Append-only file of fixed-width int8 vector records.

Record ``i`` occupies bytes ``[i * D, (i + 1) * D)`` of the file; there is no
header or footer. Dimension and scale are validated against the sidecar
manifest on open.
"""

import os
from pathlib import Path

import numpy as np

from ..core.errors import DimensionMismatchError, StorageIOError
from .codec import DEFAULT_SCALE, QuantizationCodec
from .manifest import StoreManifest, ensure_manifest

RECORD_DTYPE = np.int8


class VectorLog:
    """Flat on-disk vector log with quantize-on-append."""

    def __init__(self, path, dimension: int, codec: QuantizationCodec, manifest: StoreManifest = None, fsync: bool = True):
        if dimension <= 0:
            raise ValueError(f"Vector dimension must be positive, got {dimension}")
        self.path = Path(path)
        self.dimension = int(dimension)
        self.codec = codec
        self.manifest = manifest
        self.fsync = fsync

    @classmethod
    def open_or_create(cls, path, dimension: int, scale: float = DEFAULT_SCALE, fsync: bool = True) -> 'VectorLog':
        """
        Open the vector log at ``path``, creating an empty one if absent.

        Raises:
            StorageIOError: If the file cannot be created or opened
            StoreConfigMismatchError: If the store was created with another
                dimension or scale
        """
        path = Path(path)
        codec = QuantizationCodec(scale)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            if not path.exists():
                path.touch()
            elif not path.is_file():
                raise StorageIOError(f"Vector store path {path} is not a regular file", path=path)
        except OSError as e:
            raise StorageIOError(f"Failed to create vector store file: {e}", path=path) from e

        manifest = ensure_manifest(path, dimension, codec.scale)
        return cls(path, dimension, codec, manifest=manifest, fsync=fsync)

    @property
    def record_size(self) -> int:
        """Bytes per record."""
        return self.dimension * np.dtype(RECORD_DTYPE).itemsize

    @property
    def scale(self) -> float:
        return self.codec.scale

    def check_dimension(self, vector, dtype=np.float32) -> np.ndarray:
        """Return ``vector`` as a ``dtype`` array, or raise on length mismatch."""
        array = np.asarray(vector, dtype=dtype)
        if array.ndim != 1 or array.shape[0] != self.dimension:
            actual = array.shape[0] if array.ndim == 1 else int(array.size)
            raise DimensionMismatchError(self.dimension, actual)
        return array

    def append(self, vector) -> None:
        """
        Quantize ``vector`` and append it as one whole record.

        Raises:
            DimensionMismatchError: If ``len(vector) != dimension``
            EncodingError: If the vector has non-finite components
            StorageIOError: If the write or sync fails
        """
        array = self.check_dimension(vector, dtype=np.float64)
        payload = self.codec.encode(array).tobytes()

        try:
            with open(self.path, "ab") as f:
                f.write(payload)
                f.flush()
                if self.fsync:
                    os.fsync(f.fileno())
        except OSError as e:
            raise StorageIOError(f"Failed to write vector to file: {e}", path=self.path) from e

    def byte_size(self) -> int:
        try:
            return os.path.getsize(self.path)
        except OSError as e:
            raise StorageIOError(f"Failed to stat vector store file: {e}", path=self.path) from e

    def __len__(self) -> int:
        return self.byte_size() // self.record_size

    def len(self) -> int:
        """Number of whole records, derived from the current file size."""
        return len(self)

    def has_partial_record(self) -> bool:
        return self.byte_size() % self.record_size != 0

    def read_all(self) -> np.ndarray:
        """
        Snapshot the whole file as an ``(n, dimension)`` int8 array.

        A trailing partial record, if any, is ignored.
        """
        try:
            with open(self.path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise StorageIOError(f"Failed to read vector store file: {e}", path=self.path) from e

        codes = np.frombuffer(data, dtype=RECORD_DTYPE)
        count = codes.shape[0] // self.dimension
        return codes[:count * self.dimension].reshape(count, self.dimension)

    def read(self, index: int) -> np.ndarray:
        """Read the int8 codes of record ``index``."""
        count = len(self)
        if index < 0 or index >= count:
            raise IndexError(f"Vector index {index} out of range for store of {count} records")

        try:
            with open(self.path, "rb") as f:
                f.seek(index * self.record_size)
                data = f.read(self.record_size)
        except OSError as e:
            raise StorageIOError(f"Failed to read vector store file: {e}", path=self.path) from e

        return np.frombuffer(data, dtype=RECORD_DTYPE).copy()

    def truncate(self, count: int) -> None:
        """Drop every record at position ``count`` and beyond, plus any partial tail."""
        if count < 0:
            raise ValueError("count must be non-negative")
        try:
            with open(self.path, "r+b") as f:
                f.truncate(count * self.record_size)
                f.flush()
                if self.fsync:
                    os.fsync(f.fileno())
        except OSError as e:
            raise StorageIOError(f"Failed to truncate vector store file: {e}", path=self.path) from e
