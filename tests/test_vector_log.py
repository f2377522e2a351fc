"""
Tests for the append-only quantized vector log and its manifest.
"""

import json

import numpy as np
import pytest

from review_search.core.errors import DimensionMismatchError, EncodingError, StoreConfigMismatchError
from review_search.vector.manifest import FORMAT_VERSION, manifest_path_for
from review_search.vector.vector_log import VectorLog


def test_open_creates_empty_file_and_manifest(vector_path):
    """Opening a missing path creates an empty log and records its configuration."""
    log = VectorLog.open_or_create(vector_path, dimension=4)

    assert vector_path.exists()
    assert vector_path.stat().st_size == 0
    assert len(log) == 0

    manifest = json.loads(manifest_path_for(vector_path).read_text())
    assert manifest["dimension"] == 4
    assert manifest["scale"] == 127.0
    assert manifest["format_version"] == FORMAT_VERSION


def test_length_invariant(small_log, vector_path, rng):
    """n appends give len n and a file of exactly n * D bytes."""
    for n in range(1, 11):
        small_log.append(rng.standard_normal(4))
        assert len(small_log) == n
        assert small_log.len() == n
        assert vector_path.stat().st_size == n * 4


def test_on_disk_layout(small_log, vector_path):
    """Record i occupies bytes [i*D, (i+1)*D) as signed bytes."""
    small_log.append([1.0, 0.0, 0.0, 0.0])
    small_log.append([0.0, -1.0, 0.0, 0.0])

    raw = np.frombuffer(vector_path.read_bytes(), dtype=np.int8)
    assert raw.tolist() == [127, 0, 0, 0, 0, -127, 0, 0]


def test_read_all_and_read(small_log):
    small_log.append([1.0, 0.0, 0.0, 0.0])
    small_log.append([0.0, 0.0, 1.0, 0.0])

    records = small_log.read_all()
    assert records.shape == (2, 4)
    assert records.dtype == np.int8
    assert records[1].tolist() == [0, 0, 127, 0]
    assert small_log.read(0).tolist() == [127, 0, 0, 0]

    with pytest.raises(IndexError):
        small_log.read(2)


def test_read_all_empty(small_log):
    """An empty log reads back as a (0, D) array, not an error."""
    records = small_log.read_all()
    assert records.shape == (0, 4)


def test_read_all_ignores_partial_tail(small_log, vector_path):
    small_log.append([1.0, 0.0, 0.0, 0.0])
    with open(vector_path, "ab") as f:
        f.write(b"\x01\x02")

    assert len(small_log) == 1
    assert small_log.has_partial_record()
    assert small_log.read_all().shape == (1, 4)


def test_dimension_mismatch_leaves_log_unchanged(small_log, vector_path):
    small_log.append([1.0, 0.0, 0.0, 0.0])

    with pytest.raises(DimensionMismatchError) as excinfo:
        small_log.append([1.0, 0.0, 0.0])

    assert excinfo.value.expected == 4
    assert excinfo.value.actual == 3
    assert len(small_log) == 1
    assert vector_path.stat().st_size == 4

    with pytest.raises(DimensionMismatchError):
        small_log.append(np.ones((2, 4)))
    assert len(small_log) == 1


def test_dimension_mismatch_is_value_error(small_log):
    """Callers catching ValueError still see dimension mismatches."""
    with pytest.raises(ValueError):
        small_log.append([1.0] * 5)


def test_non_finite_vector_not_written(small_log):
    with pytest.raises(EncodingError):
        small_log.append([float("nan"), 0.0, 0.0, 0.0])
    assert len(small_log) == 0


def test_open_creates_parent_directories(tmp_path):
    path = tmp_path / "nested" / "dir" / "v.index"

    log = VectorLog.open_or_create(path, dimension=4, fsync=False)
    assert path.exists()
    assert len(log) == 0


def test_append_float64_beyond_float32_range(small_log):
    small_log.append(np.array([1e300, 0.0, 0.0, 0.0]))
    assert small_log.read(0).tolist() == [127, 0, 0, 0]


def test_reopen_keeps_records(vector_path):
    log = VectorLog.open_or_create(vector_path, dimension=4, fsync=False)
    log.append([0.0, 1.0, 0.0, 0.0])

    reopened = VectorLog.open_or_create(vector_path, dimension=4, fsync=False)
    assert len(reopened) == 1
    assert reopened.read(0).tolist() == [0, 127, 0, 0]


def test_reopen_with_other_dimension_rejected(vector_path):
    VectorLog.open_or_create(vector_path, dimension=4)

    with pytest.raises(StoreConfigMismatchError) as excinfo:
        VectorLog.open_or_create(vector_path, dimension=8)
    assert excinfo.value.persisted["dimension"] == 4
    assert excinfo.value.requested["dimension"] == 8


def test_reopen_with_other_scale_rejected(vector_path):
    VectorLog.open_or_create(vector_path, dimension=4, scale=127.0)

    with pytest.raises(StoreConfigMismatchError):
        VectorLog.open_or_create(vector_path, dimension=4, scale=100.0)


def test_legacy_file_without_manifest_is_adopted(vector_path):
    """A headerless file created before manifests existed gets one on open."""
    vector_path.write_bytes(bytes([127, 0, 0, 0]))

    log = VectorLog.open_or_create(vector_path, dimension=4)
    assert len(log) == 1
    assert manifest_path_for(vector_path).exists()


def test_malformed_manifest_rejected(vector_path):
    vector_path.touch()
    manifest_path_for(vector_path).write_text("{not json")

    with pytest.raises(StoreConfigMismatchError):
        VectorLog.open_or_create(vector_path, dimension=4)


def test_truncate(small_log, vector_path):
    for i in range(3):
        small_log.append([1.0, float(i), 0.0, 0.0])

    small_log.truncate(1)
    assert len(small_log) == 1
    assert vector_path.stat().st_size == 4


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
