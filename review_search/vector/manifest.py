"""
Sidecar manifest recording the dimension and scale of a vector log.

The vector file itself stays headerless; the manifest lives next to it as
``<vector file>.manifest.json`` and is checked every time the log is opened.
"""

import json
import math
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..core.errors import StorageIOError, StoreConfigMismatchError

FORMAT_VERSION = 1
MANIFEST_SUFFIX = ".manifest.json"


@dataclass
class StoreManifest:
    """Persisted configuration of a vector log."""

    dimension: int
    scale: float
    format_version: int = FORMAT_VERSION
    dtype: str = "int8"
    created_at: Optional[str] = None

    def matches(self, dimension: int, scale: float) -> bool:
        return (
            self.dimension == dimension
            and math.isclose(self.scale, scale, rel_tol=0.0, abs_tol=1e-9)
            and self.format_version == FORMAT_VERSION
            and self.dtype == "int8"
        )

    @classmethod
    def from_dict(cls, data: dict) -> 'StoreManifest':
        return cls(
            dimension=int(data["dimension"]),
            scale=float(data["scale"]),
            format_version=int(data.get("format_version", FORMAT_VERSION)),
            dtype=data.get("dtype", "int8"),
            created_at=data.get("created_at"),
        )


def manifest_path_for(vector_path) -> Path:
    vector_path = Path(vector_path)
    return vector_path.with_name(vector_path.name + MANIFEST_SUFFIX)


def load_manifest(vector_path) -> Optional[StoreManifest]:
    """Read the manifest for a vector file, or None if it has none."""
    path = manifest_path_for(vector_path)
    if not path.exists():
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise StorageIOError(f"Failed to read store manifest: {e}", path=path) from e
    except ValueError as e:
        raise StoreConfigMismatchError(f"Store manifest {path} is not valid JSON: {e}") from e

    try:
        return StoreManifest.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise StoreConfigMismatchError(f"Store manifest {path} is malformed: {e}") from e


def write_manifest(vector_path, manifest: StoreManifest) -> Path:
    path = manifest_path_for(vector_path)
    if manifest.created_at is None:
        manifest.created_at = datetime.now().isoformat()
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(asdict(manifest), f, indent=2)
            f.write("\n")
    except OSError as e:
        raise StorageIOError(f"Failed to write store manifest: {e}", path=path) from e
    return path


def ensure_manifest(vector_path, dimension: int, scale: float) -> StoreManifest:
    """
    Validate the persisted manifest against the requested configuration.

    Writes a fresh manifest when none exists (new store, or a legacy file
    created before manifests were introduced).

    Raises:
        StoreConfigMismatchError: If the persisted dimension or scale differ
    """
    existing = load_manifest(vector_path)
    if existing is None:
        manifest = StoreManifest(dimension=dimension, scale=float(scale))
        write_manifest(vector_path, manifest)
        return manifest

    if not existing.matches(dimension, scale):
        raise StoreConfigMismatchError(
            f"Vector store {vector_path} was created with dimension={existing.dimension}, "
            f"scale={existing.scale} (format v{existing.format_version}); "
            f"refusing to open with dimension={dimension}, scale={scale}",
            persisted=asdict(existing),
            requested={"dimension": dimension, "scale": float(scale)},
        )
    return existing
