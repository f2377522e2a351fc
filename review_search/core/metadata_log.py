"""
Append-only JSON-lines record log, indexed by line position.

Line ``i`` holds the record paired with vector ``i`` of the vector log.
"""

import json
import os
from itertools import islice
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List

from .errors import EncodingError, MetadataDecodeError, RecordNotFoundError, StorageIOError


def _to_dict(record: Any) -> Dict[str, Any]:
    if hasattr(record, "model_dump"):
        return record.model_dump()
    return dict(record)


class MetadataLog:
    """One compact JSON object per line, appended in insert order."""

    def __init__(self, path, fsync: bool = False):
        self.path = Path(path)
        self.fsync = fsync

    @classmethod
    def open_or_create(cls, path, fsync: bool = False) -> 'MetadataLog':
        path = Path(path)
        try:
            if not path.exists():
                path.touch()
        except OSError as e:
            raise StorageIOError(f"Failed to create metadata store file: {e}", path=path) from e
        return cls(path, fsync=fsync)

    def append(self, record: Any) -> None:
        """Serialize ``record`` (dict or pydantic model) and append it as one line."""
        try:
            line = json.dumps(_to_dict(record), ensure_ascii=False, separators=(",", ":")) + "\n"
        except (TypeError, ValueError) as e:
            raise EncodingError(f"Failed to serialize metadata record: {e}") from e
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line)
                f.flush()
                if self.fsync:
                    os.fsync(f.fileno())
        except OSError as e:
            raise StorageIOError(f"Failed to write metadata record: {e}", path=self.path) from e

    def _lines(self) -> Iterator[str]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                for line in f:
                    # A line without its newline is an interrupted append
                    if not line.endswith("\n"):
                        return
                    yield line
        except OSError as e:
            raise StorageIOError(f"Failed to read metadata store file: {e}", path=self.path) from e

    def _decode(self, index: int, line: str) -> Dict[str, Any]:
        try:
            return json.loads(line)
        except ValueError as e:
            raise MetadataDecodeError(f"Malformed metadata record at line {index}: {e}") from e

    def has_partial_record(self) -> bool:
        """True when the file ends with an unterminated line."""
        try:
            with open(self.path, "rb") as f:
                f.seek(0, os.SEEK_END)
                if f.tell() == 0:
                    return False
                f.seek(-1, os.SEEK_END)
                return f.read(1) != b"\n"
        except OSError as e:
            raise StorageIOError(f"Failed to read metadata store file: {e}", path=self.path) from e

    def __len__(self) -> int:
        return sum(1 for _ in self._lines())

    def get(self, index: int) -> Dict[str, Any]:
        """Return the record at position ``index``."""
        if index < 0:
            raise RecordNotFoundError(f"Metadata index {index} out of bounds")
        line = next(islice(self._lines(), index, None), None)
        if line is None:
            raise RecordNotFoundError(f"Metadata index {index} out of bounds")
        return self._decode(index, line)

    def get_many(self, indices: Iterable[int]) -> List[Dict[str, Any]]:
        """
        Return the records at ``indices`` in the order given, in one pass.

        Raises:
            RecordNotFoundError: If any index is out of bounds
        """
        indices = list(indices)
        if not indices:
            return []
        if min(indices) < 0:
            raise RecordNotFoundError(f"Metadata index {min(indices)} out of bounds")

        wanted = set(indices)
        last = max(wanted)
        found: Dict[int, Dict[str, Any]] = {}
        for position, line in enumerate(self._lines()):
            if position in wanted:
                found[position] = self._decode(position, line)
            if position >= last:
                break

        missing = wanted.difference(found)
        if missing:
            raise RecordNotFoundError(f"Metadata index {min(missing)} out of bounds")
        return [found[i] for i in indices]

    def iter_records(self) -> Iterator[Dict[str, Any]]:
        for position, line in enumerate(self._lines()):
            yield self._decode(position, line)

    def truncate(self, count: int) -> None:
        """Keep the first ``count`` complete lines and drop everything after."""
        if count < 0:
            raise ValueError("count must be non-negative")
        offset = 0
        try:
            with open(self.path, "r+b") as f:
                for _ in range(count):
                    line = f.readline()
                    if not line.endswith(b"\n"):
                        break
                    offset += len(line)
                f.truncate(offset)
                f.flush()
                if self.fsync:
                    os.fsync(f.fileno())
        except OSError as e:
            raise StorageIOError(f"Failed to truncate metadata store file: {e}", path=self.path) from e
