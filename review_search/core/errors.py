"""
Exceptions raised by the review store and its vector/metadata logs.

Validation errors are the caller's fault (bad vector length, non-finite
components, negative top_k) and map to client errors at the HTTP boundary.
Everything else is a server-side failure.
"""


class ReviewSearchError(Exception):
    """Base exception for all review search errors."""
    pass


class ValidationError(ReviewSearchError, ValueError):
    """Input rejected before any state was touched."""
    pass


class DimensionMismatchError(ValidationError):
    """
    Vector length does not match the store dimension.

    Raised by append and search; the store is left unchanged.
    """

    def __init__(self, expected: int, actual: int):
        super().__init__(f"Vector dimension {actual} does not match expected dimension {expected}")
        self.expected = expected
        self.actual = actual


class EncodingError(ValidationError):
    """Vector cannot be quantized (NaN or infinite components)."""
    pass


class StorageIOError(ReviewSearchError):
    """
    File create/open/read/write/sync failure.

    Always raised from the underlying OSError, which stays available as
    ``__cause__``.
    """

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


class StoreConfigMismatchError(ReviewSearchError):
    """Store reopened with a dimension or scale different from its manifest."""

    def __init__(self, message: str, persisted: dict = None, requested: dict = None):
        super().__init__(message)
        self.persisted = persisted or {}
        self.requested = requested or {}


class RecordNotFoundError(ReviewSearchError, IndexError):
    """No metadata record at the requested position."""
    pass


class MetadataDecodeError(ReviewSearchError):
    """A metadata line is not valid JSON."""
    pass
