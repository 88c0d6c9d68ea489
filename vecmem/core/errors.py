"""
Error types surfaced by the vector memory engine.
Each error carries a machine-readable kind so callers can decide presentation.
"""


class VectorMemoryError(Exception):
    """Base class for vector memory errors."""

    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {"kind": self.kind, "message": self.message}


class NotInitializedError(VectorMemoryError):
    """Engine used before initialize() completed."""

    kind = "not_initialized"


class StorageWriteError(VectorMemoryError):
    """Writing a vector, content, index or model file failed."""

    kind = "io"

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = str(path) if path is not None else None

    def to_dict(self):
        data = super().to_dict()
        data["path"] = self.path
        return data


class InvalidMetadataError(VectorMemoryError):
    """Metadata did not fit the closed metadata schema."""

    kind = "invalid_metadata"
