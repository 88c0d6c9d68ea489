"""
Abstract vector store interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import numpy as np

from .types import VectorRecord, QueryResult


class IVectorStore(ABC):
    """Abstract interface for vector storage operations."""

    @abstractmethod
    def initialize(self) -> None:
        """Prepare storage and load any persisted entries."""
        pass

    @abstractmethod
    def add(self, record: VectorRecord) -> None:
        """Add a single vector record to the store."""
        pass

    @abstractmethod
    def get(self, record_id: str) -> Optional[VectorRecord]:
        """Get a full record, or None when it is unknown or incomplete."""
        pass

    @abstractmethod
    def remove(self, record_id: str) -> bool:
        """Remove a vector record by ID. Returns whether it was known."""
        pass

    @abstractmethod
    def search(self, query_vector: np.ndarray, limit: int = 5,
               filters: Optional[Dict[str, Any]] = None) -> List[QueryResult]:
        """Search for similar vectors and return ranked results."""
        pass

    @abstractmethod
    def ids(self, filters: Optional[Dict[str, Any]] = None) -> List[str]:
        """List stored IDs in insertion order, optionally filtered by metadata."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Clear all records from the store."""
        pass


def matches_filters(metadata: Dict[str, Any], filters: Optional[Dict[str, Any]]) -> bool:
    """Equality match of every filter key against entry metadata."""
    if not filters:
        return True
    return all(metadata.get(key) == value for key, value in filters.items())
