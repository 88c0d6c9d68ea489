"""
Record types shared by the vector store and the memory engine.
"""

from typing import Dict, Optional
import numpy as np
from dataclasses import dataclass, field


@dataclass
class VectorRecord:
    """Represents a stored entry: vector, original content and metadata."""

    id: str
    """Unique identifier for the entry"""

    vector: np.ndarray
    """TF-IDF (or remote) vector snapshot taken when the entry was added"""

    metadata: Dict[str, object]
    """Entry metadata, always carries groupId and createdAt"""

    content: Optional[str] = None
    """Original text, loaded from the content file on get()"""

    @property
    def group_id(self) -> Optional[str]:
        return self.metadata.get("groupId")


@dataclass
class QueryResult:
    """Represents a ranked search hit resolved to its full record."""

    id: str
    """Identifier for the matching entry"""

    score: float
    """Cosine similarity to the query"""

    metadata: Dict[str, object] = field(default_factory=dict)
    """Metadata associated with the matched entry"""

    content: str = ""
    """Original text of the matched entry"""
