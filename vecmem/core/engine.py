"""
Memory engine facade.
Composes an embedding provider with the file-backed store behind the operations used by chat sessions and the project scanner.
"""

import base64
import hashlib
import json
import threading
import uuid
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from .config import DEFAULT_LIMIT, get_embedding_provider, get_store_path, query_mutates_model
from .errors import InvalidMetadataError, NotInitializedError, StorageWriteError
from ..vector.embeddings import IEmbeddingProvider
from ..vector.file_store import FileVectorStore
from ..vector.schemas import EntryMetadata
from ..vector.types import QueryResult, VectorRecord
from ..util.logging import logger

MODEL_FILE = "model.json"
# Longer encoded paths would exceed common file name limits
MAX_ENCODED_ID_LENGTH = 200


def document_id_for_path(path: str) -> str:
    """Stable entry id for a source file path."""
    encoded = base64.urlsafe_b64encode(str(path).encode("utf-8")).decode("ascii")
    if len(encoded) > MAX_ENCODED_ID_LENGTH:
        encoded = hashlib.sha256(str(path).encode("utf-8")).hexdigest()
    return f"doc_{encoded}"


class MemoryEngine:
    """
    High-level service for local vector memory.

    One engine owns one embedding provider and one store; the provider's
    model state is saved next to the store so IDF statistics survive
    restarts. Entries are grouped by an opaque group id (a chat session id,
    or a project name for scanned files).
    """

    def __init__(self, base_path=None, embedding_provider: Optional[IEmbeddingProvider] = None,
                 query_mutates: Optional[bool] = None):
        """
        Initialize the engine. Call initialize() before any other operation.

        Args:
            base_path: Store directory, defaults to VECMEM_STORE_PATH
            embedding_provider: Provider instance, defaults to the configured one
            query_mutates: Whether find_similar updates model statistics,
                defaults to VECMEM_QUERY_MUTATES_MODEL
        """
        self.base_path = Path(base_path) if base_path is not None else get_store_path()
        self.embedder = embedding_provider if embedding_provider is not None else get_embedding_provider()
        self.store = FileVectorStore(self.base_path)
        self.model_path = self.base_path / MODEL_FILE
        self.query_mutates = query_mutates
        self._lock = threading.RLock()
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        """Load model state and stored entries. Safe to call more than once."""
        with self._lock:
            if self._initialized:
                return
            self._load_model()
            self.store.initialize()
            self._initialized = True
            logger.info(f"Memory engine initialized at {self.base_path} with {len(self.store)} entries")

    def _require_initialized(self):
        if not self._initialized:
            raise NotInitializedError("Memory engine used before initialize() completed")

    def _load_model(self) -> None:
        if not self.model_path.exists():
            return
        try:
            state = json.loads(self.model_path.read_text(encoding="utf-8"))
            self.embedder.load_state_dict(state)
        except (OSError, ValueError, TypeError, AttributeError) as e:
            # Corrupt model state starts a fresh model rather than failing startup
            logger.log_store_event("load_model", self.base_path, {"error": str(e)}, status="recovered")

    def _save_model(self) -> None:
        state = self.embedder.state_dict()
        if state is None:
            return
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
            self.model_path.write_text(json.dumps(state), encoding="utf-8")
        except OSError as e:
            raise StorageWriteError(f"Failed to write model state: {e}", self.model_path) from e

    def _embed(self, text: str, frozen: bool):
        if frozen:
            return self.embedder.embed_query(text)
        vector = self.embedder.embed_text(text)
        self._save_model()
        return vector

    def _store(self, entry_id: str, text: str, metadata: Dict[str, Any]) -> str:
        with self._lock:
            vector = self._embed(text, frozen=False)
            self.store.add(VectorRecord(id=entry_id, vector=vector, metadata=metadata, content=text))
        return entry_id

    def add_text(self, text: str, group_id: str, extra_metadata: Optional[Dict[str, Any]] = None) -> str:
        """
        Embed and store a text under a group.

        Args:
            text: Text to remember
            group_id: Group (session) identifier
            extra_metadata: Additional scalar metadata

        Returns:
            The new entry id
        """
        self._require_initialized()
        try:
            metadata = EntryMetadata.build(group_id, extra_metadata).to_dict()
        except ValidationError as e:
            raise InvalidMetadataError(f"Invalid metadata for group {group_id!r}: {e}") from e

        entry_id = f"mem_{uuid.uuid4().hex}"
        return self._store(entry_id, text, metadata)

    def add_document(self, path: str, content: str, doc_type: Optional[str] = None,
                     group_id: str = "project", extra_metadata: Optional[Dict[str, Any]] = None) -> str:
        """
        Store a source file. The id is derived from the path, so re-adding a
        path replaces the earlier entry.
        """
        self._require_initialized()
        extra = dict(extra_metadata or {})
        extra["path"] = str(path)
        extra["type"] = doc_type if doc_type is not None else Path(path).suffix.lstrip(".")
        try:
            metadata = EntryMetadata.build(group_id, extra).to_dict()
        except ValidationError as e:
            raise InvalidMetadataError(f"Invalid metadata for {path}: {e}") from e

        return self._store(document_id_for_path(path), content, metadata)

    def find_similar(self, query_text: str, group_id: Optional[str] = None, limit: Optional[int] = None,
                     frozen: Optional[bool] = None) -> List[QueryResult]:
        """
        Rank stored entries by similarity to a query text.

        Args:
            query_text: Query text
            group_id: Restrict candidates to this group before ranking
            limit: Maximum number of results
            frozen: Embed the query without updating model statistics. None
                uses the engine setting, then VECMEM_QUERY_MUTATES_MODEL.

        Returns:
            Ranked QueryResult list, best first
        """
        self._require_initialized()
        if limit is None:
            limit = DEFAULT_LIMIT
        if frozen is None:
            mutates = self.query_mutates if self.query_mutates is not None else query_mutates_model()
            frozen = not mutates

        filters = {"groupId": group_id} if group_id is not None else None
        with self._lock:
            query_vector = self._embed(query_text, frozen=frozen)
            results = self.store.search(query_vector, limit, filters=filters)

        logger.log_operation("engine.find_similar", "success", {
            "group_id": group_id,
            "limit": limit,
            "frozen": frozen,
            "hits": len(results)
        })
        return results

    def find_relevant_context(self, query_text: str, limit: Optional[int] = None) -> List[QueryResult]:
        """Search across every group."""
        return self.find_similar(query_text, group_id=None, limit=limit)

    def get(self, entry_id: str) -> Optional[VectorRecord]:
        self._require_initialized()
        return self.store.get(entry_id)

    def remove(self, entry_id: str) -> bool:
        self._require_initialized()
        return self.store.remove(entry_id)

    def list_group(self, group_id: str) -> List[VectorRecord]:
        """All readable entries of a group, in insertion order."""
        self._require_initialized()
        records = []
        for entry_id in self.store.ids({"groupId": group_id}):
            record = self.store.get(entry_id)
            if record is not None:
                records.append(record)
        return records

    def delete_group(self, group_id: str) -> int:
        """
        Remove every entry of a group.

        Returns:
            Number of entries removed
        """
        self._require_initialized()
        removed = 0
        with self._lock:
            for entry_id in self.store.ids({"groupId": group_id}):
                if self.store.remove(entry_id):
                    removed += 1

        logger.log_operation("engine.delete_group", "success", {"group_id": group_id, "removed": removed})
        return removed

    def clear(self) -> None:
        """Remove every entry. Model statistics are kept."""
        self._require_initialized()
        with self._lock:
            self.store.clear()

    def stats(self) -> Dict[str, Any]:
        """Summary of store contents and model size."""
        self._require_initialized()
        groups = Counter(metadata.get("groupId") for _, metadata in self.store.list_metadata())

        state = self.embedder.state_dict() or {}
        return {
            "entries": len(self.store),
            "groups": dict(groups),
            "vocabulary_size": len(state.get("vocabulary", {})),
            "document_count": state.get("document_count", 0),
            "provider": self.embedder.name,
            "store_path": str(self.base_path),
        }
