"""
File-backed vector store.

Layout under the base path:
    index.json          id -> {"metadata": {...}}, rewritten wholesale on every mutation
    vectors/<id>.json   JSON array of floats
    content/<id>.txt    original UTF-8 text

Writes are not transactional. A crash between writing the companion files and
rewriting index.json loses at most that one entry on the next initialize().
"""

import json
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import numpy as np

from .index import IVectorStore, matches_filters
from .similarity import cosine_similarity
from .types import VectorRecord, QueryResult
from ..core.errors import NotInitializedError, StorageWriteError
from ..util.logging import logger


def _is_safe_id(record_id: str) -> bool:
    return (
        isinstance(record_id, str)
        and bool(record_id)
        and record_id not in (".", "..")
        and "/" not in record_id
        and "\\" not in record_id
        and "\x00" not in record_id
    )


class FileVectorStore(IVectorStore):
    """Persistent store: one index table, one vector file and one content file per entry.

    All vectors are loaded into memory on initialize() and search is an
    exhaustive linear scan. Every read and write of the in-memory index goes
    through one re-entrant lock, so a single store instance can be shared
    between threads. Separate processes must not share a base path.
    """

    def __init__(self, base_path):
        self.base_path = Path(base_path)
        self.index_path = self.base_path / "index.json"
        self.vectors_path = self.base_path / "vectors"
        self.content_path = self.base_path / "content"
        self._items: Dict[str, Tuple[np.ndarray, Dict[str, Any]]] = {}
        self._lock = threading.RLock()
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, record_id) -> bool:
        with self._lock:
            return record_id in self._items

    def _vector_file(self, record_id: str) -> Path:
        return self.vectors_path / f"{record_id}.json"

    def _content_file(self, record_id: str) -> Path:
        return self.content_path / f"{record_id}.txt"

    def _require_initialized(self):
        if not self._initialized:
            raise NotInitializedError("Vector store used before initialize()")

    def initialize(self) -> int:
        """
        Create the directory layout and load persisted entries.

        Entries whose vector file is missing or unreadable are skipped. An
        unreadable index.json starts the store empty instead of failing.

        Returns:
            Number of entries loaded
        """
        with self._lock:
            try:
                self.vectors_path.mkdir(parents=True, exist_ok=True)
                self.content_path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageWriteError(f"Cannot create store directories: {e}", self.base_path) from e

            self._items = {}
            skipped = 0

            if self.index_path.exists():
                try:
                    index_data = json.loads(self.index_path.read_text(encoding="utf-8"))
                    if not isinstance(index_data, dict):
                        raise ValueError("index.json is not a JSON object")
                except (OSError, ValueError) as e:
                    logger.log_store_event("load_index", self.base_path, {"error": str(e)}, status="recovered")
                    index_data = {}

                for record_id, item in index_data.items():
                    if not isinstance(item, dict) or not _is_safe_id(record_id):
                        skipped += 1
                        continue

                    vector = self._load_vector(record_id)
                    if vector is None:
                        skipped += 1
                        continue

                    metadata = item.get("metadata")
                    self._items[record_id] = (vector, metadata if isinstance(metadata, dict) else {})

            self._initialized = True
            logger.log_store_event(
                "load",
                self.base_path,
                {"loaded": len(self._items), "skipped": skipped},
                status="skipped" if skipped else "success"
            )
            return len(self._items)

    def _load_vector(self, record_id: str) -> Optional[np.ndarray]:
        try:
            data = json.loads(self._vector_file(record_id).read_text(encoding="utf-8"))
            vector = np.asarray(data, dtype=np.float64)
        except (OSError, ValueError, TypeError):
            return None
        if vector.ndim != 1:
            return None
        return vector

    def _save_index(self) -> None:
        index = {record_id: {"metadata": metadata} for record_id, (_, metadata) in self._items.items()}
        try:
            self.index_path.write_text(json.dumps(index, indent=2), encoding="utf-8")
        except OSError as e:
            raise StorageWriteError(f"Failed to write index: {e}", self.index_path) from e

    def add(self, record: VectorRecord) -> None:
        """
        Persist an entry.

        Writes the vector file, then the content file, then updates the
        in-memory index and rewrites index.json. An existing id is overwritten.

        Raises:
            ValueError: if the id cannot be used as a file name
            StorageWriteError: if any file write fails
        """
        self._require_initialized()
        if not _is_safe_id(record.id):
            raise ValueError(f"Invalid record id: {record.id!r}")

        vector = np.array(record.vector, dtype=np.float64, copy=True)

        with self._lock:
            vector_file = self._vector_file(record.id)
            try:
                vector_file.write_text(json.dumps(vector.tolist()), encoding="utf-8")
            except OSError as e:
                raise StorageWriteError(f"Failed to write vector for {record.id}: {e}", vector_file) from e

            content_file = self._content_file(record.id)
            try:
                content_file.write_text(record.content or "", encoding="utf-8")
            except OSError as e:
                raise StorageWriteError(f"Failed to write content for {record.id}: {e}", content_file) from e

            self._items[record.id] = (vector, dict(record.metadata))
            self._save_index()

        logger.log_vector_operation("add", record.id, {"dimension": int(vector.shape[0])})

    def get(self, record_id: str) -> Optional[VectorRecord]:
        """Get an entry; None when unknown or when its content file is unreadable."""
        self._require_initialized()
        with self._lock:
            item = self._items.get(record_id)
            if item is None:
                return None
            vector, metadata = item

            try:
                content = self._content_file(record_id).read_text(encoding="utf-8")
            except (OSError, ValueError):
                return None

        return VectorRecord(id=record_id, vector=vector.copy(), metadata=dict(metadata), content=content)

    def remove(self, record_id: str) -> bool:
        """
        Delete an entry's files and drop it from the index.

        Returns:
            True if the id was known, False otherwise
        """
        self._require_initialized()
        if not _is_safe_id(record_id):
            return False

        with self._lock:
            for path in (self._vector_file(record_id), self._content_file(record_id)):
                try:
                    path.unlink(missing_ok=True)
                except OSError as e:
                    raise StorageWriteError(f"Failed to delete {path.name}: {e}", path) from e

            if record_id not in self._items:
                return False

            del self._items[record_id]
            self._save_index()

        logger.log_vector_operation("remove", record_id)
        return True

    def list_metadata(self) -> List[Tuple[str, Dict[str, Any]]]:
        """Snapshot of (id, metadata) pairs in insertion order."""
        self._require_initialized()
        with self._lock:
            return [(record_id, dict(metadata)) for record_id, (_, metadata) in self._items.items()]

    def ids(self, filters: Optional[Dict[str, Any]] = None) -> List[str]:
        self._require_initialized()
        with self._lock:
            return [record_id for record_id, (_, metadata) in self._items.items()
                    if matches_filters(metadata, filters)]

    def search(self, query_vector, limit: int = 5,
               filters: Optional[Dict[str, Any]] = None) -> List[QueryResult]:
        """
        Rank stored vectors by cosine similarity to the query.

        Filters are applied before ranking. Ties keep insertion order. Hits
        whose content cannot be read are dropped after ranking, so fewer than
        `limit` results may come back.

        Args:
            query_vector: Query embedding
            limit: Maximum number of ranked candidates
            filters: Optional metadata equality filters (e.g. {"groupId": "g1"})

        Returns:
            List of QueryResult, best first
        """
        self._require_initialized()
        if limit <= 0:
            return []

        query = np.asarray(query_vector, dtype=np.float64)

        with self._lock:
            scored = [
                (record_id, cosine_similarity(query, vector))
                for record_id, (vector, metadata) in self._items.items()
                if matches_filters(metadata, filters)
            ]
            scored.sort(key=lambda x: x[1], reverse=True)

            results = []
            for record_id, score in scored[:limit]:
                record = self.get(record_id)
                if record is None:
                    continue
                results.append(QueryResult(
                    id=record_id,
                    score=score,
                    metadata=record.metadata,
                    content=record.content
                ))

        return results

    def clear(self) -> None:
        """Delete every vector file, content file and index.json."""
        self._require_initialized()
        with self._lock:
            try:
                for directory in (self.vectors_path, self.content_path):
                    if directory.exists():
                        for path in directory.iterdir():
                            if path.is_file():
                                path.unlink()
                self.index_path.unlink(missing_ok=True)
            except OSError as e:
                raise StorageWriteError(f"Failed to clear store: {e}", self.base_path) from e
            self._items.clear()

        logger.log_store_event("clear", self.base_path)
