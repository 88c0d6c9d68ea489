"""
Embedding providers.
Local incremental TF-IDF is the default; a remote Ollama embedding path is optional and degrades to a local fallback.
"""

from abc import ABC, abstractmethod
from collections import Counter
from typing import Any, Dict, Optional
import math
import numpy as np
import ollama

from .tokenizer import tokenize
from ..util.logging import logger


class IEmbeddingProvider(ABC):
    """Abstract interface for embedding providers."""

    name = "abstract"

    @abstractmethod
    def embed_text(self, text: str) -> np.ndarray:
        """Generate embedding vector for given text."""
        pass

    @abstractmethod
    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        pass

    def embed_query(self, text: str) -> np.ndarray:
        """Embed a query without updating model state. Stateless providers embed normally."""
        return self.embed_text(text)

    def state_dict(self) -> Optional[Dict[str, Any]]:
        """Serializable model state, or None for stateless providers."""
        return None

    def load_state_dict(self, state: Dict[str, Any]) -> None:
        """Restore model state produced by state_dict()."""
        pass


def normalize(vector: np.ndarray) -> np.ndarray:
    """L2-normalize a vector; a zero vector is returned unchanged."""
    norm = np.linalg.norm(vector)
    if norm == 0:
        return vector
    return vector / norm


def truncate_text(text: str, max_length: int) -> str:
    """Keep the first and last halves of text longer than max_length."""
    if len(text) <= max_length:
        return text

    half = max_length // 2
    return f"{text[:half]}...{text[len(text) - half:]}"


def random_unit_vector(dimension: int, rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Random placeholder embedding with unit length."""
    rng = rng or np.random.default_rng()
    vector = rng.uniform(-1.0, 1.0, size=dimension)
    return normalize(vector)


class TfidfEmbedding(IEmbeddingProvider):
    """Incremental TF-IDF embedding provider.

    Every embedded text is also a training document: it grows the vocabulary
    and updates the document statistics used for IDF weighting of all later
    embeddings. The vocabulary only grows, so an index assigned to a term is
    never reused and previously stored vectors keep their meaning.
    """

    name = "tfidf"

    def __init__(self):
        self.vocabulary: Dict[str, int] = {}
        self.document_count = 0
        self.document_frequency: Dict[str, int] = {}

    def embed_text(self, text: str) -> np.ndarray:
        """Embed text and fold it into the model statistics."""
        return self._embed(text, update=True)

    def embed_query(self, text: str) -> np.ndarray:
        """Embed text against a frozen snapshot of the model.

        Terms the model has never seen get no slot and no weight.
        """
        return self._embed(text, update=False)

    def get_dimension(self) -> int:
        return len(self.vocabulary)

    def _embed(self, text: str, update: bool) -> np.ndarray:
        term_counts = Counter(tokenize(text))

        if update:
            for term in term_counts:
                if term not in self.vocabulary:
                    self.vocabulary[term] = len(self.vocabulary)

            # N first, then df, so a term's first document gives idf = ln(N / 1)
            self.document_count += 1
            for term in term_counts:
                self.document_frequency[term] = self.document_frequency.get(term, 0) + 1

        vector = np.zeros(len(self.vocabulary), dtype=np.float64)
        if not term_counts:
            return vector

        max_tf = max(term_counts.values())
        for term, count in term_counts.items():
            index = self.vocabulary.get(term)
            df = self.document_frequency.get(term, 0)
            # Slot 0 is never weighted; it stays zero in every vector
            if not index or df == 0:
                continue
            vector[index] = (count / max_tf) * math.log(self.document_count / df)

        return normalize(vector)

    def state_dict(self) -> Dict[str, Any]:
        return {
            "vocabulary": dict(self.vocabulary),
            "document_count": self.document_count,
            "document_frequency": dict(self.document_frequency),
        }

    def load_state_dict(self, state: Dict[str, Any]) -> None:
        """
        Restore statistics.

        The state is validated in full before anything is assigned, so a
        rejected state leaves the model untouched.

        Raises:
            ValueError: if the state is malformed or inconsistent
        """
        if not isinstance(state, dict):
            raise ValueError("model state must be a JSON object")

        raw_vocabulary = state.get("vocabulary")
        raw_frequency = state.get("document_frequency")
        document_count = state.get("document_count")

        if not isinstance(raw_vocabulary, dict) or not isinstance(raw_frequency, dict):
            raise ValueError("model state must contain vocabulary and document_frequency objects")
        if not isinstance(document_count, int) or isinstance(document_count, bool) or document_count < 0:
            raise ValueError("model state document_count must be a non-negative integer")

        vocabulary = {}
        for term, index in raw_vocabulary.items():
            if not isinstance(index, int) or isinstance(index, bool):
                raise ValueError(f"vocabulary index for {term!r} must be an integer")
            vocabulary[str(term)] = index
        if sorted(vocabulary.values()) != list(range(len(vocabulary))):
            raise ValueError("vocabulary indices must be contiguous from 0")

        document_frequency = {}
        for term, df in raw_frequency.items():
            term = str(term)
            if term not in vocabulary:
                raise ValueError(f"document frequency given for unknown term {term!r}")
            if not isinstance(df, int) or isinstance(df, bool) or not 1 <= df <= document_count:
                raise ValueError(f"document frequency for {term!r} must be between 1 and {document_count}")
            document_frequency[term] = df

        self.vocabulary = dict(sorted(vocabulary.items(), key=lambda item: item[1]))
        self.document_frequency = document_frequency
        self.document_count = document_count


class RemoteEmbedding(IEmbeddingProvider):
    """Remote embedding provider backed by an Ollama embeddings endpoint.

    Any failure of the remote call degrades to the configured fallback
    (local TF-IDF or a random unit vector); errors never reach the caller.
    """

    name = "remote"

    def __init__(self, model_name: str = "nomic-embed-text", host: str = "http://localhost:11434",
                 fallback: str = "tfidf", dimension: int = 768, max_chars: int = 8000, client=None):
        self.model_name = model_name
        self.host = host
        self.fallback = fallback if fallback in ("tfidf", "random") else "tfidf"
        self.dimension = dimension
        self.max_chars = max_chars
        self._client = client
        self.local = TfidfEmbedding()
        self._last_dimension = None

    @property
    def client(self):
        if self._client is None:
            self._client = ollama.Client(host=self.host)
        return self._client

    def embed_text(self, text: str) -> np.ndarray:
        return self._embed(text, update=True)

    def embed_query(self, text: str) -> np.ndarray:
        return self._embed(text, update=False)

    def _embed(self, text: str, update: bool) -> np.ndarray:
        try:
            response = self.client.embeddings(model=self.model_name, prompt=truncate_text(text, self.max_chars))
            embedding = response["embedding"]
            if not embedding:
                raise ValueError("remote endpoint returned an empty embedding")
            vector = normalize(np.asarray(embedding, dtype=np.float64))
            self._last_dimension = vector.shape[0]
            return vector
        except Exception as e:
            logger.log_embedding_fallback(self.name, self.fallback, str(e))
            if self.fallback == "random":
                return random_unit_vector(self.dimension)
            return self.local.embed_text(text) if update else self.local.embed_query(text)

    def get_dimension(self) -> int:
        if self._last_dimension is not None:
            return self._last_dimension
        if self.fallback == "random":
            return self.dimension
        return self.local.get_dimension()

    def state_dict(self) -> Optional[Dict[str, Any]]:
        if self.fallback == "tfidf":
            return self.local.state_dict()
        return None

    def load_state_dict(self, state: Dict[str, Any]) -> None:
        if self.fallback == "tfidf":
            self.local.load_state_dict(state)
