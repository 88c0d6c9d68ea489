"""
Vector memory layer: tokenizer, embedding providers, similarity and file-backed storage.
"""

# Package initialization for vector module
from .index import IVectorStore
from .file_store import FileVectorStore
from .types import VectorRecord, QueryResult
from .schemas import EntryMetadata
from .similarity import cosine_similarity
from .tokenizer import tokenize
from .embeddings import IEmbeddingProvider, TfidfEmbedding, RemoteEmbedding

__all__ = [
    'IVectorStore',
    'FileVectorStore',
    'VectorRecord',
    'QueryResult',
    'EntryMetadata',
    'cosine_similarity',
    'tokenize',
    'IEmbeddingProvider',
    'TfidfEmbedding',
    'RemoteEmbedding'
]
