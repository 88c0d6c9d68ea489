"""
Vector memory configuration.
All settings come from environment variables; getters re-read the environment where behavior must stay dynamic.
"""

import os
from pathlib import Path
from typing import List

# Storage
STORE_PATH = os.getenv("VECMEM_STORE_PATH", "./data/vector-store")

# Embedding provider configuration
EMBED_PROVIDER = os.getenv("VECMEM_EMBED_PROVIDER", "tfidf")  # tfidf|remote
QUERY_MUTATES_MODEL = os.getenv("VECMEM_QUERY_MUTATES_MODEL", "true").lower() == "true"

# Optional remote embedding path (Ollama embeddings endpoint)
REMOTE_MODEL = os.getenv("VECMEM_REMOTE_MODEL", "nomic-embed-text")
REMOTE_HOST = os.getenv("VECMEM_REMOTE_HOST", "http://localhost:11434")
REMOTE_FALLBACK = os.getenv("VECMEM_REMOTE_FALLBACK", "tfidf")  # tfidf|random
REMOTE_DIMENSION = int(os.getenv("VECMEM_REMOTE_DIMENSION", "768"))
MAX_EMBED_CHARS = int(os.getenv("VECMEM_MAX_EMBED_CHARS", "8000"))

# Search
DEFAULT_LIMIT = int(os.getenv("VECMEM_DEFAULT_LIMIT", "5"))

# Project scanner
SCAN_EXTENSIONS = os.getenv("VECMEM_SCAN_EXTENSIONS", "ts,js,json,md,py")
MAX_FILE_BYTES = int(os.getenv("VECMEM_MAX_FILE_BYTES", "1000000"))

VALID_PROVIDERS = ["tfidf", "remote"]
VALID_FALLBACKS = ["tfidf", "random"]

VERSION = "1.0.0"


def get_store_path() -> Path:
    """Get the store base directory."""
    return Path(os.getenv("VECMEM_STORE_PATH", STORE_PATH))


def query_mutates_model() -> bool:
    """Check whether query embedding updates the TF-IDF statistics."""
    return os.getenv("VECMEM_QUERY_MUTATES_MODEL", "true").lower() == "true"


def get_scan_extensions() -> List[str]:
    """Get scanner file extensions, without leading dots."""
    raw = os.getenv("VECMEM_SCAN_EXTENSIONS", SCAN_EXTENSIONS)
    return [ext.strip().lstrip(".").lower() for ext in raw.split(",") if ext.strip()]


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def get_embedding_provider():
    """Get configured embedding provider implementation."""
    provider = os.getenv("VECMEM_EMBED_PROVIDER", EMBED_PROVIDER)

    if provider == "remote":
        from vecmem.vector.embeddings import RemoteEmbedding
        return RemoteEmbedding(
            model_name=os.getenv("VECMEM_REMOTE_MODEL", REMOTE_MODEL),
            host=os.getenv("VECMEM_REMOTE_HOST", REMOTE_HOST),
            fallback=os.getenv("VECMEM_REMOTE_FALLBACK", REMOTE_FALLBACK),
            dimension=REMOTE_DIMENSION,
            max_chars=MAX_EMBED_CHARS,
        )
    else:
        # Unknown providers fall back to the local model
        from vecmem.vector.embeddings import TfidfEmbedding
        return TfidfEmbedding()


def validate_config():
    """Validate configuration and return any issues."""
    issues = []

    provider = os.getenv("VECMEM_EMBED_PROVIDER", EMBED_PROVIDER)
    if provider not in VALID_PROVIDERS:
        issues.append(f"Invalid VECMEM_EMBED_PROVIDER: {provider}")

    fallback = os.getenv("VECMEM_REMOTE_FALLBACK", REMOTE_FALLBACK)
    if fallback not in VALID_FALLBACKS:
        issues.append(f"Invalid VECMEM_REMOTE_FALLBACK: {fallback}")

    if DEFAULT_LIMIT < 1:
        issues.append("VECMEM_DEFAULT_LIMIT must be >= 1")

    if REMOTE_DIMENSION < 1:
        issues.append("VECMEM_REMOTE_DIMENSION must be >= 1")

    if MAX_EMBED_CHARS < 1:
        issues.append("VECMEM_MAX_EMBED_CHARS must be >= 1")

    if MAX_FILE_BYTES < 1:
        issues.append("VECMEM_MAX_FILE_BYTES must be >= 1")

    return issues
