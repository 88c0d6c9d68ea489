"""
Local vector memory engine.
TF-IDF embeddings, file-backed vector storage and similarity search without network dependencies.
"""

__version__ = "1.0.0"
