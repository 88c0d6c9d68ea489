"""
Cosine similarity over vectors of possibly different lengths.
"""

import numpy as np


def cosine_similarity(a, b) -> float:
    """
    Cosine similarity between two vectors, zero-padding the shorter one.

    Vectors are snapshots of a growing vocabulary, so a stored vector may be
    shorter than the query. Padding slots are zero and add nothing to the dot
    product, so only the common prefix is multiplied.

    Returns 0.0 when either vector has zero magnitude.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    common = min(a.shape[0], b.shape[0])
    dot = np.dot(a[:common], b[:common])
    return float(dot / (norm_a * norm_b))
