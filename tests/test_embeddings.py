"""
TF-IDF embedding provider tests.
"""

import math
import numpy as np
import pytest

from vecmem.vector.embeddings import (
    IEmbeddingProvider,
    TfidfEmbedding,
    normalize,
    random_unit_vector,
    truncate_text,
)
from vecmem.vector.similarity import cosine_similarity


@pytest.fixture
def embedder():
    return TfidfEmbedding()


def test_embedding_interface(embedder):
    """Test that the TF-IDF provider implements the interface."""
    assert isinstance(embedder, IEmbeddingProvider)
    assert embedder.get_dimension() == 0


def test_vocabulary_assigned_in_order_of_first_appearance(embedder):
    embedder.embed_text("alpha beta alpha")
    embedder.embed_text("beta gamma")

    assert embedder.vocabulary == {"alpha": 0, "beta": 1, "gamma": 2}
    assert embedder.get_dimension() == 3


def test_document_statistics_count_distinct_terms_once(embedder):
    embedder.embed_text("alpha alpha alpha beta")
    embedder.embed_text("alpha gamma")

    assert embedder.document_count == 2
    assert embedder.document_frequency == {"alpha": 2, "beta": 1, "gamma": 1}


def test_first_document_has_zero_idf(embedder):
    """With N=1 and df=1 every weight is ln(1) = 0, so the vector is all zeros."""
    vector = embedder.embed_text("alpha beta")

    assert len(vector) == 2
    assert np.all(vector == 0.0)


def test_first_vocabulary_slot_is_never_weighted(embedder):
    embedder.embed_text("alpha")
    embedder.embed_text("beta")
    vector = embedder.embed_text("alpha gamma")

    # alpha holds index 0: df=2, N=3 would give a nonzero idf, but slot 0 stays empty
    assert embedder.vocabulary["alpha"] == 0
    assert vector[0] == 0.0
    assert np.allclose(vector, [0.0, 0.0, 1.0])


def test_first_vocabulary_slot_is_empty_for_queries(embedder):
    embedder.embed_text("alpha beta")
    embedder.embed_text("gamma delta")

    vector = embedder.embed_query("alpha gamma")

    assert vector[0] == 0.0
    assert vector[2] > 0.0


def test_idf_uses_updated_counts(embedder):
    """N and df are incremented before weighting, so a new term gets ln(N)."""
    embedder.embed_text("alpha beta")
    vector = embedder.embed_text("beta gamma")

    # beta: df=2, N=2 -> ln(1) = 0; gamma: df=1, N=2 -> ln(2)
    assert np.allclose(vector, [0.0, 0.0, 1.0])


def test_term_frequency_is_max_normalized(embedder):
    embedder.embed_text("alpha beta")
    vector = embedder.embed_text("gamma gamma delta")

    # gamma tf=1.0, delta tf=0.5, both idf ln(2)
    assert vector[2] / vector[3] == pytest.approx(2.0)
    expected = normalize(np.array([0.0, 0.0, math.log(2), 0.5 * math.log(2)]))
    assert np.allclose(vector, expected)


def test_vectors_are_unit_length(embedder):
    embedder.embed_text("the cat sat on the mat")
    embedder.embed_text("the dog chased the cat")
    vector = embedder.embed_text("rockets launch satellites to orbit")

    assert np.linalg.norm(vector) == pytest.approx(1.0)


def test_empty_text_yields_zero_vector_and_counts_as_document(embedder):
    embedder.embed_text("alpha beta")
    vector = embedder.embed_text("!! a ?")

    assert len(vector) == 2
    assert np.linalg.norm(vector) == 0.0
    assert embedder.document_count == 2


def test_earlier_vectors_are_not_lengthened(embedder):
    """Vectors are snapshots of the vocabulary at embedding time."""
    embedder.embed_text("alpha beta")
    first = embedder.embed_text("beta gamma")
    second = embedder.embed_text("delta epsilon zeta")

    assert len(first) == 3
    assert len(second) == 6


def test_self_similarity(embedder):
    """A vector compared with itself scores 1 (embed once, compare to itself)."""
    embedder.embed_text("the quick brown fox")
    vector = embedder.embed_text("lazy dogs sleep all afternoon")

    assert cosine_similarity(vector, vector) == pytest.approx(1.0)


def test_embed_query_does_not_mutate_model(embedder):
    embedder.embed_text("alpha beta")
    embedder.embed_text("beta gamma")
    before = embedder.state_dict()

    vector = embedder.embed_query("gamma unseen")

    assert embedder.state_dict() == before
    assert len(vector) == 3
    assert np.allclose(vector, [0.0, 0.0, 1.0])


def test_embed_query_on_empty_model(embedder):
    vector = embedder.embed_query("anything at all")
    assert len(vector) == 0


def test_embed_text_mutates_model_for_queries(embedder):
    embedder.embed_text("alpha beta")
    embedder.embed_text("something alpha")

    assert embedder.document_count == 2
    assert embedder.document_frequency["alpha"] == 2


def test_state_round_trip(embedder):
    embedder.embed_text("alpha beta")
    embedder.embed_text("beta gamma gamma")

    restored = TfidfEmbedding()
    restored.load_state_dict(embedder.state_dict())

    assert restored.vocabulary == embedder.vocabulary
    assert restored.document_count == 2
    assert np.allclose(restored.embed_text("gamma delta"), embedder.embed_text("gamma delta"))


@pytest.mark.parametrize("state", [
    {},
    {"vocabulary": [], "document_count": 1, "document_frequency": {}},
    {"vocabulary": {"alpha": 0}, "document_count": -1, "document_frequency": {}},
    {"vocabulary": {"alpha": 1}, "document_count": 1, "document_frequency": {"alpha": 1}},
])
def test_malformed_state_rejected(embedder, state):
    with pytest.raises(ValueError):
        embedder.load_state_dict(state)


@pytest.mark.parametrize("state", [
    {"vocabulary": {"alpha": 0}, "document_count": 3, "document_frequency": {"alpha": "x"}},
    {"vocabulary": {"alpha": 0}, "document_count": 3, "document_frequency": {"beta": 1}},
    {"vocabulary": {"alpha": 0}, "document_count": 1, "document_frequency": {"alpha": 2}},
    {"vocabulary": {"alpha": 0}, "document_count": 1, "document_frequency": {"alpha": 0}},
    {"vocabulary": {"alpha": "0"}, "document_count": 1, "document_frequency": {"alpha": 1}},
])
def test_rejected_state_leaves_model_empty(embedder, state):
    with pytest.raises(ValueError):
        embedder.load_state_dict(state)

    assert embedder.vocabulary == {}
    assert embedder.document_frequency == {}
    assert embedder.document_count == 0


def test_rejected_state_keeps_existing_statistics(embedder):
    embedder.embed_text("alpha beta")
    before = embedder.state_dict()

    with pytest.raises(ValueError):
        embedder.load_state_dict({"vocabulary": {"gamma": 0}, "document_count": 2,
                                  "document_frequency": {"gamma": 5}})

    assert embedder.state_dict() == before


def test_truncate_text_keeps_both_ends():
    assert truncate_text("short", 10) == "short"
    assert truncate_text("abcdefghij", 4) == "ab...ij"


def test_random_unit_vector():
    vector = random_unit_vector(32, rng=np.random.default_rng(7))
    assert len(vector) == 32
    assert np.linalg.norm(vector) == pytest.approx(1.0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
