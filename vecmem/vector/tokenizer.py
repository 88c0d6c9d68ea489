"""
Text tokenization for the TF-IDF embedder.
"""

import re
from typing import List

# Anything that is not a letter or digit separates terms ("_" counts as a separator)
_NON_ALNUM = re.compile(r"[\W_]+")

MIN_TERM_LENGTH = 3


def tokenize(text: str) -> List[str]:
    """
    Split text into normalized terms.

    Lowercases the input, turns every non-alphanumeric character into
    whitespace and drops terms shorter than MIN_TERM_LENGTH characters.

    Args:
        text: Raw text (chat message, source file, query)

    Returns:
        List of terms in order of appearance, possibly empty
    """
    if not text:
        return []
    cleaned = _NON_ALNUM.sub(" ", text.lower())
    return [term for term in cleaned.split() if len(term) >= MIN_TERM_LENGTH]
