"""
Tokenizer tests.
"""

import pytest
from vecmem.vector.tokenizer import tokenize


def test_lowercases_and_strips_punctuation():
    """Punctuation separates terms and case is folded."""
    assert tokenize("Hello, World! The END.") == ["hello", "world", "the", "end"]


def test_drops_short_terms():
    """Terms of two characters or fewer are discarded."""
    assert tokenize("a an the cat is on it") == ["the", "cat"]


def test_underscore_and_symbols_split_terms():
    assert tokenize("foo_bar-baz/qux.py") == ["foo", "bar", "baz", "qux"]


def test_digits_are_kept():
    assert tokenize("abc123 x1 2024") == ["abc123", "2024"]


def test_unicode_letters_are_kept():
    assert tokenize("Café naïve") == ["café", "naïve"]


def test_repeated_terms_preserved_in_order():
    assert tokenize("cat dog cat") == ["cat", "dog", "cat"]


@pytest.mark.parametrize("text", ["", "   ", "!!! ??", "a b c", None])
def test_degenerate_input_yields_no_terms(text):
    """Empty or punctuation-only input never fails."""
    assert tokenize(text) == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
