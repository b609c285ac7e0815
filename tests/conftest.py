import pytest


def _int_tokens(text):
    if isinstance(text, bytes):
        text = text.decode()
    return [int(token) for token in text.split()]


@pytest.fixture
def int_tokenizer():
    """Tokenizer reading whitespace separated integers, for exact token control."""
    return _int_tokens
