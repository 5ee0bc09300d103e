import pytest

from core.domain.errors import EntropyError
from core.services import secret_generator
from core.services.secret_generator import ALPHABET, generate


def test_alphabet_has_at_least_80_distinct_symbols():
    assert len(ALPHABET) >= 80
    assert len(set(ALPHABET)) == len(ALPHABET)


@pytest.mark.parametrize("length", [1, 16, 64, 257])
def test_generate_returns_exact_length_from_alphabet(length):
    value = generate(length)
    assert len(value) == length
    assert set(value) <= set(ALPHABET)


def test_no_collisions_across_many_calls():
    values = {generate(16) for _ in range(10_000)}
    assert len(values) == 10_000


@pytest.mark.parametrize("length", [0, -3, True, 2.5, "8"])
def test_invalid_lengths_are_rejected(length):
    with pytest.raises(ValueError):
        generate(length)


def test_randomness_failure_is_reported_as_entropy_error(monkeypatch):
    def _broken(_seq):
        raise OSError("getrandom failed")

    monkeypatch.setattr(secret_generator.secrets, "choice", _broken)
    with pytest.raises(EntropyError):
        generate(16)
