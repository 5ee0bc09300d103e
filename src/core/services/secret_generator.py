"""Generador de secretos (password RCON y credenciales similares).

Cada carácter sale de `secrets.choice`, que usa `randbelow` (rejection
sampling sobre el tamaño del alfabeto): sin sesgo de módulo y sin estado
compartido entre llamadas.
"""

from __future__ import annotations

import secrets
import string

from core.domain.errors import EntropyError

ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits + "!@#$%^&*()_-+={}[/?]"


def generate(length: int) -> str:
    """Devuelve un string aleatorio de exactamente `length` caracteres de `ALPHABET`."""

    if isinstance(length, bool) or not isinstance(length, int) or length < 1:
        raise ValueError(f"length must be a positive integer, got {length!r}")
    try:
        return "".join(secrets.choice(ALPHABET) for _ in range(length))
    except (OSError, NotImplementedError) as exc:
        raise EntropyError(f"system randomness source unavailable: {exc}") from exc
