"""Digest selection for the signing suite's digest hook."""

import hashlib
from typing import Callable

DEFAULT_DIGEST_ALGORITHM = "sha256"
SUPPORTED_DIGEST_ALGORITHMS = ("sha256", "sha384", "sha512")

Digest = Callable[[str | bytes], bytes]


def hash_digest(algorithm: str = DEFAULT_DIGEST_ALGORITHM) -> Digest:
    """Return a function hashing a canonical form with ``algorithm``.

    Strings are UTF-8 encoded before hashing.
    """
    algorithm = algorithm.lower()
    if algorithm not in SUPPORTED_DIGEST_ALGORITHMS:
        raise ValueError(
            f"Unsupported digest algorithm {algorithm!r}; expected one of "
            f"{', '.join(SUPPORTED_DIGEST_ALGORITHMS)}"
        )

    def digest(data: str | bytes) -> bytes:
        if isinstance(data, str):
            data = data.encode("utf-8")
        return hashlib.new(algorithm, data).digest()

    digest.algorithm = algorithm
    return digest
