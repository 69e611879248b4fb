import hashlib

import pytest

from ldsign.digest import DEFAULT_DIGEST_ALGORITHM, hash_digest


def test_default_is_sha256():
    digest = hash_digest()
    assert DEFAULT_DIGEST_ALGORITHM == "sha256"
    assert digest.algorithm == "sha256"
    assert digest(b"abc") == hashlib.sha256(b"abc").digest()


@pytest.mark.parametrize(
    "algorithm,size", [("sha256", 32), ("sha384", 48), ("sha512", 64), ("SHA512", 64)]
)
def test_digest_sizes(algorithm, size):
    assert len(hash_digest(algorithm)(b"data")) == size


def test_strings_are_utf8_encoded():
    digest = hash_digest("sha512")
    assert digest("café") == hashlib.sha512("café".encode("utf-8")).digest()


def test_algorithms_disagree():
    assert hash_digest("sha256")(b"data") != hash_digest("sha512")(b"data")[:32]


def test_unknown_algorithm():
    with pytest.raises(ValueError, match="md5"):
        hash_digest("md5")
