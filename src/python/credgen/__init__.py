"""Fixture generator - valid and deliberately corrupted signed credentials.

This package provides tools for:
- Issuing a correctly signed Ed25519Signature2020 credential
- Corrupting one signing stage at a time (codec, digest, canonize, signer)
- Writing the resulting fixtures for verifier test suites

Usage:
    python -m credgen.generator --help
"""

from credgen.corruptions import (
    FIXTURE_NAMES,
    CorruptionError,
    Fixture,
    corrupt_verification_method,
)
from credgen.generator import ConfigurationError, generate

__all__ = [
    "FIXTURE_NAMES",
    "Fixture",
    "CorruptionError",
    "ConfigurationError",
    "corrupt_verification_method",
    "generate",
]
