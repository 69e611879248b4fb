"""ldsign - Linked Data signing for W3C Verifiable Credentials.

This package provides the pieces of an Ed25519Signature2020 signing pipeline:
- Ed25519 keys, multibase encoding and did:key resolution
- Digest selection and canonicalization strategies (URDNA2015, JCS)
- An offline JSON-LD document loader with bundled contexts
- A signing suite with pluggable canonicalize/digest/sign stages
- Credential issuance and stage-aware verification

Usage:
    from ldsign import keys, suite, issuer, verifier
    from ldsign.did_key import DidKeyProvider
    from ldsign.document_loader import StaticDocumentLoader
"""


# Use lazy imports to avoid RuntimeWarning when running modules directly
def __getattr__(name):
    """Lazy import to avoid import cycle when running modules directly."""
    if name in (
        "Ed25519KeyPair",
        "generate_ed25519_keypair",
        "generate_rsa_keypair",
        "public_key_to_did_key",
        "public_key_to_multibase",
    ):
        from ldsign import keys

        return getattr(keys, name)
    elif name in ("DidKeyProvider", "DIDKeyError", "resolve_did_key"):
        from ldsign import did_key

        return getattr(did_key, name)
    elif name in ("StaticDocumentLoader", "DocumentLoaderError"):
        from ldsign import document_loader

        return getattr(document_loader, name)
    elif name == "hash_digest":
        from ldsign import digest

        return digest.hash_digest
    elif name in ("Ed25519Signature2020", "SuiteVariant", "SigningError"):
        from ldsign import suite

        return getattr(suite, name)
    elif name in ("issue_credential", "IssuanceError"):
        from ldsign import issuer

        return getattr(issuer, name)
    elif name in (
        "verify_credential",
        "VerificationError",
        "MalformedProofError",
        "KeyResolutionError",
        "CanonicalizationError",
        "SignatureMismatchError",
    ):
        from ldsign import verifier

        return getattr(verifier, name)
    raise AttributeError(f"module 'ldsign' has no attribute {name!r}")


__all__ = [
    # Keys
    "Ed25519KeyPair",
    "generate_ed25519_keypair",
    "generate_rsa_keypair",
    "public_key_to_did_key",
    "public_key_to_multibase",
    # did:key
    "DidKeyProvider",
    "DIDKeyError",
    "resolve_did_key",
    # Document loading
    "StaticDocumentLoader",
    "DocumentLoaderError",
    # Suite
    "hash_digest",
    "Ed25519Signature2020",
    "SuiteVariant",
    "SigningError",
    # Issuer
    "issue_credential",
    "IssuanceError",
    # Verifier
    "verify_credential",
    "VerificationError",
    "MalformedProofError",
    "KeyResolutionError",
    "CanonicalizationError",
    "SignatureMismatchError",
]
