"""did:key key provider and DID document resolution (Ed25519 only)."""

import logging

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from ldsign.constants import (
    DID_V1_CONTEXT_URL,
    ED25519_VERIFICATION_KEY_2020,
    SECURITY_CONTEXT_ED25519_2020_URL,
)
from ldsign.keys import (
    Ed25519KeyPair,
    ed25519_keypair_from_seed,
    multibase_to_public_key,
    seed_from_secret,
)

LOGGER = logging.getLogger(__name__)

DID_KEY_PREFIX = "did:key:"

# did:key documents bind the single key to every relationship
VERIFICATION_RELATIONSHIPS = (
    "authentication",
    "assertionMethod",
    "capabilityInvocation",
    "capabilityDelegation",
)


class DIDKeyError(Exception):
    """Raised when a did:key identifier cannot be parsed or resolved."""


class DidKeyProvider:
    """Hands out the verification methods of one did:key DID."""

    def __init__(self, private_key: Ed25519PrivateKey):
        self._key = Ed25519KeyPair.from_private_key(private_key)

    @classmethod
    def from_seed(cls, seed: bytes) -> "DidKeyProvider":
        private_key, _ = ed25519_keypair_from_seed(seed)
        return cls(private_key)

    @classmethod
    def from_secret(cls, secret: str) -> "DidKeyProvider":
        """Derive the DID deterministically from an opaque secret."""
        if not secret:
            raise ValueError("A non-empty secret is required")
        return cls.from_seed(seed_from_secret(secret))

    @property
    def did(self) -> str:
        return self._key.controller

    def method_for(self, *, purpose: str) -> Ed25519KeyPair:
        """Return the key pair bound to a verification relationship."""
        if purpose not in VERIFICATION_RELATIONSHIPS:
            raise ValueError(
                f"Unsupported purpose {purpose!r}; expected one of "
                f"{', '.join(VERIFICATION_RELATIONSHIPS)}"
            )
        LOGGER.debug("Resolved %s key %s", purpose, self._key.id)
        return self._key

    def document(self) -> dict:
        return did_key_document(self.did)


def parse_did_key(did_url: str) -> tuple[str, str, str | None]:
    """Split a did:key URL into (did, fingerprint, fragment)."""
    if not did_url.startswith(DID_KEY_PREFIX):
        raise DIDKeyError(f"Not a did:key identifier: {did_url!r}")
    did, _, fragment = did_url.partition("#")
    fingerprint = did[len(DID_KEY_PREFIX) :]
    if not fingerprint or ":" in fingerprint:
        raise DIDKeyError(f"Malformed did:key identifier: {did_url!r}")
    return did, fingerprint, fragment or None


def did_key_document(did: str) -> dict:
    """Build the DID document for an Ed25519 did:key DID."""
    did, fingerprint, fragment = parse_did_key(did)
    if fragment is not None:
        raise DIDKeyError(f"Expected a DID without fragment, got {did}#{fragment}")

    try:
        multibase_to_public_key(fingerprint)
    except ValueError as e:
        raise DIDKeyError(f"Cannot decode key from {did}: {e}") from e

    vm_id = f"{did}#{fingerprint}"
    document = {
        "@context": [DID_V1_CONTEXT_URL, SECURITY_CONTEXT_ED25519_2020_URL],
        "id": did,
        "verificationMethod": [
            {
                "id": vm_id,
                "type": ED25519_VERIFICATION_KEY_2020,
                "controller": did,
                "publicKeyMultibase": fingerprint,
            }
        ],
    }
    for relationship in VERIFICATION_RELATIONSHIPS:
        document[relationship] = [vm_id]
    return document


def resolve_did_key(did_url: str) -> dict:
    """Resolve a did:key DID to its document, or a DID URL to its key.

    Raises:
        DIDKeyError: If the identifier is malformed or its key cannot be decoded.
    """
    did, _, fragment = parse_did_key(did_url)
    document = did_key_document(did)
    if fragment is None:
        return document

    for method in document["verificationMethod"]:
        if method["id"] == did_url:
            return {"@context": SECURITY_CONTEXT_ED25519_2020_URL, **method}

    raise DIDKeyError(f"Verification method {did_url!r} not found in {did}")
