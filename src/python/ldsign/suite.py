"""Ed25519Signature2020 Linked Data signature suite with pluggable stages.

A suite runs ``canonize -> digest -> sign`` for one document. Each stage is a
hook chosen when the suite is constructed:

- ``canonize(document, *, document_loader) -> str | bytes`` (async)
- ``digest(canonical_form) -> bytes``
- ``sign(*, verify_data, proof) -> proof`` (async, fills ``proofValue``)

The defaults are URDNA2015, SHA-256 and Ed25519 over the suite's key. A suite
may substitute at most one stage, so every non-default suite differs from the
default in exactly one place. Hooks cannot be swapped after construction.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, Callable

import base58
from ldsign.canonize import urdna2015
from ldsign.constants import ED25519_VERIFICATION_KEY_2020, PROOF_VALUE_FIELDS
from ldsign.digest import Digest, hash_digest
from ldsign.keys import MULTIBASE_BASE58BTC, Ed25519KeyPair, multibase_to_public_key

LOGGER = logging.getLogger(__name__)

Canonize = Callable[..., Awaitable[str | bytes]]
Signer = Callable[..., Awaitable[dict]]


class SuiteVariant(Enum):
    """Which pipeline stage, if any, a suite substitutes."""

    DEFAULT = "default"
    CANONIZE = "canonize"
    DIGEST = "digest"
    SIGNER = "signer"


class SigningError(Exception):
    """Raised when the suite cannot produce a signature."""


class Ed25519Signature2020:
    """Ed25519Signature2020 suite."""

    signature_type = "Ed25519Signature2020"

    def __init__(
        self,
        key: Ed25519KeyPair | None = None,
        *,
        canonize: Canonize | None = None,
        digest: Digest | None = None,
        sign: Signer | None = None,
        date: datetime | str | None = None,
        proof_purpose: str = "assertionMethod",
    ):
        """Create a suite.

        Args:
            key: Key pair whose ID becomes the proof's verificationMethod.
                Verification-only suites may omit it.
            canonize: Replacement canonicalization hook.
            digest: Replacement digest hook (see :func:`ldsign.digest.hash_digest`).
            sign: Replacement signing hook.
            date: Fixed ``created`` timestamp. Default: now.
            proof_purpose: Value of ``proofPurpose`` on created proofs.
        """
        substituted = [
            variant
            for variant, hook in (
                (SuiteVariant.CANONIZE, canonize),
                (SuiteVariant.DIGEST, digest),
                (SuiteVariant.SIGNER, sign),
            )
            if hook is not None
        ]
        if len(substituted) > 1:
            names = ", ".join(v.value for v in substituted)
            raise ValueError(f"A suite may substitute at most one stage, got: {names}")

        self.variant = substituted[0] if substituted else SuiteVariant.DEFAULT
        self.key = key
        self.date = date
        self.proof_purpose = proof_purpose
        self._canonize = canonize or urdna2015
        self._digest = digest or hash_digest()
        self._sign = sign or self._sign_ed25519

    def __repr__(self):
        key_id = self.key.id if self.key else None
        return f"<{self.signature_type} variant={self.variant.value} key={key_id}>"

    @property
    def verification_method(self) -> str:
        if self.key is None:
            raise SigningError("Suite has no key to derive a verificationMethod")
        return self.key.id

    # -----------------------------------------------------------------------
    # Pipeline stages
    # -----------------------------------------------------------------------

    async def canonize(self, document: dict, *, document_loader) -> str | bytes:
        return await self._canonize(document, document_loader=document_loader)

    def digest(self, canonical_form: str | bytes) -> bytes:
        return self._digest(canonical_form)

    async def sign(self, *, verify_data: bytes, proof: dict) -> dict:
        return await self._sign(verify_data=verify_data, proof=proof)

    async def _sign_ed25519(self, *, verify_data: bytes, proof: dict) -> dict:
        if self.key is None or not self.key.has_private_key:
            raise SigningError("Suite key has no private key to sign with")
        signature = self.key.sign(verify_data)
        proof["proofValue"] = MULTIBASE_BASE58BTC + base58.b58encode(signature).decode()
        return proof

    # -----------------------------------------------------------------------
    # Proof creation
    # -----------------------------------------------------------------------

    async def create_verify_data(
        self, *, document: dict, proof: dict, document_loader
    ) -> bytes:
        """Digest of the canonical proof options followed by the document's."""
        proof_options = {k: v for k, v in proof.items() if k not in PROOF_VALUE_FIELDS}
        proof_options["@context"] = document["@context"]
        unsigned = {k: v for k, v in document.items() if k != "proof"}

        c14n_proof = await self.canonize(proof_options, document_loader=document_loader)
        c14n_doc = await self.canonize(unsigned, document_loader=document_loader)

        return self.digest(c14n_proof) + self.digest(c14n_doc)

    async def create_proof(self, *, document: dict, document_loader) -> dict:
        """Build the proof skeleton, derive verify data, and sign it."""
        proof = {
            "type": self.signature_type,
            "created": w3c_date(self.date),
            "verificationMethod": self.verification_method,
            "proofPurpose": self.proof_purpose,
        }
        verify_data = await self.create_verify_data(
            document=document, proof=proof, document_loader=document_loader
        )
        LOGGER.debug("Signing %d bytes of verify data with %r", len(verify_data), self)
        return await self.sign(verify_data=verify_data, proof=proof)

    # -----------------------------------------------------------------------
    # Verification
    # -----------------------------------------------------------------------

    def resolve_verification_method(self, *, proof: dict, document_loader) -> Ed25519KeyPair:
        """Load the proof's verification method and decode its public key.

        Raises:
            ValueError: If the method is missing, of the wrong type, or undecodable.
            ldsign.document_loader.DocumentLoaderError: If it cannot be loaded.
        """
        verification_method = proof.get("verificationMethod")
        if isinstance(verification_method, dict):
            verification_method = verification_method.get("id")
        if not verification_method:
            raise ValueError('No "verificationMethod" found in proof')

        method = document_loader(verification_method, {})["document"]
        if method.get("id") != verification_method:
            raise ValueError(f"Verification method {verification_method} not found")
        if method.get("type") != ED25519_VERIFICATION_KEY_2020:
            raise ValueError(
                f"Unsupported verification method type {method.get('type')!r}"
            )

        if "publicKeyMultibase" not in method:
            raise ValueError(
                f"Verification method {verification_method} has no publicKeyMultibase"
            )
        public_key = multibase_to_public_key(method["publicKeyMultibase"])
        return Ed25519KeyPair(public_key=public_key)

    def verify_signature(
        self, *, verify_data: bytes, key: Ed25519KeyPair, proof: dict
    ) -> bool:
        """Check ``proofValue`` as a base58btc Ed25519 signature over verify data."""
        proof_value = proof.get("proofValue")
        if not isinstance(proof_value, str) or not proof_value.startswith(
            MULTIBASE_BASE58BTC
        ):
            LOGGER.debug("proofValue is not base58btc multibase: %.12r", proof_value)
            return False
        try:
            signature = base58.b58decode(proof_value[1:])
        except ValueError:
            return False
        return key.verify(verify_data, signature)

    async def verify_proof(self, *, document: dict, proof: dict, document_loader) -> bool:
        """Verify ``proof`` over ``document`` using this suite's stages."""
        key = self.resolve_verification_method(
            proof=proof, document_loader=document_loader
        )
        verify_data = await self.create_verify_data(
            document=document, proof=proof, document_loader=document_loader
        )
        return self.verify_signature(verify_data=verify_data, key=key, proof=proof)


def w3c_date(date: datetime | str | None = None) -> str:
    """Format a timestamp as an XML Schema dateTime without fractional seconds."""
    if isinstance(date, str):
        return date
    if date is None:
        date = datetime.now(timezone.utc)
    elif date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)
    return date.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
