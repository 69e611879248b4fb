"""Producers for the valid credential fixture and its four corruptions.

Each corruption breaks exactly one stage of the signing pipeline:

  - incorrectCodec.json  - verificationMethod key segment loses its multibase tag
  - digestSha512.json    - verify data digested with SHA-512 instead of SHA-256
  - canonizeJCS.json     - document canonized as JSON text instead of URDNA2015
  - rsaSigned.json       - proofValue signed by an unrelated RSA key

Every producer works on its own deep copy of the template and its own suite.
"""

import asyncio
import base64
import copy
import logging
from dataclasses import dataclass
from pathlib import Path

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from ldsign.canonize import jcs
from ldsign.digest import hash_digest
from ldsign.issuer import issue_credential
from ldsign.keys import MULTIBASE_BASE58BTC, Ed25519KeyPair, generate_rsa_keypair
from ldsign.suite import Ed25519Signature2020

LOGGER = logging.getLogger(__name__)

VALID_VC = "validVC.json"
INCORRECT_CODEC = "incorrectCodec.json"
DIGEST_SHA512 = "digestSha512.json"
CANONIZE_JCS = "canonizeJCS.json"
RSA_SIGNED = "rsaSigned.json"

FIXTURE_NAMES = (VALID_VC, INCORRECT_CODEC, DIGEST_SHA512, CANONIZE_JCS, RSA_SIGNED)


class CorruptionError(Exception):
    """Raised when a corruption cannot be applied as intended."""


@dataclass(frozen=True)
class Fixture:
    """A credential and the file it is written to."""

    path: Path
    data: dict


async def valid_vc(
    key: Ed25519KeyPair, *, template: dict, document_loader, output_dir: Path
) -> Fixture:
    suite = Ed25519Signature2020(key)
    signed = await issue_credential(
        template, suite=suite, document_loader=document_loader
    )
    return Fixture(path=Path(output_dir) / VALID_VC, data=signed)


def corrupt_verification_method(verification_method: str) -> str:
    """Drop the multibase tag from the key segment of a did:key method.

    ``did:key:z6Mk...#z6Mk...`` becomes ``did:key:6Mk...#z6Mk...``.

    Raises:
        CorruptionError: If the identifier is not shaped like a did:key method.
    """
    parts = verification_method.split(":")
    if len(parts) < 3 or parts[:2] != ["did", "key"]:
        raise CorruptionError(
            f"Expected a did:key verification method, got {verification_method!r}"
        )
    last = parts.pop()
    if len(last) < 2 or not last.startswith(MULTIBASE_BASE58BTC):
        raise CorruptionError(
            f"Key segment {last!r} does not carry a base58btc multibase tag"
        )
    parts.append(last[1:])
    return ":".join(parts)


def incorrect_codec(credential: dict, *, output_dir: Path) -> Fixture:
    """Re-encode the proof's verificationMethod of an already signed credential."""
    copied = copy.deepcopy(credential)
    proof = copied.get("proof")
    if not isinstance(proof, dict) or "verificationMethod" not in proof:
        raise CorruptionError("Credential has no proof.verificationMethod to corrupt")
    proof["verificationMethod"] = corrupt_verification_method(
        proof["verificationMethod"]
    )
    return Fixture(path=Path(output_dir) / INCORRECT_CODEC, data=copied)


async def incorrect_digest(
    key: Ed25519KeyPair, *, template: dict, document_loader, output_dir: Path
) -> Fixture:
    suite = Ed25519Signature2020(key, digest=hash_digest("sha512"))
    signed = await issue_credential(
        template, suite=suite, document_loader=document_loader
    )
    return Fixture(path=Path(output_dir) / DIGEST_SHA512, data=signed)


async def incorrect_canonize(
    key: Ed25519KeyPair, *, template: dict, document_loader, output_dir: Path
) -> Fixture:
    suite = Ed25519Signature2020(key, canonize=jcs)
    signed = await issue_credential(
        template, suite=suite, document_loader=document_loader
    )
    return Fixture(path=Path(output_dir) / CANONIZE_JCS, data=signed)


def rsa_signer(private_key: rsa.RSAPrivateKey):
    """Build a sign hook producing RSA PKCS#1 v1.5 / SHA-256 signatures."""

    async def sign(*, verify_data: bytes, proof: dict) -> dict:
        signature = private_key.sign(verify_data, padding.PKCS1v15(), hashes.SHA256())
        # Replace the proofValue with a signature generated from another key
        proof["proofValue"] = base64.b64encode(signature).decode()
        return proof

    return sign


async def incorrect_signer(
    key: Ed25519KeyPair,
    *,
    template: dict,
    document_loader,
    output_dir: Path,
    rsa_key: rsa.RSAPrivateKey | None = None,
) -> Fixture:
    """Sign with an unrelated RSA key while declaring ``key`` as the method."""
    if rsa_key is None:
        LOGGER.debug("Generating RSA key for %s", RSA_SIGNED)
        rsa_key, _ = await asyncio.to_thread(generate_rsa_keypair)

    suite = Ed25519Signature2020(key, sign=rsa_signer(rsa_key))
    signed = await issue_credential(
        template, suite=suite, document_loader=document_loader
    )
    return Fixture(path=Path(output_dir) / RSA_SIGNED, data=signed)
