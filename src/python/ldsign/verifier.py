"""Verify Ed25519Signature2020 proofs on Verifiable Credentials.

Failures are reported as a ``VerificationError`` subclass naming the stage
that failed, so a fixture's failure cause can be asserted precisely.

CLI Usage:
    python -m ldsign.verifier --help
    python -m ldsign.verifier credentials/*.json
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from ldsign.constants import SECURITY_CONTEXT_ED25519_2020_URL
from ldsign.document_loader import DocumentLoaderError, StaticDocumentLoader
from ldsign.suite import Ed25519Signature2020
from pyld.jsonld import JsonLdError


class VerificationError(Exception):
    """Raised when a credential proof fails verification."""


class MalformedProofError(VerificationError):
    """The credential or its proof is missing required fields."""


class KeyResolutionError(VerificationError):
    """The verification method cannot be resolved or decoded."""


class CanonicalizationError(VerificationError):
    """The credential or proof options cannot be canonicalized."""


class SignatureMismatchError(VerificationError):
    """The signature does not match the recomputed verify data."""


async def verify_credential(
    credential: dict,
    *,
    document_loader,
    suite: Ed25519Signature2020 | None = None,
) -> dict:
    """Verify the proof on a credential and return the credential.

    Args:
        credential: Signed credential with a single ``proof`` object.
        document_loader: Resolves contexts and the verification method.
        suite: Suite whose canonicalize/digest stages recompute the verify
            data. Default: a plain Ed25519Signature2020 suite.

    Raises:
        MalformedProofError: If the credential or proof is incomplete.
        KeyResolutionError: If the verification method cannot be resolved.
        CanonicalizationError: If the verify data cannot be recomputed.
        SignatureMismatchError: If the signature is invalid.
    """
    if suite is None:
        suite = Ed25519Signature2020()

    if not isinstance(credential, dict):
        raise MalformedProofError("Credential must be a JSON object")
    proof = credential.get("proof")
    if not isinstance(proof, dict):
        raise MalformedProofError("No proof found in credential")
    if proof.get("type") != suite.signature_type:
        raise MalformedProofError(
            f"Unexpected proof type: expected {suite.signature_type!r}, "
            f"got {proof.get('type')!r}"
        )
    if "proofValue" not in proof:
        raise MalformedProofError("No proofValue field in proof")

    contexts = credential.get("@context")
    if isinstance(contexts, str):
        contexts = [contexts]
    # Proof option terms are only defined (and signed) under the suite context
    if (
        not isinstance(contexts, list)
        or SECURITY_CONTEXT_ED25519_2020_URL not in contexts
    ):
        raise MalformedProofError(
            f'"@context" does not include {SECURITY_CONTEXT_ED25519_2020_URL!r}'
        )

    try:
        key = suite.resolve_verification_method(
            proof=proof, document_loader=document_loader
        )
    except (DocumentLoaderError, KeyError, ValueError) as e:
        raise KeyResolutionError(f"Verification method resolution failed: {e}") from e

    try:
        verify_data = await suite.create_verify_data(
            document=credential, proof=proof, document_loader=document_loader
        )
    except JsonLdError as e:
        raise CanonicalizationError(f"Unable to canonicalize credential: {e}") from e

    if not suite.verify_signature(verify_data=verify_data, key=key, proof=proof):
        raise SignatureMismatchError(
            f"Invalid signature for verification method {key.id}"
        )

    return credential


def main(argv=None):
    """CLI entry point for credential verification."""
    parser = argparse.ArgumentParser(
        prog="ldsign.verifier",
        description="Verify Ed25519Signature2020 credentials",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m ldsign.verifier credentials/validVC.json
  python -m ldsign.verifier credentials/*.json
        """,
    )
    parser.add_argument("credentials", nargs="+", help="Signed credential JSON files")

    args = parser.parse_args(argv)

    document_loader = StaticDocumentLoader()
    failures = 0
    for path_str in args.credentials:
        try:
            credential = json.loads(Path(path_str).read_text())
        except (OSError, ValueError) as e:
            failures += 1
            print(f"{path_str}: unreadable: {e}")
            continue
        try:
            asyncio.run(
                verify_credential(credential, document_loader=document_loader)
            )
            print(f"{path_str}: OK")
        except VerificationError as e:
            failures += 1
            print(f"{path_str}: {type(e).__name__}: {e}")

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
