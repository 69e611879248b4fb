"""Issue Verifiable Credentials with an embedded Linked Data proof."""

import asyncio
import copy
import logging

from ldsign.constants import (
    CREDENTIALS_CONTEXT_V1_URL,
    SECURITY_CONTEXT_ED25519_2020_URL,
    VERIFIABLE_CREDENTIAL_TYPE,
)
from ldsign.suite import Ed25519Signature2020, w3c_date
from pyld import jsonld
from pyld.jsonld import JsonLdError

LOGGER = logging.getLogger(__name__)


class IssuanceError(Exception):
    """Raised when a credential cannot be issued."""


async def issue_credential(
    credential: dict,
    *,
    suite: Ed25519Signature2020,
    document_loader,
) -> dict:
    """Sign a credential and return a new credential carrying the proof.

    The input is never mutated. ``issuer`` defaults to the suite key's
    controller and ``issuanceDate`` to the current time when absent. The
    Ed25519Signature2020 context is appended to ``@context`` if missing.

    Args:
        credential: Unsigned credential (JSON-LD dict).
        suite: Signing suite; its hooks run canonicalize, digest and sign.
        document_loader: Resolves the contexts referenced by the credential.

    Returns:
        A deep copy of ``credential`` with ``proof`` set.

    Raises:
        IssuanceError: If the credential is malformed or cannot be expanded.
    """
    signed = copy.deepcopy(credential)
    _check_credential(signed)
    _ensure_suite_context(signed)

    if "issuer" not in signed:
        if suite.key is None:
            raise IssuanceError("Credential has no issuer and the suite has no key")
        signed["issuer"] = suite.key.controller
    if "issuanceDate" not in signed:
        signed["issuanceDate"] = w3c_date()

    await asyncio.to_thread(_expand, signed, document_loader)

    proof = await suite.create_proof(document=signed, document_loader=document_loader)
    signed["proof"] = proof

    LOGGER.debug("Issued %s with %r", signed.get("id", "<anonymous>"), suite)
    return signed


def _check_credential(credential: dict):
    contexts = credential.get("@context")
    if isinstance(contexts, str):
        contexts = [contexts]
    if not contexts or contexts[0] != CREDENTIALS_CONTEXT_V1_URL:
        raise IssuanceError(
            f'"@context" must start with {CREDENTIALS_CONTEXT_V1_URL!r}'
        )

    types = credential.get("type")
    if isinstance(types, str):
        types = [types]
    if not types or VERIFIABLE_CREDENTIAL_TYPE not in types:
        raise IssuanceError(f'"type" must include {VERIFIABLE_CREDENTIAL_TYPE!r}')

    if not credential.get("credentialSubject"):
        raise IssuanceError('"credentialSubject" is required')

    if "proof" in credential:
        raise IssuanceError("Credential already carries a proof")


def _ensure_suite_context(credential: dict):
    """Append the suite context so the proof options have term definitions.

    Without it URDNA2015 drops ``created``, ``verificationMethod`` and
    ``proofPurpose`` from the canonical proof options, leaving them unsigned.
    """
    contexts = credential["@context"]
    if isinstance(contexts, str):
        contexts = [contexts]
    if SECURITY_CONTEXT_ED25519_2020_URL not in contexts:
        LOGGER.debug("Adding %s to credential context", SECURITY_CONTEXT_ED25519_2020_URL)
        contexts = [*contexts, SECURITY_CONTEXT_ED25519_2020_URL]
    credential["@context"] = contexts


def _expand(credential: dict, document_loader) -> list:
    """Expand the credential so every referenced context is resolved."""
    try:
        expanded = jsonld.expand(credential, {"documentLoader": document_loader})
    except JsonLdError as e:
        raise IssuanceError(f"Unable to expand credential: {e}") from e
    if not expanded:
        raise IssuanceError("Credential expands to an empty document")
    return expanded
