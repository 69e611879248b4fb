"""Each corrupted credential must fail verification for exactly one reason."""

import base64
import copy

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding

from credgen.corruptions import (
    CANONIZE_JCS,
    DIGEST_SHA512,
    INCORRECT_CODEC,
    RSA_SIGNED,
    VALID_VC,
    CorruptionError,
    corrupt_verification_method,
    incorrect_canonize,
    incorrect_codec,
    incorrect_digest,
    incorrect_signer,
    valid_vc,
)
from ldsign.canonize import jcs, urdna2015
from ldsign.digest import hash_digest
from ldsign.suite import Ed25519Signature2020
from ldsign.verifier import (
    KeyResolutionError,
    SignatureMismatchError,
    verify_credential,
)


def _without_proof(credential):
    return {k: v for k, v in credential.items() if k != "proof"}


@pytest.fixture()
def producer_args(template, document_loader, tmp_path):
    return dict(template=template, document_loader=document_loader, output_dir=tmp_path)


# ---------------------------------------------------------------------------
# Valid
# ---------------------------------------------------------------------------


async def test_valid_vc_verifies(signing_key, producer_args, document_loader, tmp_path):
    """The valid fixture verifies with the default suite."""
    fixture = await valid_vc(signing_key, **producer_args)
    assert fixture.path == tmp_path / VALID_VC
    await verify_credential(fixture.data, document_loader=document_loader)


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------


def test_corrupt_verification_method_strips_multibase_tag(signing_key):
    """Only the multibase tag of the key segment is removed; the fragment is kept."""
    vm = signing_key.id
    fingerprint = signing_key.fingerprint
    assert vm == f"did:key:{fingerprint}#{fingerprint}"

    corrupted = corrupt_verification_method(vm)
    assert corrupted == f"did:key:{fingerprint[1:]}#{fingerprint}"
    assert corrupted != vm


@pytest.mark.parametrize(
    "value",
    [
        "did:key",
        "did:web:example.com",
        "https://example.org/keys/1",
        "did:key:6Mkabc#z6Mkabc",
        "did:key:z",
    ],
)
def test_corrupt_verification_method_rejects_unexpected_shapes(value):
    """Identifiers that are not tagged did:key methods are refused, not mangled."""
    with pytest.raises(CorruptionError):
        corrupt_verification_method(value)


async def test_incorrect_codec(valid_credential, document_loader, tmp_path):
    """The codec fixture only changes verificationMethod and fails key resolution."""
    original = copy.deepcopy(valid_credential)
    fixture = incorrect_codec(valid_credential, output_dir=tmp_path)

    assert fixture.path == tmp_path / INCORRECT_CODEC
    assert valid_credential == original

    proof, original_proof = fixture.data["proof"], original["proof"]
    assert proof["verificationMethod"] == corrupt_verification_method(
        original_proof["verificationMethod"]
    )
    assert {k: v for k, v in proof.items() if k != "verificationMethod"} == {
        k: v for k, v in original_proof.items() if k != "verificationMethod"
    }
    assert _without_proof(fixture.data) == _without_proof(original)

    with pytest.raises(KeyResolutionError):
        await verify_credential(fixture.data, document_loader=document_loader)


def test_incorrect_codec_requires_proof(template, tmp_path):
    with pytest.raises(CorruptionError):
        incorrect_codec(template, output_dir=tmp_path)


# ---------------------------------------------------------------------------
# Digest
# ---------------------------------------------------------------------------


async def test_incorrect_digest(signing_key, producer_args, document_loader, tmp_path):
    """A SHA-512 signed credential fails the default suite but verifies with SHA-512."""
    fixture = await incorrect_digest(signing_key, **producer_args)
    assert fixture.path == tmp_path / DIGEST_SHA512

    with pytest.raises(SignatureMismatchError):
        await verify_credential(fixture.data, document_loader=document_loader)

    sha512_suite = Ed25519Signature2020(digest=hash_digest("sha512"))
    await verify_credential(
        fixture.data, document_loader=document_loader, suite=sha512_suite
    )


# ---------------------------------------------------------------------------
# Canonize
# ---------------------------------------------------------------------------


async def test_incorrect_canonize(signing_key, producer_args, document_loader, tmp_path):
    """A JCS signed credential fails the default suite but verifies with JCS."""
    fixture = await incorrect_canonize(signing_key, **producer_args)
    assert fixture.path == tmp_path / CANONIZE_JCS

    unsigned = _without_proof(fixture.data)
    assert await jcs(unsigned) != (
        await urdna2015(unsigned, document_loader=document_loader)
    ).encode("utf-8")

    with pytest.raises(SignatureMismatchError):
        await verify_credential(fixture.data, document_loader=document_loader)

    jcs_suite = Ed25519Signature2020(canonize=jcs)
    await verify_credential(fixture.data, document_loader=document_loader, suite=jcs_suite)


# ---------------------------------------------------------------------------
# Signer
# ---------------------------------------------------------------------------


async def test_incorrect_signer(
    signing_key, producer_args, document_loader, rsa_private_key, rsa_public_key, tmp_path
):
    """The RSA signature fails for the declared key but verifies with the RSA key."""
    fixture = await incorrect_signer(
        signing_key, rsa_key=rsa_private_key, **producer_args
    )
    assert fixture.path == tmp_path / RSA_SIGNED

    proof = fixture.data["proof"]
    assert proof["verificationMethod"] == signing_key.id
    assert not proof["proofValue"].startswith("z")

    with pytest.raises(SignatureMismatchError):
        await verify_credential(fixture.data, document_loader=document_loader)

    verify_data = await Ed25519Signature2020().create_verify_data(
        document=fixture.data, proof=proof, document_loader=document_loader
    )
    # Raises InvalidSignature if the RSA key did not sign the verify data
    rsa_public_key.verify(
        base64.b64decode(proof["proofValue"]),
        verify_data,
        padding.PKCS1v15(),
        hashes.SHA256(),
    )


async def test_incorrect_signer_generates_rsa_key(
    signing_key, producer_args, rsa_keypair, monkeypatch
):
    """Without an injected key the signer strategy generates its own RSA key."""
    calls = []

    def fake_generate_rsa_keypair():
        calls.append(True)
        return rsa_keypair

    monkeypatch.setattr(
        "credgen.corruptions.generate_rsa_keypair", fake_generate_rsa_keypair
    )
    fixture = await incorrect_signer(signing_key, **producer_args)
    assert calls == [True]
    assert fixture.data["proof"]["proofValue"]


# ---------------------------------------------------------------------------
# Shared invariants
# ---------------------------------------------------------------------------


async def test_corruptions_only_touch_the_proof(
    signing_key, producer_args, valid_credential, rsa_private_key, tmp_path
):
    """Every fixture carries the same credential body; only the proof differs."""
    produced = [
        await valid_vc(signing_key, **producer_args),
        incorrect_codec(valid_credential, output_dir=tmp_path),
        await incorrect_digest(signing_key, **producer_args),
        await incorrect_canonize(signing_key, **producer_args),
        await incorrect_signer(signing_key, rsa_key=rsa_private_key, **producer_args),
    ]
    expected = _without_proof(valid_credential)
    for fixture in produced:
        assert _without_proof(fixture.data) == expected
        assert fixture.data["proof"]["type"] == "Ed25519Signature2020"


async def test_producers_do_not_mutate_template(signing_key, producer_args):
    """Producers work on copies of the shared template."""
    before = copy.deepcopy(producer_args["template"])
    await incorrect_digest(signing_key, **producer_args)
    await incorrect_canonize(signing_key, **producer_args)
    assert producer_args["template"] == before
