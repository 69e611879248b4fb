"""Shared fixtures for the signing suite and fixture generator tests."""

import pytest

from credgen.generator import load_template
from ldsign.did_key import DidKeyProvider
from ldsign.document_loader import StaticDocumentLoader
from ldsign.issuer import issue_credential
from ldsign.keys import generate_rsa_keypair
from ldsign.suite import Ed25519Signature2020

TEST_SECRET = "test-client-secret"
FIXED_DATE = "2022-06-01T12:00:00Z"


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def client_secret():
    return TEST_SECRET


@pytest.fixture(scope="session")
def key_provider(client_secret):
    """did:key provider derived from the committed test secret."""
    return DidKeyProvider.from_secret(client_secret)


@pytest.fixture(scope="session")
def signing_key(key_provider):
    return key_provider.method_for(purpose="capabilityInvocation")


@pytest.fixture(scope="session")
def rsa_keypair():
    """Unrelated RSA key pair (2048 bit keeps the suite fast)."""
    return generate_rsa_keypair(2048)


@pytest.fixture(scope="session")
def rsa_private_key(rsa_keypair):
    return rsa_keypair[0]


@pytest.fixture(scope="session")
def rsa_public_key(rsa_keypair):
    return rsa_keypair[1]


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def document_loader():
    return StaticDocumentLoader()


@pytest.fixture()
def template():
    """The bundled unsigned credential template."""
    return load_template()


@pytest.fixture()
async def valid_credential(signing_key, template, document_loader):
    """A correctly signed credential with a pinned proof timestamp."""
    suite = Ed25519Signature2020(signing_key, date=FIXED_DATE)
    return await issue_credential(
        template, suite=suite, document_loader=document_loader
    )
