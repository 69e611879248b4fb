"""Offline JSON-LD document loader for contexts and did:key documents."""

import copy
import json
import logging
from pathlib import Path
from typing import Callable

from ldsign.constants import (
    CREDENTIALS_CONTEXT_V1_URL,
    SECURITY_CONTEXT_ED25519_2020_URL,
)
from ldsign.did_key import DID_KEY_PREFIX, DIDKeyError, resolve_did_key

LOGGER = logging.getLogger(__name__)

CONTEXTS_DIR = Path(__file__).resolve().parent / "contexts"

BUNDLED_CONTEXTS = {
    CREDENTIALS_CONTEXT_V1_URL: "credentials-v1.jsonld",
    SECURITY_CONTEXT_ED25519_2020_URL: "ed25519-2020-v1.jsonld",
}

DocumentLoader = Callable[[str, dict], dict]


class DocumentLoaderError(Exception):
    """Raised when a URL cannot be resolved to a document."""


def load_bundled_contexts() -> dict[str, dict]:
    """Read the JSON-LD contexts shipped with the package."""
    return {
        url: json.loads((CONTEXTS_DIR / filename).read_text())
        for url, filename in BUNDLED_CONTEXTS.items()
    }


class StaticDocumentLoader:
    """pyld-compatible loader backed by an in-memory document map.

    Serves the bundled contexts, any extra documents given at construction,
    and did:key DIDs / verification methods. Never touches the network.
    """

    def __init__(self, documents: dict[str, dict] | None = None):
        self._documents = load_bundled_contexts()
        if documents:
            self._documents.update(documents)

    def __contains__(self, url: str) -> bool:
        return url in self._documents

    def __call__(self, url: str, options: dict | None = None) -> dict:
        return {
            "contentType": "application/ld+json",
            "contextUrl": None,
            "documentUrl": url,
            "document": self.resolve(url),
        }

    def resolve(self, url: str) -> dict:
        """Return a copy of the document for ``url``.

        Raises:
            DocumentLoaderError: If the URL is unknown or cannot be resolved.
        """
        if url in self._documents:
            return copy.deepcopy(self._documents[url])

        if url.startswith(DID_KEY_PREFIX):
            try:
                return resolve_did_key(url)
            except DIDKeyError as e:
                raise DocumentLoaderError(f"Unable to resolve {url}: {e}") from e

        LOGGER.debug("Refusing to load unknown document %s", url)
        raise DocumentLoaderError(f"Document not found: {url}")
