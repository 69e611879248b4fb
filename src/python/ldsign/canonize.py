"""Canonicalization strategies for the signing suite's canonize hook.

Both strategies are coroutines so they fit the same hook signature; the
serialization only runs once the coroutine is awaited. URDNA2015 runs in a
worker thread so concurrent suites do not serialize on the event loop.
"""

import asyncio

import canonicaljson
from pyld import jsonld


async def urdna2015(document: dict, *, document_loader=None) -> str:
    """Canonize a JSON-LD document to N-Quads with URDNA2015."""
    options = {"algorithm": "URDNA2015", "format": "application/n-quads"}
    if document_loader is not None:
        options["documentLoader"] = document_loader
    # application/n-quads format always returns str
    return await asyncio.to_thread(jsonld.normalize, document, options)


async def jcs(document: dict, *, document_loader=None) -> bytes:
    """Canonize a document as canonical JSON text (no JSON-LD processing)."""
    return canonicaljson.encode_canonical_json(document)
