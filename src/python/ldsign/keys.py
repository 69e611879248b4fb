"""Key generation, multibase/did:key encoding, and key pairs for LD signing.

CLI Usage:
    python -m ldsign.keys --help
    python -m ldsign.keys generate
    python -m ldsign.keys did-key --secret-env CLIENT_SECRET_DB
"""

import argparse
import base64
import hashlib
import json
import os
import sys
from dataclasses import dataclass

import base58
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)

# Multicodec prefix (varint-encoded)
_ED25519_MULTICODEC_PREFIX = b"\xed\x01"  # ed25519-pub 0xed

MULTIBASE_BASE58BTC = "z"
DEFAULT_RSA_KEY_SIZE = 4096


# ---------------------------------------------------------------------------
# Ed25519 keys
# ---------------------------------------------------------------------------


def generate_ed25519_keypair() -> tuple[Ed25519PrivateKey, Ed25519PublicKey]:
    """Generate a fresh Ed25519 key pair."""
    private_key = Ed25519PrivateKey.generate()
    return private_key, private_key.public_key()


def ed25519_keypair_from_seed(
    seed: bytes,
) -> tuple[Ed25519PrivateKey, Ed25519PublicKey]:
    """Derive an Ed25519 key pair from a 32-byte seed."""
    if len(seed) != 32:
        raise ValueError(f"Ed25519 seed must be 32 bytes, got {len(seed)}")
    private_key = Ed25519PrivateKey.from_private_bytes(seed)
    return private_key, private_key.public_key()


def seed_from_secret(secret: str) -> bytes:
    """Stretch an opaque secret string into a 32-byte key seed."""
    return hashlib.sha256(secret.encode("utf-8")).digest()


def public_key_to_multibase(public_key: Ed25519PublicKey) -> str:
    """Encode an Ed25519 public key as multibase base58btc (z6Mk...)."""
    raw = public_key.public_bytes(Encoding.Raw, PublicFormat.Raw)
    return (
        MULTIBASE_BASE58BTC
        + base58.b58encode(_ED25519_MULTICODEC_PREFIX + raw).decode()
    )


def multibase_to_public_key(value: str) -> Ed25519PublicKey:
    """Decode a multibase base58btc ed25519-pub value into a public key.

    Raises:
        ValueError: If the encoding tag, multicodec prefix or key length is wrong.
    """
    if not value.startswith(MULTIBASE_BASE58BTC):
        raise ValueError(
            f"Unsupported multibase encoding {value[:1]!r}: expected base58btc 'z'"
        )
    decoded = base58.b58decode(value[1:])
    if not decoded.startswith(_ED25519_MULTICODEC_PREFIX):
        raise ValueError(f"Not an ed25519-pub multicodec value: {value[:8]}...")
    raw = decoded[len(_ED25519_MULTICODEC_PREFIX) :]
    if len(raw) != 32:
        raise ValueError(f"Ed25519 public key must be 32 bytes, got {len(raw)}")
    return Ed25519PublicKey.from_public_bytes(raw)


def public_key_to_did_key(public_key: Ed25519PublicKey) -> str:
    """Derive a did:key identifier from an Ed25519 public key."""
    mb = public_key_to_multibase(public_key)
    return f"did:key:{mb}"


def keypair_to_jwk(private_key: Ed25519PrivateKey) -> dict:
    """Export an Ed25519 private key as a JWK dict (OKP/Ed25519)."""
    raw_private = private_key.private_bytes(
        Encoding.Raw, PrivateFormat.Raw, NoEncryption()
    )
    raw_public = private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)

    return {
        "kty": "OKP",
        "crv": "Ed25519",
        "x": _b64url(raw_public),
        "d": _b64url(raw_private),
    }


@dataclass(frozen=True)
class Ed25519KeyPair:
    """An Ed25519 did:key verification method.

    The private key is a borrowed reference; it is never serialized.
    """

    public_key: Ed25519PublicKey
    private_key: Ed25519PrivateKey | None = None

    @classmethod
    def from_private_key(cls, private_key: Ed25519PrivateKey) -> "Ed25519KeyPair":
        return cls(public_key=private_key.public_key(), private_key=private_key)

    @property
    def fingerprint(self) -> str:
        return public_key_to_multibase(self.public_key)

    @property
    def controller(self) -> str:
        return f"did:key:{self.fingerprint}"

    @property
    def id(self) -> str:
        """Verification method ID (did:key:z6Mk...#z6Mk...)."""
        return f"{self.controller}#{self.fingerprint}"

    @property
    def has_private_key(self) -> bool:
        return self.private_key is not None

    def sign(self, data: bytes) -> bytes:
        if self.private_key is None:
            raise ValueError(f"No private key available for {self.id}")
        return self.private_key.sign(data)

    def verify(self, data: bytes, signature: bytes) -> bool:
        try:
            self.public_key.verify(signature, data)
        except InvalidSignature:
            return False
        return True


# ---------------------------------------------------------------------------
# RSA keys
# ---------------------------------------------------------------------------


def generate_rsa_keypair(
    key_size: int = DEFAULT_RSA_KEY_SIZE,
) -> tuple[rsa.RSAPrivateKey, rsa.RSAPublicKey]:
    """Generate an RSA key pair (public exponent 65537)."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    return private_key, private_key.public_key()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _b64url(data: bytes) -> str:
    """Base64url encode without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode()


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def main(argv=None):
    """CLI entry point for key operations."""
    parser = argparse.ArgumentParser(
        prog="ldsign.keys",
        description="Ed25519 did:key helper CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m ldsign.keys generate --output key.jwk
  python -m ldsign.keys did-key --secret-env CLIENT_SECRET_DB
  python -m ldsign.keys did-key --secret-env CLIENT_SECRET_DB --verification-method
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    gen_parser = subparsers.add_parser(
        "generate",
        help="Generate a new Ed25519 keypair",
        description="Generate an Ed25519 keypair and print it as a JWK.",
    )
    gen_parser.add_argument(
        "--output",
        "-o",
        help="Output file for JWK (default: stdout)",
    )

    did_parser = subparsers.add_parser(
        "did-key",
        help="Print the did:key derived from a secret",
        description="Derive the signing did:key from a secret environment value.",
    )
    did_parser.add_argument(
        "--secret-env",
        default="CLIENT_SECRET_DB",
        help="Environment variable holding the secret. Default: CLIENT_SECRET_DB",
    )
    did_parser.add_argument(
        "--verification-method",
        action="store_true",
        help="Print the verification method ID instead of the DID",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "generate":
        private_key, _ = generate_ed25519_keypair()
        output = json.dumps(keypair_to_jwk(private_key), indent=2)
        if args.output:
            with open(args.output, "w") as f:
                f.write(output)
            print(f"Key written to {args.output}", file=sys.stderr)
        else:
            print(output)

    elif args.command == "did-key":
        secret = os.environ.get(args.secret_env)
        if not secret:
            print(f"ENV variable {args.secret_env} is required.", file=sys.stderr)
            return 2
        private_key, _ = ed25519_keypair_from_seed(seed_from_secret(secret))
        key = Ed25519KeyPair.from_private_key(private_key)
        print(key.id if args.verification_method else key.controller)

    return 0


if __name__ == "__main__":
    sys.exit(main())
