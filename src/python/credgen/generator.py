"""Generate the signed credential fixtures used to exercise a VC verifier.

Produces one valid Ed25519Signature2020 credential and four credentials that
each fail verification for a single reason (see ``credgen.corruptions``).
The signing key is derived from the secret in ``CLIENT_SECRET_DB``.

Output (overwritten on every run):
  - validVC.json
  - incorrectCodec.json
  - digestSha512.json
  - canonizeJCS.json
  - rsaSigned.json

CLI Usage:
    python -m credgen.generator --help
    CLIENT_SECRET_DB=... python -m credgen.generator
    CLIENT_SECRET_DB=... python -m credgen.generator --output-dir tests/credentials
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path

from credgen.corruptions import (
    Fixture,
    incorrect_canonize,
    incorrect_codec,
    incorrect_digest,
    incorrect_signer,
    valid_vc,
)
from credgen.writer import write_fixtures
from ldsign.did_key import DidKeyProvider
from ldsign.document_loader import StaticDocumentLoader

LOGGER = logging.getLogger(__name__)

SECRET_ENV_VAR = "CLIENT_SECRET_DB"
KEY_PURPOSE = "capabilityInvocation"
TEMPLATE_PATH = Path(__file__).resolve().parent / "templates" / "test-vc.json"

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2


class ConfigurationError(Exception):
    """Raised when required configuration is missing."""


def load_template(path: Path | None = None) -> dict:
    """Load the unsigned credential template (bundled one by default)."""
    return json.loads(Path(path or TEMPLATE_PATH).read_text())


async def generate(
    *,
    secret: str | None,
    output_dir: Path,
    template: dict | None = None,
    document_loader=None,
    key_provider: DidKeyProvider | None = None,
    rsa_key=None,
) -> list[Fixture]:
    """Issue the valid credential and its corruptions, then write them all.

    Args:
        secret: Required configuration secret; also seeds the signing key
            unless ``key_provider`` is given.
        output_dir: Directory the five fixtures are written to.
        template: Unsigned credential. Default: the bundled template.
        document_loader: Loader for contexts and DIDs. Default: offline loader.
        key_provider: Source of the signing key. Default: derived from ``secret``.
        rsa_key: RSA key for the signer corruption. Default: freshly generated.

    Returns:
        The written fixtures, valid credential last.

    Raises:
        ConfigurationError: If ``secret`` is empty; raised before any key work.
    """
    if not secret:
        raise ConfigurationError(f"ENV variable {SECRET_ENV_VAR} is required.")

    output_dir = Path(output_dir)
    if template is None:
        template = load_template()
    if document_loader is None:
        document_loader = StaticDocumentLoader()
    if key_provider is None:
        key_provider = DidKeyProvider.from_secret(secret)

    LOGGER.info("generating credentials")
    key = key_provider.method_for(purpose=KEY_PURPOSE)

    valid = await valid_vc(
        key, template=template, document_loader=document_loader, output_dir=output_dir
    )

    codec = incorrect_codec(valid.data, output_dir=output_dir)

    shared = dict(template=template, document_loader=document_loader, output_dir=output_dir)
    reissued = await asyncio.gather(
        incorrect_digest(key, **shared),
        incorrect_canonize(key, **shared),
        incorrect_signer(key, rsa_key=rsa_key, **shared),
    )
    fixtures = [codec, *reissued, valid]

    LOGGER.info("writing credentials to %s", output_dir)
    await write_fixtures(fixtures)
    LOGGER.info("%d credentials generated", len(fixtures))
    return fixtures


def main(argv=None) -> int:
    """CLI entry point for fixture generation."""
    parser = argparse.ArgumentParser(
        prog="credgen.generator",
        description="Generate valid and corrupted VC fixtures for verifier tests",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Environment:
  {SECRET_ENV_VAR}  required secret; seeds the signing did:key

Examples:
  python -m credgen.generator
  python -m credgen.generator --output-dir tests/credentials
  python -m credgen.generator --template my-vc.json --verbose
        """,
    )
    parser.add_argument(
        "--output-dir",
        "-o",
        default=str(Path.cwd() / "credentials"),
        help="Directory for the generated fixtures. Default: ./credentials",
    )
    parser.add_argument(
        "--template",
        "-t",
        help="Unsigned credential template (JSON). Default: bundled template",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    secret = os.environ.get(SECRET_ENV_VAR)
    if not secret:
        print(f"Error: ENV variable {SECRET_ENV_VAR} is required.", file=sys.stderr)
        return EXIT_CONFIG

    try:
        template = load_template(args.template) if args.template else None
        fixtures = asyncio.run(
            generate(secret=secret, output_dir=Path(args.output_dir), template=template)
        )
    except Exception as e:
        LOGGER.debug("Generation failed", exc_info=True)
        print(f"Generation failed: {type(e).__name__}: {e}", file=sys.stderr)
        return EXIT_FAILURE

    for fixture in fixtures:
        print(f"  {fixture.path}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
