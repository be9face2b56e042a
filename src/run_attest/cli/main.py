"""Main CLI application for run-attest."""

import logging
import sys

import click

from ..cicd.outputs import parse_outputs, write_outputs
from ..config import ENV_OUTPUT_FILE, RunIdentity
from ..errors import AttestError, DecodeError, KeyFormatError, MessageReadError
from ..signing import ArtifactSigner, SignatureVerifier
from ..verification.bundle_verifier import BundleVerifier
from ..verification.integrity_checker import MODE_AUTO, MODE_FILE, MODE_LITERAL, self_digest

logger = logging.getLogger(__name__)

EXIT_REJECTED = 1
EXIT_MALFORMED = 2

MALFORMED_INPUT_ERRORS = (DecodeError, KeyFormatError, MessageReadError)


@click.group()
@click.option('--debug', is_flag=True, help='Enable debug logging')
def cli(debug):
    """run-attest - sign build artifacts with an ephemeral key and verify them."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


@cli.command()
@click.argument('artifact', type=click.Path())
@click.option('--envelope/--no-envelope', default=True,
              help='Also sign a provenance envelope for this run')
@click.option('--verifier-digest', default=None,
              help='Hex digest of the verifier binary (default: digest of this program)')
@click.option('--github-output', envvar=ENV_OUTPUT_FILE, default=None,
              help='Append outputs to this Actions output file')
def sign(artifact, envelope, verifier_digest, github_output):
    """Sign ARTIFACT with a freshly generated key and print the outputs."""
    try:
        identity = None
        if envelope:
            logger.info("Starting verifier with:  %s", artifact)
            if verifier_digest is None:
                verifier_digest = self_digest(sys.argv[0])
            logger.info("Self hash:  %s", verifier_digest)
            identity = RunIdentity.from_env()

        bundle = ArtifactSigner().attest(artifact, identity=identity, verifier_digest=verifier_digest or "")
        write_outputs(bundle.outputs(), github_output=github_output)
    except (AttestError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument('signature')
@click.argument('public_key')
@click.argument('message')
@click.option('--file', 'mode', flag_value=MODE_FILE, help='MESSAGE is always a file path')
@click.option('--literal', 'mode', flag_value=MODE_LITERAL, help='MESSAGE is always a literal string')
@click.option('--auto', 'mode', flag_value=MODE_AUTO,
              help='MESSAGE is a file if such a path exists, else a literal (default)')
def verify(signature, public_key, message, mode):
    """Verify a base64 SIGNATURE over MESSAGE with a base64 PEM PUBLIC_KEY."""
    try:
        result = SignatureVerifier().verify(signature, public_key, message, mode=mode or MODE_AUTO)
    except MALFORMED_INPUT_ERRORS as e:
        click.echo(f"Malformed input: {e}", err=True)
        sys.exit(EXIT_MALFORMED)

    if not result.is_valid:
        click.echo(result.message, err=True)
        sys.exit(EXIT_REJECTED)

    click.echo(result.message)


@cli.command('verify-bundle')
@click.argument('outputs_file', type=click.File('r'))
@click.argument('artifact', type=click.Path(dir_okay=False))
def verify_bundle(outputs_file, artifact):
    """Verify the outputs captured in OUTPUTS_FILE against ARTIFACT."""
    outputs = parse_outputs(outputs_file)
    try:
        status = BundleVerifier().verify_bundle(outputs, artifact)
    except MALFORMED_INPUT_ERRORS as e:
        click.echo(f"Malformed input: {e}", err=True)
        sys.exit(EXIT_MALFORMED)

    for check, line in zip(status.checks_performed, status.messages):
        click.echo(f"{check}: {line}")

    if not status.is_valid:
        click.echo("bundle verification failed", err=True)
        sys.exit(EXIT_REJECTED)

    if status.envelope is not None:
        click.echo(f"Run: {status.envelope.run_url}")
    click.echo("bundle verified")


def main():
    """Entry point for CLI."""
    cli()


if __name__ == '__main__':
    main()
