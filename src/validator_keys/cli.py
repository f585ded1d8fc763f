"""Command-line interface for validator key manifests.

Example:
    >>> # From terminal:
    >>> # validator-keys authorize-key <master-secret> <ephemeral-secret> <sequence>
    >>> # validator-keys revoke-key <master-secret>
    >>> # validator-keys sign <secret> "data to sign"
    >>> # validator-keys verify-manifest <base64-manifest>
"""

from typing import Annotated, Optional

import typer

from validator_keys import __version__
from validator_keys.crypto.keys import KeyMaterial
from validator_keys.crypto.schemes import KeyScheme
from validator_keys.errors import ValidatorKeysError
from validator_keys.manifest.builder import create_manifest, revoke, sign
from validator_keys.manifest.models import verify_manifest
from validator_keys.observability import configure_logging
from validator_keys.validator_token import ValidatorToken

app = typer.Typer(help="Validator key manifest tool.")

KEY_TYPE_OPTION = typer.Option(
    KeyScheme.ED25519,
    "--key-type",
    "-t",
    help="Signature scheme of the secret keys.",
    case_sensitive=False,
)


def _fail(exc: ValidatorKeysError) -> typer.Exit:
    typer.echo(exc.message, err=True)
    return typer.Exit(1)


def _version_callback(value: bool) -> None:
    """Print the version and exit when requested."""
    if value:
        typer.echo(f"validator-keys version {__version__}")
        raise typer.Exit()


VERSION_OPTION = typer.Option(
    False,
    "--version",
    help="Show the validator-keys version and exit.",
    callback=_version_callback,
    is_eager=True,
)


@app.callback()
def cli(
    version: bool = VERSION_OPTION,
    log_format: Annotated[
        Optional[str],
        typer.Option("--log-format", help="Log output format: console or json."),
    ] = None,
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help="Minimum log level (default WARNING)."),
    ] = None,
) -> None:
    """Validator keys CLI entrypoint."""
    configure_logging(log_format=log_format, log_level=log_level, force=True)


@app.command("authorize-key")
def authorize_key(
    master_secret: Annotated[str, typer.Argument(help="Hex-encoded master secret key.")],
    secret: Annotated[str, typer.Argument(help="Hex-encoded secret key to authorize.")],
    sequence: Annotated[str, typer.Argument(help="Manifest sequence number.")],
    key_type: KeyScheme = KEY_TYPE_OPTION,
    token: Annotated[
        bool,
        typer.Option("--token", help="Also print the validator token for the authorized key."),
    ] = False,
) -> None:
    """Authorize key with master key."""
    if not (sequence.isascii() and sequence.isdigit()):
        typer.echo("Sequence must be a number", err=True)
        raise typer.Exit(1)
    sequence_number = int(sequence)
    try:
        keys = KeyMaterial.from_hex(master_secret, key_type)
        manifest = create_manifest(keys, secret, key_type, sequence_number)
    except ValidatorKeysError as exc:
        typer.echo("Unable to create manifest.", err=True)
        raise _fail(exc) from exc
    typer.echo(manifest)
    typer.echo()
    if token:
        validator_token = ValidatorToken(manifest, KeyMaterial.from_hex(secret, key_type))
        typer.echo("[validator_token]")
        typer.echo(validator_token.to_string())
        typer.echo()


@app.command("revoke-key")
def revoke_key(
    master_secret: Annotated[str, typer.Argument(help="Hex-encoded master secret key.")],
    key_type: KeyScheme = KEY_TYPE_OPTION,
) -> None:
    """Revoke master key."""
    try:
        keys = KeyMaterial.from_hex(master_secret, key_type)
    except ValidatorKeysError as exc:
        raise _fail(exc) from exc
    revocation = revoke(keys)
    typer.echo("Master public key:")
    typer.echo(keys.public_key_hex)
    typer.echo()
    typer.echo("[validator_key_revocation]")
    typer.echo(revocation)
    typer.echo()


@app.command("sign")
def sign_data(
    secret: Annotated[str, typer.Argument(help="Hex-encoded secret key.")],
    data: Annotated[str, typer.Argument(help="String to sign.")],
    key_type: KeyScheme = KEY_TYPE_OPTION,
) -> None:
    """Sign string with key."""
    try:
        keys = KeyMaterial.from_hex(secret, key_type)
        signature = sign(keys, data)
    except ValidatorKeysError as exc:
        raise _fail(exc) from exc
    typer.echo(signature)
    typer.echo()


@app.command("verify-manifest")
def verify_manifest_command(
    manifest: Annotated[str, typer.Argument(help="Base64-encoded manifest.")],
) -> None:
    """Verify manifest signatures and show its contents."""
    try:
        parsed = verify_manifest(manifest)
    except ValidatorKeysError as exc:
        typer.echo(f"Verification failed: {exc.message}", err=True)
        raise typer.Exit(1) from exc
    typer.echo(f"Master public key: {parsed.public_key.hex().upper()}")
    if parsed.is_revocation:
        typer.echo("Revocation: master key is permanently retired")
        return
    assert parsed.signing_public_key is not None
    typer.echo(f"Sequence: {parsed.sequence}")
    typer.echo(f"Signing public key: {parsed.signing_public_key.hex().upper()}")
    typer.echo("Signatures valid")


def main() -> None:
    """Run the validator keys CLI."""
    app()


if __name__ == "__main__":
    main()
