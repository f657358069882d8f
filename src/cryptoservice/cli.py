"""Command-line interface for cryptoservice."""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from cryptoservice import __version__
from cryptoservice.algorithms import CipherAlgorithm, HashAlgorithm, PasswordAlgorithm
from cryptoservice.audit import EventType, audit_event, setup_logging
from cryptoservice.config import Argon2Cost, CryptoSettings
from cryptoservice.exceptions import CryptoError
from cryptoservice.service import CryptoService

console = Console()

HASH_CHOICES = click.Choice([a.value for a in HashAlgorithm], case_sensitive=False)
CIPHER_CHOICES = click.Choice([a.value for a in CipherAlgorithm], case_sensitive=False)
PASSWORD_CHOICES = click.Choice([a.value for a in PasswordAlgorithm], case_sensitive=False)


def print_table(title: str, rows: list[dict], columns: list[tuple[str, str]]) -> None:
    """Print data in a formatted table.

    Args:
        title: Table title
        rows: List of row dictionaries
        columns: List of (key, header) tuples defining columns
    """
    table = Table(title=title)
    for _, header in columns:
        table.add_column(header, style="cyan")

    for row in rows:
        values = [str(row.get(key, "")) for key, _ in columns]
        table.add_row(*values)

    console.print(table)


def parse_hex_key(value: str) -> bytes:
    """Decode a hex-encoded key given on the command line."""
    try:
        return bytes.fromhex(value)
    except ValueError:
        raise click.BadParameter("Key must be hex encoded.", param_hint="--key")


def run(ctx: click.Context, event_type: EventType, operation, details: Optional[dict] = None):
    """Run ``operation``, audit its outcome and turn failures into ClickExceptions."""
    try:
        result = operation(ctx.obj)
    except CryptoError as e:
        audit_event(event_type, success=False, details=details, error=e)
        raise click.ClickException(str(e))
    audit_event(event_type, success=True, details=details)
    return result


@click.group()
@click.version_option(__version__)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    default=None,
    help="Set logging level",
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for the JSON log file",
)
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str], log_dir: Optional[Path]) -> None:
    """Hashing, password hashing, MACs, encryption and key derivation."""
    try:
        settings = CryptoSettings.from_env()
    except ValueError as e:
        raise click.ClickException(str(e))

    setup_logging(
        log_level=log_level or settings.log_level,
        base_dir=log_dir or settings.log_dir,
    )
    ctx.obj = CryptoService(settings)


@cli.command("hash")
@click.argument("value")
@click.option("--algorithm", type=HASH_CHOICES, default=None, help="Hash algorithm")
@click.pass_context
def hash_command(ctx: click.Context, value: str, algorithm: Optional[str]) -> None:
    """Print the hex digest of VALUE."""
    digest = run(ctx, EventType.DIGEST_HASH, lambda svc: svc.hash(value, algorithm))
    click.echo(digest)


@cli.command("hmac")
@click.argument("value")
@click.option("--key", required=True, help="MAC key")
@click.option("--algorithm", type=HASH_CHOICES, default=None, help="Hash algorithm")
@click.pass_context
def hmac_command(ctx: click.Context, value: str, key: str, algorithm: Optional[str]) -> None:
    """Print the HMAC of VALUE."""
    mac = run(ctx, EventType.DIGEST_HMAC, lambda svc: svc.hmac(value, key, algorithm))
    click.echo(mac)


@cli.command()
@click.option("--bytes", "byte_length", type=int, default=32, show_default=True, help="Random bytes")
@click.option("--algorithm", type=HASH_CHOICES, default=None, help="Hash algorithm")
@click.pass_context
def token(ctx: click.Context, byte_length: int, algorithm: Optional[str]) -> None:
    """Generate a token and the hash to store for it."""
    pair = run(
        ctx,
        EventType.TOKEN_CREATE,
        lambda svc: svc.generate_and_hash_token(byte_length, algorithm),
        {"byte_length": byte_length},
    )
    click.echo(f"token: {pair.token}")
    click.echo(f"hash: {pair.token_hash}")


@cli.command("validate-token")
@click.argument("value")
@click.argument("stored_hash")
@click.option("--algorithm", type=HASH_CHOICES, default=None, help="Hash algorithm")
@click.pass_context
def validate_token(ctx: click.Context, value: str, stored_hash: str, algorithm: Optional[str]) -> None:
    """Check VALUE against STORED_HASH; exits 1 on mismatch."""
    valid = run(
        ctx, EventType.TOKEN_VALIDATE, lambda svc: svc.validate_token(value, stored_hash, algorithm)
    )
    click.echo("valid" if valid else "invalid")
    if not valid:
        ctx.exit(1)


@cli.group()
def password() -> None:
    """Hash and verify passwords."""


@password.command("hash")
@click.password_option(help="Password to hash")
@click.option("--algorithm", type=PASSWORD_CHOICES, default="bcrypt", show_default=True)
@click.option("--cost", type=int, default=None, help="bcrypt work factor")
@click.option("--time-cost", type=int, default=None, help="Argon2id passes")
@click.option("--memory-cost", type=int, default=None, help="Argon2id memory in KiB")
@click.option("--parallelism", type=int, default=None, help="Argon2id lanes")
@click.pass_context
def password_hash(
    ctx: click.Context,
    password: str,
    algorithm: str,
    cost: Optional[int],
    time_cost: Optional[int],
    memory_cost: Optional[int],
    parallelism: Optional[int],
) -> None:
    """Hash a password with bcrypt or Argon2id."""

    def operation(svc: CryptoService) -> str:
        algo = PasswordAlgorithm.coerce(algorithm)
        work = cost
        if algo is PasswordAlgorithm.ARGON2ID:
            defaults = svc.settings.argon2
            work = Argon2Cost(
                time_cost=defaults.time_cost if time_cost is None else time_cost,
                memory_cost=defaults.memory_cost if memory_cost is None else memory_cost,
                parallelism=defaults.parallelism if parallelism is None else parallelism,
            )
        return svc.hash_password(password, algo, work)

    record = run(ctx, EventType.PASSWORD_HASH, operation, {"algorithm": algorithm})
    click.echo(record)


@password.command("verify")
@click.argument("record")
@click.option("--password", prompt=True, hide_input=True, help="Password to verify")
@click.pass_context
def password_verify(ctx: click.Context, record: str, password: str) -> None:
    """Verify a password against RECORD; exits 1 on mismatch."""
    valid = run(ctx, EventType.PASSWORD_VERIFY, lambda svc: svc.verify_password(password, record))
    click.echo("valid" if valid else "invalid")
    if not valid:
        ctx.exit(1)


@password.command("needs-rehash")
@click.argument("record")
@click.option("--cost", type=int, default=None, help="Desired bcrypt work factor")
@click.pass_context
def password_needs_rehash(ctx: click.Context, record: str, cost: Optional[int]) -> None:
    """Tell whether RECORD was hashed with other parameters than configured."""
    stale = run(ctx, EventType.PASSWORD_REHASH_CHECK, lambda svc: svc.needs_rehash(record, cost))
    click.echo("yes" if stale else "no")


@cli.command()
@click.argument("plaintext")
@click.option("--key", required=True, help="Hex-encoded key")
@click.option("--algorithm", type=CIPHER_CHOICES, default=None, help="Cipher")
@click.option("--authenticated", is_flag=True, help="Use AES-GCM")
@click.option("--aad", default="", help="Associated data (GCM only)")
@click.pass_context
def encrypt(
    ctx: click.Context,
    plaintext: str,
    key: str,
    algorithm: Optional[str],
    authenticated: bool,
    aad: str,
) -> None:
    """Encrypt PLAINTEXT and print the base64 envelope."""
    key_bytes = parse_hex_key(key)

    def operation(svc: CryptoService) -> str:
        if authenticated:
            return svc.encrypt_authenticated(plaintext, key_bytes, aad, algorithm)
        return svc.encrypt(plaintext, key_bytes, algorithm)

    envelope = run(
        ctx,
        EventType.CRYPTO_ENCRYPT,
        operation,
        {"algorithm": algorithm, "authenticated": authenticated},
    )
    click.echo(envelope)


@cli.command()
@click.argument("envelope")
@click.option("--key", required=True, help="Hex-encoded key")
@click.option("--algorithm", type=CIPHER_CHOICES, default=None, help="Cipher")
@click.option("--authenticated", is_flag=True, help="Use AES-GCM")
@click.option("--aad", default="", help="Associated data (GCM only)")
@click.pass_context
def decrypt(
    ctx: click.Context,
    envelope: str,
    key: str,
    algorithm: Optional[str],
    authenticated: bool,
    aad: str,
) -> None:
    """Decrypt a base64 ENVELOPE."""
    key_bytes = parse_hex_key(key)

    def operation(svc: CryptoService) -> str:
        if authenticated:
            return svc.decrypt_authenticated(envelope, key_bytes, aad, algorithm)
        return svc.decrypt(envelope, key_bytes, algorithm)

    plaintext = run(
        ctx,
        EventType.CRYPTO_DECRYPT,
        operation,
        {"algorithm": algorithm, "authenticated": authenticated},
    )
    click.echo(plaintext)


@cli.command("derive-key")
@click.option("--password", prompt=True, hide_input=True, help="Password")
@click.option("--salt", required=True, help="Hex-encoded salt (at least 8 bytes)")
@click.option("--memory-cost", type=int, default=None, help="Memory in KiB")
@click.option("--time-cost", type=int, default=None, help="Number of passes")
@click.option("--parallelism", type=int, default=None, help="Number of lanes")
@click.option("--length", type=int, default=32, show_default=True, help="Key length in bytes")
@click.pass_context
def derive_key(
    ctx: click.Context,
    password: str,
    salt: str,
    memory_cost: Optional[int],
    time_cost: Optional[int],
    parallelism: Optional[int],
    length: int,
) -> None:
    """Derive a hex key from a password with Argon2id."""
    try:
        salt_bytes = bytes.fromhex(salt)
    except ValueError:
        raise click.BadParameter("Salt must be hex encoded.", param_hint="--salt")

    key = run(
        ctx,
        EventType.KEY_DERIVE,
        lambda svc: svc.derive_key(
            password,
            salt_bytes,
            memory_cost=memory_cost,
            time_cost=time_cost,
            parallelism=parallelism,
            output_length=length,
        ),
        {"output_length": length},
    )
    click.echo(key.hex())


@cli.command()
def algorithms() -> None:
    """List supported algorithms."""
    print_table(
        "Hash algorithms",
        [{"name": a.value, "size": a.digest_size * 8} for a in HashAlgorithm],
        [("name", "Name"), ("size", "Digest bits")],
    )
    print_table(
        "Ciphers",
        [
            {
                "name": a.value,
                "key": a.key_length * 8,
                "iv": a.iv_length,
                "aead": "yes" if a.authenticated else "no",
            }
            for a in CipherAlgorithm
        ],
        [("name", "Name"), ("key", "Key bits"), ("iv", "IV bytes"), ("aead", "Authenticated")],
    )


def main() -> None:
    """Entry point for the ``cryptoservice`` console script."""
    cli()


if __name__ == "__main__":
    main()
