"""
ownproof CLI — sign and independently verify ownership certificates.

Usage:
    ownproof sign --purpose identification --content login-challenge-123 \\
                  --domain example.app --private-key 0x...
    ownproof verify cert.json --domain example.app [--max-age 300]
    ownproof inspect cert.json
    ownproof encode cert.json
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ownproof.canonicalize import CANONICAL_FORMAT, canonicalize
from ownproof.certificate import build_certificate, sign_certificate
from ownproof.config import DEFAULT_MAX_FUTURE_SKEW, freshness_policy
from ownproof.crypto import keccak256_hex, message_digest
from ownproof.errors import EncodingError, MalformedCertificateError, SigningError
from ownproof.schema import SignedCertificate
from ownproof.transport import from_header, from_json, to_header, to_json
from ownproof.verifier import check_certificate


console = Console()


def _load_certificate(path: str) -> SignedCertificate:
    """Load a signed certificate from a JSON file or a base64 header dump."""
    text = Path(path).read_text(encoding="utf-8").strip()
    try:
        if text.startswith("{"):
            return from_json(text)
        return from_header(text)
    except MalformedCertificateError as e:
        raise click.ClickException(f"Invalid certificate file: {e.detail}")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """ownproof — proofs of address ownership without a transaction."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@main.command()
@click.option("--purpose", required=True, help="Intent tag, e.g. identification")
@click.option("--content", required=True, help="Payload content")
@click.option("--payload-type", default="text", show_default=True)
@click.option("--domain", required=True, help="Domain the certificate is valid for")
@click.option("--timestamp", type=int, default=None, help="Unix seconds (default: now)")
@click.option(
    "--private-key", envvar="OWNPROOF_PRIVATE_KEY", required=True,
    help="Hex secp256k1 private key (or set OWNPROOF_PRIVATE_KEY)",
)
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None)
@click.option("--header", "as_header", is_flag=True, help="Emit base64 header framing")
def sign(
    purpose: str,
    content: str,
    payload_type: str,
    domain: str,
    timestamp: Optional[int],
    private_key: str,
    output: Optional[str],
    as_header: bool,
):
    """Build and sign an ownership certificate."""
    try:
        cert = build_certificate(
            purpose=purpose,
            content=content,
            domain=domain,
            payload_type=payload_type,
            timestamp=timestamp,
        )
        signed = sign_certificate(cert, private_key)
    except (EncodingError, SigningError) as e:
        raise click.ClickException(str(e))

    text = to_header(signed) if as_header else to_json(signed)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
        console.print(f"[green]✓ Certificate for {signed.signer} written to {escape(output)}[/green]")
    else:
        click.echo(text)


@main.command()
@click.argument("cert_file", type=click.Path(exists=True))
@click.option("--domain", "-d", default=None, help="Expected domain")
@click.option("--purpose", "-p", default=None, help="Expected purpose")
@click.option("--max-age", type=click.IntRange(min=0), default=None, help="Reject certificates older than N seconds")
@click.option("--max-skew", type=click.IntRange(min=0), default=None,
              help=f"Allowed future clock skew in seconds (default {DEFAULT_MAX_FUTURE_SKEW} with --max-age)")
@click.option("--now", type=int, default=None, hidden=True)
def verify(
    cert_file: str,
    domain: Optional[str],
    purpose: Optional[str],
    max_age: Optional[int],
    max_skew: Optional[int],
    now: Optional[int],
):
    """Verify a signed ownership certificate."""
    cert = _load_certificate(cert_file)

    console.print(Panel("Ownership Certificate Verification", style="bold blue"))

    freshness = freshness_policy(max_age, max_skew)
    result = check_certificate(
        cert,
        expected_domain=domain,
        expected_purpose=purpose,
        freshness=freshness,
        now=now,
    )

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Check", width=14)
    table.add_column("Expected", width=24)
    table.add_column("Certificate", width=44)
    table.add_row("signer", "-", escape(cert.signer))
    table.add_row("domain", escape("(any)" if domain is None else domain), escape(cert.domain))
    table.add_row("purpose", escape("(any)" if purpose is None else purpose), escape(cert.purpose))
    table.add_row("timestamp", f"≤ {max_age}s old" if max_age is not None else "(any)", str(cert.timestamp))
    console.print(table)

    if result.valid:
        console.print(f"\n[bold green]✓ CERTIFICATE VERIFIED — signer {result.signer}[/bold green]")
    else:
        console.print(f"\n[bold red]✗ CERTIFICATE REJECTED ({result.failure.value})[/bold red]")
        console.print(f"  [red]{escape(result.detail)}[/red]")
        sys.exit(1)


@main.command()
@click.argument("cert_file", type=click.Path(exists=True))
def inspect(cert_file: str):
    """Inspect a certificate without verification."""
    cert = _load_certificate(cert_file)

    console.print(Panel("Ownership Certificate Inspection", style="bold cyan"))

    console.print(f"  Purpose:   {escape(cert.purpose)}")
    console.print(f"  Payload:   ({escape(cert.payload.type)}) {escape(cert.payload.content[:80])}")
    console.print(f"  Domain:    {escape(cert.domain)}")
    console.print(f"  Timestamp: {cert.timestamp}")
    console.print(f"  Signer:    {escape(cert.signer)}")
    console.print(f"  Signature: {cert.signature[:20]}...")


@main.command()
@click.argument("cert_file", type=click.Path(exists=True))
def encode(cert_file: str):
    """Print the canonical signing bytes and their digest."""
    cert = _load_certificate(cert_file)
    try:
        canonical = canonicalize(cert.unsigned())
    except EncodingError as e:
        raise click.ClickException(str(e))

    console.print(f"[dim]{CANONICAL_FORMAT}[/dim]")
    click.echo(canonical.decode("utf-8"))
    console.print(f"[dim]keccak256:      {keccak256_hex(canonical)}[/dim]")
    console.print(f"[dim]message digest: 0x{message_digest(canonical).hex()}[/dim]")


if __name__ == "__main__":
    main()
