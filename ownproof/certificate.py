"""
Certificate builder and signer — assembles a Certificate, resolves the
signer address from the key, signs the canonical bytes and returns a
SignedCertificate.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Optional, Union

from eth_keys import keys
from pydantic import ValidationError

from .canonicalize import canonicalize
from .crypto import (
    addresses_equal,
    load_private_key,
    message_digest,
    sign_digest,
)
from .errors import EncodingError, SigningError
from .schema import Certificate, Payload, SignedCertificate

logger = logging.getLogger(__name__)

CertificateLike = Union[Certificate, SignedCertificate, Mapping[str, Any]]


def current_timestamp() -> int:
    return int(datetime.now(timezone.utc).timestamp())


def build_certificate(
    purpose: str,
    content: str,
    domain: str,
    payload_type: str = "text",
    timestamp: Optional[int] = None,
    signer: Optional[str] = None,
) -> Certificate:
    """Build an unsigned Certificate; timestamp defaults to now (UTC seconds)."""
    try:
        return Certificate(
            purpose=purpose,
            payload=Payload(type=payload_type, content=content),
            domain=domain,
            timestamp=current_timestamp() if timestamp is None else timestamp,
            signer=signer,
        )
    except ValidationError as e:
        raise EncodingError(f"Invalid certificate fields: {e}") from e


def _as_unsigned(certificate: CertificateLike) -> Certificate:
    if isinstance(certificate, SignedCertificate):
        return certificate.unsigned()
    if isinstance(certificate, Certificate):
        return certificate
    if not isinstance(certificate, Mapping):
        raise SigningError(f"Cannot sign a {type(certificate).__name__}")
    fields = {k: v for k, v in certificate.items() if k != "signature"}
    try:
        return Certificate.model_validate(fields)
    except ValidationError as e:
        raise SigningError(f"Invalid certificate fields: {e}") from e


def sign_certificate(
    certificate: CertificateLike,
    private_key: str | bytes | keys.PrivateKey,
) -> SignedCertificate:
    """
    Sign a Certificate.

    A SignedCertificate or a plain mapping is accepted too; any signature it
    already carries is replaced.

    Steps:
      1. Load the private key.
      2. Resolve ``signer`` from the key if unset; reject a preset signer
         that belongs to a different key.
      3. Canonicalize (``ownproof/1``, signature excluded).
      4. Hash as an EIP-191 personal message with Keccak-256.
      5. Sign the digest with secp256k1.
      6. Return a new SignedCertificate; the input is left untouched.
    """
    try:
        sk = load_private_key(private_key)
    except ValueError as e:
        raise SigningError(f"Malformed private key: {e}") from e

    address = sk.public_key.to_checksum_address()
    certificate = _as_unsigned(certificate)

    if certificate.signer is None:
        certificate = certificate.model_copy(update={"signer": address})
    else:
        try:
            same = addresses_equal(certificate.signer, address)
        except ValueError as e:
            raise SigningError(f"Malformed signer address: {e}") from e
        if not same:
            raise SigningError(
                f"signer {certificate.signer} does not match the signing key ({address})"
            )

    try:
        canonical = canonicalize(certificate)
    except EncodingError as e:
        raise SigningError(f"Cannot encode certificate: {e}") from e

    signature = sign_digest(message_digest(canonical), sk)
    logger.debug(f"Signed certificate for {address} (domain={certificate.domain!r})")

    return SignedCertificate(**certificate.model_dump(), signature=signature)
