"""
Canonical encoding of ownership certificates — format ``ownproof/1``.

Produces the unique byte string that gets signed, so that a signer and a
verifier written in any language agree on it exactly.

Rules:
  1. JSON object text, no insignificant whitespace.
  2. Fixed key order: purpose, payload, domain, timestamp, signer
     (then signature, only for the transmission form).
     payload keys in order: type, content.
     The order is explicit and never derived from the input mapping.
  3. Strings escaped per RFC 8785 / ES2015 JSON.stringify(): only \\, ",
     and U+0000..U+001F are escaped; everything else is emitted literally.
  4. timestamp as a plain base-10 integer.
  5. UTF-8 output.

The signing form never includes ``signature``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Union

from pydantic import ValidationError

from .errors import EncodingError
from .schema import Certificate, Payload, SignedCertificate

CANONICAL_FORMAT = "ownproof/1"

CERTIFICATE_FIELDS = ("purpose", "payload", "domain", "timestamp", "signer")
PAYLOAD_FIELDS = ("type", "content")

CertificateLike = Union[Certificate, SignedCertificate, Mapping[str, Any]]


def _serialize_string(s: str) -> str:
    """Serialize a string per JCS / ES2015 rules.

    Mandatory escapes: \\, ", and control chars U+0000..U+001F.
    """
    if not isinstance(s, str):
        raise EncodingError(f"expected a string, got {type(s).__name__}")
    buf: list[str] = ['"']
    for ch in s:
        cp = ord(ch)
        if ch == '\\':
            buf.append('\\\\')
        elif ch == '"':
            buf.append('\\"')
        elif ch == '\b':
            buf.append('\\b')
        elif ch == '\f':
            buf.append('\\f')
        elif ch == '\n':
            buf.append('\\n')
        elif ch == '\r':
            buf.append('\\r')
        elif ch == '\t':
            buf.append('\\t')
        elif cp < 0x20:
            buf.append(f'\\u{cp:04x}')
        else:
            buf.append(ch)
    buf.append('"')
    return ''.join(buf)


def _serialize_integer(n: int) -> str:
    # bool is a subclass of int in Python
    if isinstance(n, bool) or not isinstance(n, int):
        raise EncodingError(f"timestamp must be an integer, got {type(n).__name__}")
    return str(n)


def _coerce(cert: CertificateLike) -> Certificate | SignedCertificate:
    if isinstance(cert, (Certificate, SignedCertificate)):
        return cert
    if not isinstance(cert, Mapping):
        raise EncodingError(f"Cannot encode object of type {type(cert).__name__}")
    model = SignedCertificate if "signature" in cert else Certificate
    try:
        return model.model_validate(dict(cert))
    except ValidationError as e:
        raise EncodingError(f"Invalid certificate fields: {e}") from e


def _serialize(cert: Certificate | SignedCertificate, include_signature: bool) -> str:
    if cert.signer is None:
        raise EncodingError("signer is required for encoding")
    if not isinstance(cert.payload, Payload):
        raise EncodingError("payload is required for encoding")

    values = {
        "purpose": _serialize_string(cert.purpose),
        "payload": '{' + ','.join(
            f'{_serialize_string(k)}:{_serialize_string(getattr(cert.payload, k))}'
            for k in PAYLOAD_FIELDS
        ) + '}',
        "domain": _serialize_string(cert.domain),
        "timestamp": _serialize_integer(cert.timestamp),
        "signer": _serialize_string(cert.signer),
    }
    pairs = [f'{_serialize_string(k)}:{values[k]}' for k in CERTIFICATE_FIELDS]

    if include_signature:
        if not isinstance(cert, SignedCertificate):
            raise EncodingError("signature requested but certificate is unsigned")
        pairs.append(f'{_serialize_string("signature")}:{_serialize_string(cert.signature)}')

    return '{' + ','.join(pairs) + '}'


def canonicalize_json(cert: CertificateLike, *, include_signature: bool = False) -> str:
    """Return the canonical ``ownproof/1`` text of a certificate."""
    return _serialize(_coerce(cert), include_signature)


def canonicalize(cert: CertificateLike, *, include_signature: bool = False) -> bytes:
    """Return the canonical ``ownproof/1`` bytes of a certificate.

    With ``include_signature=False`` (the default) this is exactly the byte
    string that is hashed and signed, for both signing and verification.
    """
    text = canonicalize_json(cert, include_signature=include_signature)
    try:
        return text.encode('utf-8')
    except UnicodeEncodeError as e:
        raise EncodingError(f"Certificate contains text that is not valid UTF-8: {e}") from e
