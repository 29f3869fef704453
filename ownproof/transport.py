"""
Transport framing for signed certificates.

JSON form: the canonical ``ownproof/1`` text with the signature appended,
which is plain JSON. Header form: standard base64 of that UTF-8 text, for
carrying a certificate in an HTTP header such as ``X-Ownership-Certificate``.

Parsing never repairs a certificate: anything that does not validate is a
MalformedCertificateError.
"""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any

from pydantic import ValidationError

from .canonicalize import canonicalize
from .errors import MalformedCertificateError
from .schema import SignedCertificate

HEADER_NAME = "X-Ownership-Certificate"


def _reject_duplicates(pairs: list[tuple[str, Any]]) -> dict:
    obj: dict[str, Any] = {}
    for key, value in pairs:
        if key in obj:
            raise MalformedCertificateError(f"duplicate key {key!r}")
        obj[key] = value
    return obj


def to_json(signed: SignedCertificate) -> str:
    return canonicalize(signed, include_signature=True).decode("utf-8")


def from_json(text: str | bytes) -> SignedCertificate:
    try:
        data = json.loads(text, object_pairs_hook=_reject_duplicates)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedCertificateError(f"certificate is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedCertificateError("certificate JSON must be an object")
    try:
        return SignedCertificate.model_validate(data)
    except ValidationError as e:
        raise MalformedCertificateError(f"invalid certificate fields: {e}") from e


def to_header(signed: SignedCertificate) -> str:
    return base64.b64encode(canonicalize(signed, include_signature=True)).decode("ascii")


def from_header(value: str) -> SignedCertificate:
    try:
        raw = base64.b64decode(value.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedCertificateError(f"header is not valid base64: {e}") from e
    return from_json(raw)
