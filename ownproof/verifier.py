"""
Ownership certificate verifier.

Linear, all-or-nothing check sequence:
  1. structure    fields present and typed, signer is an address,
                  signature decodes to 65 bytes       → MalformedCertificateError
  2. split        unsigned subset / signature
  3. encode       the same ``canonicalize`` the signer used
  4. digest       EIP-191 Keccak-256
  5. recover      recovered address == claimed signer → SignatureInvalidError
  6. context      domain / purpose                    → Domain/PurposeMismatchError
  7. freshness    only with a FreshnessPolicy         → Stale/FutureCertificateError

``verify_certificate`` raises on the first failing step.
``check_certificate`` runs the same sequence and reports the outcome as a
VerificationResult instead of raising.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional, Union

from eth_keys.exceptions import BadSignature
from pydantic import ValidationError

from .canonicalize import canonicalize
from .certificate import current_timestamp
from .config import FreshnessPolicy, VerifierConfig
from .crypto import decode_signature, message_digest, normalize_address, recover_address
from .errors import (
    DomainMismatchError,
    EncodingError,
    FutureCertificateError,
    MalformedCertificateError,
    PurposeMismatchError,
    SignatureInvalidError,
    StaleCertificateError,
    VerificationError,
)
from .schema import SignedCertificate, VerificationResult

logger = logging.getLogger(__name__)

SignedLike = Union[SignedCertificate, Mapping[str, Any]]


def _parse(signed: SignedLike) -> SignedCertificate:
    if isinstance(signed, SignedCertificate):
        return signed
    if not isinstance(signed, Mapping):
        raise MalformedCertificateError(
            f"expected a signed certificate, got {type(signed).__name__}"
        )
    if "signature" not in signed:
        raise MalformedCertificateError("signature is missing")
    try:
        return SignedCertificate.model_validate(dict(signed))
    except ValidationError as e:
        raise MalformedCertificateError(f"invalid certificate fields: {e}") from e


def _check_freshness(cert: SignedCertificate, policy: FreshnessPolicy, now: int) -> None:
    if cert.timestamp > now + policy.max_future_skew:
        raise FutureCertificateError(
            f"timestamp {cert.timestamp} is {cert.timestamp - now}s in the future "
            f"(allowed skew {policy.max_future_skew}s)"
        )
    if policy.max_age is not None and now - cert.timestamp > policy.max_age:
        raise StaleCertificateError(
            f"certificate is {now - cert.timestamp}s old (max age {policy.max_age}s)"
        )


def _run_checks(
    signed: SignedLike,
    expected_domain: Optional[str],
    expected_purpose: Optional[str],
    freshness: Optional[FreshnessPolicy],
    now: Optional[int],
) -> VerificationResult:
    # 1. Structure
    cert = _parse(signed)
    try:
        claimed = normalize_address(cert.signer)
    except ValueError as e:
        raise MalformedCertificateError(f"signer: {e}") from e
    try:
        signature = decode_signature(cert.signature)
    except ValueError as e:
        raise MalformedCertificateError(f"signature: {e}") from e

    # 2-4. Split, re-encode, hash
    try:
        canonical = canonicalize(cert.unsigned())
    except EncodingError as e:
        raise MalformedCertificateError(f"cannot encode certificate: {e}") from e
    digest = message_digest(canonical)

    # 5. Recover and compare
    try:
        recovered = recover_address(digest, signature)
    except BadSignature as e:
        raise SignatureInvalidError(f"cannot recover signer from signature: {e}") from e
    if recovered != claimed:
        raise SignatureInvalidError(
            f"signature was produced by {recovered}, not by claimed signer {claimed}"
        )

    # 6. Context
    if expected_domain is not None and cert.domain != expected_domain:
        raise DomainMismatchError(
            f"certificate domain {cert.domain!r} does not match {expected_domain!r}"
        )
    if expected_purpose is not None and cert.purpose != expected_purpose:
        raise PurposeMismatchError(
            f"certificate purpose {cert.purpose!r} does not match {expected_purpose!r}"
        )

    # 7. Freshness
    if freshness is not None:
        _check_freshness(cert, freshness, current_timestamp() if now is None else now)

    return VerificationResult(
        valid=True,
        signer=claimed,
        domain=cert.domain,
        purpose=cert.purpose,
        timestamp=cert.timestamp,
    )


def verify_certificate(
    signed: SignedLike,
    expected_domain: Optional[str] = None,
    expected_purpose: Optional[str] = None,
    freshness: Optional[FreshnessPolicy] = None,
    now: Optional[int] = None,
) -> VerificationResult:
    """
    Verify a signed ownership certificate.

    Returns a successful VerificationResult, or raises a VerificationError
    subclass naming the check that failed. A signature that is valid for a
    different key than ``signer`` is rejected as SignatureInvalidError.
    """
    try:
        result = _run_checks(signed, expected_domain, expected_purpose, freshness, now)
    except VerificationError as e:
        logger.warning(f"Certificate rejected ({e.kind.value}): {e.detail}")
        raise
    logger.debug(f"Certificate verified for {result.signer} (domain={result.domain!r})")
    return result


def check_certificate(
    signed: SignedLike,
    expected_domain: Optional[str] = None,
    expected_purpose: Optional[str] = None,
    freshness: Optional[FreshnessPolicy] = None,
    now: Optional[int] = None,
) -> VerificationResult:
    """Like verify_certificate, but failures come back as a result value."""
    try:
        return verify_certificate(
            signed,
            expected_domain=expected_domain,
            expected_purpose=expected_purpose,
            freshness=freshness,
            now=now,
        )
    except VerificationError as e:
        signer = signed.get("signer") if isinstance(signed, Mapping) else getattr(signed, "signer", None)
        return VerificationResult(
            valid=False,
            signer=signer if isinstance(signer, str) else None,
            failure=e.kind,
            detail=e.detail,
        )


def verify_with_config(
    signed: SignedLike,
    config: VerifierConfig,
    now: Optional[int] = None,
) -> VerificationResult:
    """verify_certificate with the expectations of a VerifierConfig."""
    return verify_certificate(
        signed,
        expected_domain=config.expected_domain,
        expected_purpose=config.expected_purpose,
        freshness=config.freshness,
        now=now,
    )
