"""
Error taxonomy for ownership certificates.

Callers must be able to tell malformed input, a bad signature and a context
mismatch apart, so every verification failure carries a ``kind``.
"""

from __future__ import annotations

from .schema import FailureKind


class OwnProofError(Exception):
    """Base class for every error raised by ownproof."""


class EncodingError(OwnProofError):
    """A required field is missing or has the wrong type."""


class SigningError(OwnProofError):
    """Malformed private key, signer mismatch, or upstream encoding failure."""


class VerificationError(OwnProofError):
    kind: FailureKind

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class MalformedCertificateError(VerificationError):
    kind = FailureKind.MALFORMED


class SignatureInvalidError(VerificationError):
    kind = FailureKind.SIGNATURE_INVALID


class ContextMismatchError(VerificationError):
    """Valid signature, wrong context for the relying party."""


class DomainMismatchError(ContextMismatchError):
    kind = FailureKind.DOMAIN_MISMATCH


class PurposeMismatchError(ContextMismatchError):
    kind = FailureKind.PURPOSE_MISMATCH


class StaleCertificateError(ContextMismatchError):
    kind = FailureKind.TIMESTAMP_STALE


class FutureCertificateError(ContextMismatchError):
    kind = FailureKind.TIMESTAMP_FUTURE
