"""
Ownership certificate schema — Pydantic v2 models.

  Certificate        → unsigned statement; ``signer`` may still be unset
  SignedCertificate  → same fields with ``signer`` and ``signature`` required

The two are separate types (not a subclass pair) so that a verifier can only
ever be handed something that carries a signature.

All models are frozen and reject unknown fields; a changed certificate is a
new object (``model_copy(update=...)``).
Timestamps are integer seconds since the Unix epoch.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class FailureKind(str, Enum):
    MALFORMED = "malformed"
    SIGNATURE_INVALID = "signature_invalid"
    DOMAIN_MISMATCH = "domain_mismatch"
    PURPOSE_MISMATCH = "purpose_mismatch"
    TIMESTAMP_STALE = "timestamp_stale"
    TIMESTAMP_FUTURE = "timestamp_future"


# ---------------------------------------------------------------------------
# Certificate models
# ---------------------------------------------------------------------------

class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class Payload(_Frozen):
    type: StrictStr  # e.g. "text"; tells the verifier how to read content
    content: StrictStr


class _CertificateBody(_Frozen):
    purpose: StrictStr = Field(min_length=1)
    payload: Payload
    domain: StrictStr
    timestamp: StrictInt


class Certificate(_CertificateBody):
    """Unsigned ownership statement."""
    signer: Optional[StrictStr] = None  # filled in from the key when signing


class SignedCertificate(_CertificateBody):
    """Certificate + recoverable secp256k1 signature (0x-prefixed hex)."""
    signer: StrictStr
    signature: StrictStr = Field(min_length=1)

    def unsigned(self) -> Certificate:
        """Return the subset of fields the signature was computed over."""
        return Certificate.model_validate(self.model_dump(exclude={"signature"}))


# ---------------------------------------------------------------------------
# Verification outcome
# ---------------------------------------------------------------------------

class VerificationResult(BaseModel):
    valid: bool
    signer: Optional[str] = None
    domain: Optional[str] = None
    purpose: Optional[str] = None
    timestamp: Optional[int] = None
    failure: Optional[FailureKind] = None
    detail: str = ""
