"""Request/response models for the ownproof API."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from ownproof.schema import FailureKind


# ---------------------------------------------------------------------------
# POST /ownproof/verify
# ---------------------------------------------------------------------------

class VerifyRequest(BaseModel):
    certificate: dict  # raw signed certificate, validated by the verifier
    expected_domain: Optional[str] = Field(default=None, max_length=253)
    expected_purpose: Optional[str] = Field(default=None, max_length=200)


class VerifyResponse(BaseModel):
    valid: bool
    signer: Optional[str] = None
    domain: Optional[str] = None
    purpose: Optional[str] = None
    timestamp: Optional[int] = None
    failure: Optional[FailureKind] = None
    detail: str = ""


# ---------------------------------------------------------------------------
# POST /ownproof/encode
# ---------------------------------------------------------------------------

class EncodeRequest(BaseModel):
    certificate: dict


class EncodeResponse(BaseModel):
    format: str
    canonical: str
    digest: str  # 0x-prefixed EIP-191 message digest


# ---------------------------------------------------------------------------
# GET /ownproof/whoami
# ---------------------------------------------------------------------------

class WhoAmIResponse(BaseModel):
    signer: str
    domain: str
    purpose: str
    timestamp: int
