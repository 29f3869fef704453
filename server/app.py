"""
ownproof FastAPI relying-party service.

Endpoints:
  POST /ownproof/verify    verify a signed certificate from the request body
  POST /ownproof/encode    return the canonical signing bytes of a certificate
  GET  /ownproof/whoami    authenticate via the X-Ownership-Certificate header
"""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, Header, HTTPException

from ownproof.canonicalize import CANONICAL_FORMAT, canonicalize
from ownproof.config import VerifierConfig
from ownproof.crypto import message_digest
from ownproof.errors import EncodingError, VerificationError
from ownproof.transport import HEADER_NAME, from_header
from ownproof.verifier import check_certificate, verify_with_config

from .models import (
    EncodeRequest,
    EncodeResponse,
    VerifyRequest,
    VerifyResponse,
    WhoAmIResponse,
)

app = FastAPI(
    title="ownproof",
    description="Verify signed proofs of blockchain address ownership",
    version="0.1.0",
)

# ---------------------------------------------------------------------------
# Global state (read-only config, loaded from the environment once)
# ---------------------------------------------------------------------------
_config: VerifierConfig | None = None


def get_config() -> VerifierConfig:
    global _config
    if _config is None:
        _config = VerifierConfig.from_env()
    return _config


# ---------------------------------------------------------------------------
# POST /ownproof/verify
# ---------------------------------------------------------------------------

@app.post("/ownproof/verify", response_model=VerifyResponse)
async def verify(req: VerifyRequest):
    """Verify a certificate; request expectations override the server config."""
    config = get_config()
    result = check_certificate(
        req.certificate,
        expected_domain=config.expected_domain if req.expected_domain is None else req.expected_domain,
        expected_purpose=config.expected_purpose if req.expected_purpose is None else req.expected_purpose,
        freshness=config.freshness,
    )
    return VerifyResponse(**result.model_dump())


# ---------------------------------------------------------------------------
# POST /ownproof/encode
# ---------------------------------------------------------------------------

@app.post("/ownproof/encode", response_model=EncodeResponse)
async def encode(req: EncodeRequest):
    """Return the canonical bytes a signer must sign for this certificate."""
    try:
        canonical = canonicalize(req.certificate)
    except EncodingError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return EncodeResponse(
        format=CANONICAL_FORMAT,
        canonical=canonical.decode("utf-8"),
        digest="0x" + message_digest(canonical).hex(),
    )


# ---------------------------------------------------------------------------
# GET /ownproof/whoami (header-authenticated identity)
# ---------------------------------------------------------------------------

@app.get("/ownproof/whoami", response_model=WhoAmIResponse)
async def whoami(
    certificate: Optional[str] = Header(default=None, alias=HEADER_NAME),
):
    """Return the proven signer address for a certificate carried in a header."""
    if not certificate:
        raise HTTPException(status_code=401, detail={"failure": "missing", "detail": f"{HEADER_NAME} header required"})
    try:
        signed = from_header(certificate)
        result = verify_with_config(signed, get_config())
    except VerificationError as e:
        raise HTTPException(status_code=401, detail={"failure": e.kind.value, "detail": e.detail})

    return WhoAmIResponse(
        signer=result.signer,
        domain=result.domain,
        purpose=result.purpose,
        timestamp=result.timestamp,
    )
