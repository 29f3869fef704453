"""ownproof — signed proofs of blockchain address ownership."""

from .schema import (
    Certificate,
    FailureKind,
    Payload,
    SignedCertificate,
    VerificationResult,
)
from .errors import (
    ContextMismatchError,
    DomainMismatchError,
    EncodingError,
    FutureCertificateError,
    MalformedCertificateError,
    OwnProofError,
    PurposeMismatchError,
    SignatureInvalidError,
    SigningError,
    StaleCertificateError,
    VerificationError,
)
from .crypto import (
    KeyPair,
    address_from_private_key,
    generate_keypair,
    keccak256_hex,
    message_digest,
)
from .canonicalize import CANONICAL_FORMAT, canonicalize, canonicalize_json
from .certificate import build_certificate, sign_certificate
from .config import FreshnessPolicy, VerifierConfig, freshness_policy
from .verifier import check_certificate, verify_certificate, verify_with_config
from .transport import from_header, from_json, to_header, to_json

__all__ = [
    "Certificate",
    "FailureKind",
    "Payload",
    "SignedCertificate",
    "VerificationResult",
    "ContextMismatchError",
    "DomainMismatchError",
    "EncodingError",
    "FutureCertificateError",
    "MalformedCertificateError",
    "OwnProofError",
    "PurposeMismatchError",
    "SignatureInvalidError",
    "SigningError",
    "StaleCertificateError",
    "VerificationError",
    "KeyPair",
    "address_from_private_key",
    "generate_keypair",
    "keccak256_hex",
    "message_digest",
    "CANONICAL_FORMAT",
    "canonicalize",
    "canonicalize_json",
    "build_certificate",
    "sign_certificate",
    "FreshnessPolicy",
    "freshness_policy",
    "VerifierConfig",
    "check_certificate",
    "verify_certificate",
    "verify_with_config",
    "from_header",
    "from_json",
    "to_header",
    "to_json",
]
