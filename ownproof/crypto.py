"""
Cryptographic primitives for ownproof.

- Keccak-256 hashing and EIP-191 "personal message" digests
- secp256k1 key loading, signing and public-key recovery
- Ethereum address derivation and comparison

The curve math and hashing come from ``eth-keys`` / ``eth-utils``.
Signatures are 65 bytes ``r || s || v`` with ``v`` in {27, 28}, the layout
produced by wallets implementing ``personal_sign``.
"""

from __future__ import annotations

import binascii
import secrets
from dataclasses import dataclass

from eth_keys import keys
from eth_keys.exceptions import BadSignature
from eth_utils import ValidationError, is_address, keccak, to_checksum_address

# Order of the secp256k1 group
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
SECP256K1_HALF_N = SECP256K1_N // 2

SIGNATURE_LENGTH = 65
EIP191_PREFIX = b"\x19Ethereum Signed Message:\n"


# ---------------------------------------------------------------------------
# Hashing
# ---------------------------------------------------------------------------

def keccak256(data: bytes) -> bytes:
    return keccak(data)


def keccak256_hex(data: str | bytes) -> str:
    """Return the 0x-prefixed Keccak-256 hex digest of *data*."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return "0x" + keccak(data).hex()


def message_digest(message: bytes) -> bytes:
    """Keccak-256 of *message* framed as an EIP-191 personal message."""
    return keccak(EIP191_PREFIX + str(len(message)).encode("ascii") + message)


# ---------------------------------------------------------------------------
# Key management
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class KeyPair:
    private_key: keys.PrivateKey
    address: str  # EIP-55 checksum address

    def __repr__(self) -> str:
        return f"KeyPair(address={self.address!r})"


def _hex_to_bytes(value: str) -> bytes:
    text = value[2:] if value[:2] in ("0x", "0X") else value
    return binascii.unhexlify(text)


def load_private_key(key: str | bytes | keys.PrivateKey) -> keys.PrivateKey:
    """Load a secp256k1 private key from hex, raw bytes or an existing key.

    Raises ValueError if the key is not 32 bytes in the range [1, n).
    """
    if isinstance(key, keys.PrivateKey):
        return key
    if isinstance(key, str):
        try:
            raw = _hex_to_bytes(key.strip())
        except (binascii.Error, ValueError) as e:
            raise ValueError("private key is not valid hex") from e
    elif isinstance(key, (bytes, bytearray)):
        raw = bytes(key)
    else:
        raise ValueError(f"unsupported private key type {type(key).__name__}")

    if len(raw) != 32:
        raise ValueError(f"private key must be 32 bytes, got {len(raw)}")
    if not 0 < int.from_bytes(raw, "big") < SECP256K1_N:
        raise ValueError("private key is out of range for secp256k1")
    return keys.PrivateKey(raw)


def address_from_private_key(key: str | bytes | keys.PrivateKey) -> str:
    return load_private_key(key).public_key.to_checksum_address()


def generate_keypair() -> KeyPair:
    """Generate a fresh secp256k1 key pair."""
    while True:
        raw = secrets.token_bytes(32)
        if 0 < int.from_bytes(raw, "big") < SECP256K1_N:
            break
    sk = keys.PrivateKey(raw)
    return KeyPair(private_key=sk, address=sk.public_key.to_checksum_address())


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------

def normalize_address(address: str) -> str:
    """Return the checksum form of *address*; ValueError if it is not one."""
    if not isinstance(address, str) or not is_address(address):
        raise ValueError(f"not a valid address: {address!r}")
    return to_checksum_address(address)


def addresses_equal(a: str, b: str) -> bool:
    """Exact 20-byte equality of two addresses, ignoring hex letter case."""
    return normalize_address(a) == normalize_address(b)


# ---------------------------------------------------------------------------
# Signing & recovery
# ---------------------------------------------------------------------------

def encode_signature(sig: keys.Signature) -> str:
    raw = sig.r.to_bytes(32, "big") + sig.s.to_bytes(32, "big") + bytes([sig.v + 27])
    return "0x" + raw.hex()


def decode_signature(signature: str) -> keys.Signature:
    """Parse a 0x-prefixed 65-byte hex signature.

    Accepts ``v`` as either {0, 1} or {27, 28}. ``r`` must lie in [1, n) and
    ``s`` in [1, n/2] (the low-s form wallets emit), so each certificate has
    exactly one valid signature string. Raises ValueError on any structural
    problem.
    """
    try:
        raw = _hex_to_bytes(signature)
    except (binascii.Error, ValueError) as e:
        raise ValueError("signature is not valid hex") from e
    if len(raw) != SIGNATURE_LENGTH:
        raise ValueError(f"signature must be {SIGNATURE_LENGTH} bytes, got {len(raw)}")

    v = raw[64]
    if v >= 27:
        v -= 27
    if v not in (0, 1):
        raise ValueError(f"invalid recovery id {raw[64]}")

    r = int.from_bytes(raw[:32], "big")
    s = int.from_bytes(raw[32:64], "big")
    if not 0 < r < SECP256K1_N:
        raise ValueError("signature r is out of range for secp256k1")
    if not 0 < s <= SECP256K1_HALF_N:
        raise ValueError("signature s is not in the low-s range")
    try:
        return keys.Signature(vrs=(v, r, s))
    except (ValidationError, BadSignature) as e:
        raise ValueError(f"invalid signature values: {e}") from e


def sign_digest(digest: bytes, private_key: keys.PrivateKey) -> str:
    """Sign a 32-byte digest; return the 0x-prefixed 65-byte signature."""
    return encode_signature(private_key.sign_msg_hash(digest))


def recover_address(digest: bytes, signature: keys.Signature) -> str:
    """Recover the checksum address that produced *signature* over *digest*.

    Raises BadSignature if no public key can be recovered.
    """
    try:
        public_key = signature.recover_public_key_from_msg_hash(digest)
    except (ValidationError, ValueError) as e:
        raise BadSignature(str(e)) from e
    return public_key.to_checksum_address()
