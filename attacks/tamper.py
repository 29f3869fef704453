"""
Tamper harness for ownership certificates.

Each attack takes a signed certificate dict (``SignedCertificate.model_dump()``)
and returns a modified deep copy that keeps the original signature:

  T1: purpose edit
  T2: payload type edit
  T3: payload content edit (last digit bumped, e.g. challenge-123 → -124)
  T4: domain swap
  T5: timestamp shift
  T6: signer substitution (claim someone else's address)
  T7: signature bit flip
  T8: signature truncation

T1–T6 must be rejected as SignatureInvalidError, T7 as SignatureInvalidError
or MalformedCertificateError (a flipped bit can break the recovery byte),
and T8 as MalformedCertificateError.
"""

from __future__ import annotations

import copy
from typing import Callable


def t1_purpose_edit(cert_dict: dict, purpose: str = "agreement") -> dict:
    tampered = copy.deepcopy(cert_dict)
    if tampered["purpose"] == purpose:
        purpose = purpose + "-tampered"
    tampered["purpose"] = purpose
    return tampered


def t2_payload_type_edit(cert_dict: dict) -> dict:
    tampered = copy.deepcopy(cert_dict)
    tampered["payload"]["type"] = "json" if tampered["payload"]["type"] != "json" else "text"
    return tampered


def t3_content_edit(cert_dict: dict) -> dict:
    """Bump the last digit of the content, or append one if there is none."""
    tampered = copy.deepcopy(cert_dict)
    content = tampered["payload"]["content"]
    if content and content[-1].isdigit():
        content = content[:-1] + str((int(content[-1]) + 1) % 10)
    else:
        content = content + "1"
    tampered["payload"]["content"] = content
    return tampered


def t4_domain_swap(cert_dict: dict, domain: str = "evil.example") -> dict:
    tampered = copy.deepcopy(cert_dict)
    if tampered["domain"] == domain:
        domain = "other." + domain
    tampered["domain"] = domain
    return tampered


def t5_timestamp_shift(cert_dict: dict, delta: int = 3600) -> dict:
    tampered = copy.deepcopy(cert_dict)
    tampered["timestamp"] = tampered["timestamp"] + delta
    return tampered


def t6_signer_substitution(cert_dict: dict, address: str) -> dict:
    tampered = copy.deepcopy(cert_dict)
    tampered["signer"] = address
    return tampered


def t7_signature_bitflip(cert_dict: dict, byte_index: int = 10) -> dict:
    tampered = copy.deepcopy(cert_dict)
    raw = bytearray.fromhex(tampered["signature"][2:])
    raw[byte_index] ^= 0x01
    tampered["signature"] = "0x" + raw.hex()
    return tampered


def t8_signature_truncation(cert_dict: dict) -> dict:
    tampered = copy.deepcopy(cert_dict)
    tampered["signature"] = tampered["signature"][:-2]
    return tampered


def run_all_attacks(cert_dict: dict, foreign_address: str) -> dict[str, dict]:
    """Apply every attack; *foreign_address* is used for signer substitution."""
    attacks: dict[str, Callable[[dict], dict]] = {
        "T1_purpose_edit": t1_purpose_edit,
        "T2_payload_type_edit": t2_payload_type_edit,
        "T3_content_edit": t3_content_edit,
        "T4_domain_swap": t4_domain_swap,
        "T5_timestamp_shift": t5_timestamp_shift,
        "T6_signer_substitution": lambda c: t6_signer_substitution(c, foreign_address),
        "T7_signature_bitflip": t7_signature_bitflip,
        "T8_signature_truncation": t8_signature_truncation,
    }
    return {name: attack(cert_dict) for name, attack in attacks.items()}
