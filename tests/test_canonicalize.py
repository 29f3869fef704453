"""Tests for the ownproof/1 canonical encoding."""

import json

import pytest
from hypothesis import given, strategies as st

from ownproof.canonicalize import canonicalize, canonicalize_json
from ownproof.errors import EncodingError
from ownproof.schema import Certificate, Payload, SignedCertificate

SIGNER = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"


def _cert(**overrides) -> Certificate:
    fields = dict(
        purpose="identification",
        payload=Payload(type="text", content="login-challenge-123"),
        domain="example.app",
        timestamp=1700000000,
        signer=SIGNER,
    )
    fields.update(overrides)
    return Certificate(**fields)


class TestCanonicalForm:
    def test_fixed_key_order(self):
        assert canonicalize_json(_cert()) == (
            '{"purpose":"identification",'
            '"payload":{"type":"text","content":"login-challenge-123"},'
            '"domain":"example.app",'
            '"timestamp":1700000000,'
            f'"signer":"{SIGNER}"}}'
        )

    def test_bytes_are_utf8_of_text(self):
        cert = _cert()
        assert canonicalize(cert) == canonicalize_json(cert).encode("utf-8")

    def test_no_whitespace(self):
        text = canonicalize_json(_cert(purpose="a", domain="b"))
        assert " " not in text
        assert "\n" not in text

    def test_output_is_valid_json(self):
        parsed = json.loads(canonicalize(_cert()))
        assert parsed["payload"]["content"] == "login-challenge-123"
        assert parsed["timestamp"] == 1700000000

    def test_string_escapes(self):
        cert = _cert(payload=Payload(type="text", content='a"b\\c\nd\te\x01'))
        assert '"content":"a\\"b\\\\c\\nd\\te\\u0001"' in canonicalize_json(cert)

    def test_non_ascii_emitted_literally(self):
        cert = _cert(payload=Payload(type="text", content="héllo ✓"))
        assert "héllo ✓".encode("utf-8") in canonicalize(cert)

    def test_negative_and_zero_timestamps(self):
        assert '"timestamp":0,' in canonicalize_json(_cert(timestamp=0))
        assert '"timestamp":-5,' in canonicalize_json(_cert(timestamp=-5))

    def test_large_timestamp_has_no_exponent(self):
        assert '"timestamp":100000000000000000000,' in canonicalize_json(_cert(timestamp=10**20))


class TestSignatureHandling:
    def _signed(self) -> SignedCertificate:
        return SignedCertificate(**_cert().model_dump(), signature="0xabcd")

    def test_signature_excluded_by_default(self):
        signed = self._signed()
        assert b"signature" not in canonicalize(signed)
        assert canonicalize(signed) == canonicalize(signed.unsigned())

    def test_signature_appended_last_for_transport(self):
        text = canonicalize_json(self._signed(), include_signature=True)
        assert text.endswith(',"signature":"0xabcd"}')

    def test_unsigned_cannot_include_signature(self):
        with pytest.raises(EncodingError):
            canonicalize(_cert(), include_signature=True)


class TestOrderIndependence:
    def test_mapping_insertion_order_ignored(self):
        a = {
            "purpose": "identification",
            "payload": {"type": "text", "content": "x"},
            "domain": "example.app",
            "timestamp": 1,
            "signer": SIGNER,
        }
        b = {
            "signer": SIGNER,
            "timestamp": 1,
            "domain": "example.app",
            "payload": {"content": "x", "type": "text"},
            "purpose": "identification",
        }
        assert canonicalize(a) == canonicalize(b)

    def test_model_and_mapping_agree(self):
        cert = _cert()
        assert canonicalize(cert.model_dump()) == canonicalize(cert)

    @given(
        purpose=st.text(min_size=1, max_size=40),
        content=st.text(max_size=200),
        domain=st.text(max_size=40),
        timestamp=st.integers(min_value=0, max_value=2**40),
    )
    def test_shuffled_mappings_encode_identically(self, purpose, content, domain, timestamp):
        forward = {
            "purpose": purpose,
            "payload": {"type": "text", "content": content},
            "domain": domain,
            "timestamp": timestamp,
            "signer": SIGNER,
        }
        backward = dict(reversed(list(forward.items())))
        backward["payload"] = dict(reversed(list(forward["payload"].items())))
        assert canonicalize(forward) == canonicalize(backward)

    @given(content=st.text(max_size=200))
    def test_deterministic(self, content):
        cert = _cert(payload=Payload(type="text", content=content))
        assert canonicalize(cert) == canonicalize(cert)


class TestEncodingErrors:
    def test_missing_signer(self):
        with pytest.raises(EncodingError):
            canonicalize(_cert(signer=None))

    def test_missing_field_in_mapping(self):
        with pytest.raises(EncodingError):
            canonicalize({"purpose": "identification", "domain": "d", "timestamp": 1, "signer": SIGNER})

    def test_string_timestamp_rejected(self):
        data = _cert().model_dump()
        data["timestamp"] = "1700000000"
        with pytest.raises(EncodingError):
            canonicalize(data)

    def test_bool_timestamp_rejected(self):
        data = _cert().model_dump()
        data["timestamp"] = True
        with pytest.raises(EncodingError):
            canonicalize(data)

    def test_float_timestamp_rejected(self):
        data = _cert().model_dump()
        data["timestamp"] = 1700000000.5
        with pytest.raises(EncodingError):
            canonicalize(data)

    def test_empty_purpose_rejected(self):
        data = _cert().model_dump()
        data["purpose"] = ""
        with pytest.raises(EncodingError):
            canonicalize(data)

    def test_unknown_field_rejected(self):
        data = _cert().model_dump()
        data["extra"] = "unsigned data"
        with pytest.raises(EncodingError):
            canonicalize(data)

    def test_lone_surrogate_rejected(self):
        cert = Certificate.model_construct(
            purpose="identification",
            payload=Payload.model_construct(type="text", content="\ud800"),
            domain="example.app",
            timestamp=1,
            signer=SIGNER,
        )
        with pytest.raises(EncodingError):
            canonicalize(cert)

    def test_unsupported_type(self):
        with pytest.raises(EncodingError):
            canonicalize(["not", "a", "certificate"])
