"""Tests for the CLI."""

import json

import pytest
from click.testing import CliRunner

from ownproof.certificate import build_certificate, sign_certificate
from ownproof.transport import from_json, to_header, to_json
from verifier_cli.cli import main

TEST_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
TEST_ADDRESS = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"


def _signed():
    cert = build_certificate("identification", "login-challenge-123", "example.app",
                             timestamp=1700000000)
    return sign_certificate(cert, TEST_KEY)


@pytest.fixture
def valid_cert_file(tmp_path):
    """Create a valid signed certificate file."""
    cert_path = tmp_path / "cert.json"
    cert_path.write_text(to_json(_signed()))
    return cert_path


@pytest.fixture
def tampered_cert_file(tmp_path):
    """Create a tampered certificate file."""
    data = json.loads(to_json(_signed()))
    data["payload"]["content"] = "login-challenge-124"
    cert_path = tmp_path / "tampered.json"
    cert_path.write_text(json.dumps(data, indent=2))
    return cert_path


class TestVerify:
    def test_verify_valid_cert(self, valid_cert_file):
        runner = CliRunner()
        result = runner.invoke(main, ["verify", str(valid_cert_file), "--domain", "example.app"])
        assert result.exit_code == 0
        assert "CERTIFICATE VERIFIED" in result.output

    def test_verify_tampered_cert_fails(self, tampered_cert_file):
        runner = CliRunner()
        result = runner.invoke(main, ["verify", str(tampered_cert_file)])
        assert result.exit_code == 1
        assert "signature_invalid" in result.output

    def test_domain_mismatch(self, valid_cert_file):
        runner = CliRunner()
        result = runner.invoke(main, ["verify", str(valid_cert_file), "--domain", "app-b"])
        assert result.exit_code == 1
        assert "domain_mismatch" in result.output

    def test_stale_with_max_age(self, valid_cert_file):
        runner = CliRunner()
        result = runner.invoke(main, [
            "verify", str(valid_cert_file), "--max-age", "60", "--now", str(1700000000 + 61),
        ])
        assert result.exit_code == 1
        assert "timestamp_stale" in result.output

    def test_skew_only_enables_freshness(self, valid_cert_file):
        runner = CliRunner()
        result = runner.invoke(main, [
            "verify", str(valid_cert_file), "--max-skew", "5", "--now", str(1700000000 - 6),
        ])
        assert result.exit_code == 1
        assert "timestamp_future" in result.output

    def test_negative_skew_rejected(self, valid_cert_file):
        result = CliRunner().invoke(main, ["verify", str(valid_cert_file), "--max-skew", "-1"])
        assert result.exit_code == 2

    def test_header_file(self, tmp_path):
        path = tmp_path / "cert.b64"
        path.write_text(to_header(_signed()))
        result = CliRunner().invoke(main, ["verify", str(path)])
        assert result.exit_code == 0

    def test_unparseable_file(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text('{"purpose": "identification"}')
        result = CliRunner().invoke(main, ["verify", str(path)])
        assert result.exit_code != 0
        assert "Invalid certificate file" in result.output


class TestSign:
    def test_sign_to_stdout(self):
        result = CliRunner().invoke(main, [
            "sign", "--purpose", "identification", "--content", "login-challenge-123",
            "--domain", "example.app", "--timestamp", "1700000000", "--private-key", TEST_KEY,
        ])
        assert result.exit_code == 0
        signed = from_json(result.output.strip())
        assert signed.signer == TEST_ADDRESS
        assert signed == _signed()

    def test_sign_key_from_env_to_file(self, tmp_path):
        out = tmp_path / "out.json"
        result = CliRunner().invoke(
            main,
            ["sign", "--purpose", "identification", "--content", "x",
             "--domain", "example.app", "-o", str(out)],
            env={"OWNPROOF_PRIVATE_KEY": TEST_KEY},
        )
        assert result.exit_code == 0
        verify = CliRunner().invoke(main, ["verify", str(out)])
        assert verify.exit_code == 0

    def test_sign_malformed_key(self):
        result = CliRunner().invoke(main, [
            "sign", "--purpose", "identification", "--content", "x",
            "--domain", "example.app", "--private-key", "0x1234",
        ])
        assert result.exit_code != 0
        assert "Malformed private key" in result.output


class TestInspectEncode:
    def test_inspect(self, valid_cert_file):
        result = CliRunner().invoke(main, ["inspect", str(valid_cert_file)])
        assert result.exit_code == 0
        assert "identification" in result.output
        assert TEST_ADDRESS in result.output

    def test_encode_prints_canonical_bytes(self, valid_cert_file):
        result = CliRunner().invoke(main, ["encode", str(valid_cert_file)])
        assert result.exit_code == 0
        assert (
            '{"purpose":"identification","payload":{"type":"text","content":"login-challenge-123"},'
            f'"domain":"example.app","timestamp":1700000000,"signer":"{TEST_ADDRESS}"}}'
        ) in result.output
