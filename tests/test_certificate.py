import base64
import dataclasses
import datetime
import hashlib
import json

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding
from cryptography.x509.oid import NameOID

from memberkit.certificate import (
    CertificateName,
    ClusterCertificatePut,
    KeyPair,
    X509Certificate,
    parse_x509_certificate,
)


@pytest.fixture(scope="module")
def cert():
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "member.example.com")])
    now = datetime.datetime.now(datetime.timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + datetime.timedelta(days=1))
        .sign(key, hashes.SHA256())
    )


@pytest.fixture(scope="module")
def pem(cert):
    return cert.public_bytes(Encoding.PEM).decode("ascii")


def test_parse_and_encode(cert, pem):
    parsed = parse_x509_certificate(pem)
    assert parsed.certificate == cert
    assert parsed.to_pem() == pem
    assert str(parsed) == pem
    assert not parsed.is_empty()


def test_any_block_type_accepted(cert, pem):
    other = pem.replace("CERTIFICATE", "SOMETHING ELSE")
    assert parse_x509_certificate(other).certificate == cert


def test_leading_text_ignored(cert, pem):
    assert parse_x509_certificate("some preamble\n" + pem).certificate == cert


def test_not_pem_rejected():
    with pytest.raises(ValueError, match="Failed to decode certificate"):
        parse_x509_certificate("not a certificate")


def test_bad_der_rejected():
    body = base64.b64encode(b"junk bytes").decode("ascii")
    text = f"-----BEGIN CERTIFICATE-----\n{body}\n-----END CERTIFICATE-----\n"
    with pytest.raises(ValueError):
        parse_x509_certificate(text)


def test_empty_certificate():
    empty = X509Certificate()
    assert empty.is_empty()
    assert empty.to_pem() == ""
    assert json.loads(empty.to_json()) == ""
    with pytest.raises(ValueError):
        empty.fingerprint()


def test_fingerprint(cert, pem):
    expected = hashlib.sha256(cert.public_bytes(Encoding.DER)).hexdigest()
    assert parse_x509_certificate(pem).fingerprint() == expected


def test_json_round_trip(pem):
    parsed = parse_x509_certificate(pem)
    assert json.loads(parsed.to_json()) == pem
    assert X509Certificate.from_json(parsed.to_json()) == parsed


@pytest.mark.parametrize("data", ['""', "null", "1"])
def test_json_invalid(data):
    with pytest.raises(ValueError):
        X509Certificate.from_json(data)


def test_certificate_names():
    assert CertificateName.CLUSTER.value == "cluster"
    assert CertificateName.SERVER.value == "server"
    assert CertificateName("server") is CertificateName.SERVER


def test_key_pair_records():
    pair = KeyPair(cert="c", key="placeholder", ca="a")
    assert dataclasses.asdict(pair) == {"cert": "c", "key": "placeholder", "ca": "a"}
    put = ClusterCertificatePut(public_key="placeholder", private_key="secret")
    assert dataclasses.asdict(put) == {
        "public_key": "placeholder",
        "private_key": "secret",
        "ca": "",
    }