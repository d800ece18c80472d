"""X.509 certificate wrapper with PEM and JSON forms, and key pair records."""

from __future__ import annotations

import base64
import binascii
import enum
import hashlib
import json
import re
from dataclasses import dataclass
from typing import Optional, Union

from cryptography import x509
from cryptography.hazmat.primitives.serialization import Encoding

_PEM_BLOCK = re.compile(
    rb"-----BEGIN ([^\r\n-]*)-----\r?\n(.*?)-----END \1-----", re.DOTALL
)


class CertificateName(str, enum.Enum):
    """Names of the well-known certificates."""

    CLUSTER = "cluster"
    SERVER = "server"


@dataclass
class KeyPair:
    """A certificate together with its private key and optional CA."""

    cert: str = ""
    key: str = ""
    ca: str = ""


@dataclass
class ClusterCertificatePut:
    """The content of a new cluster key pair and CA."""

    public_key: str = ""
    private_key: str = ""
    ca: str = ""


def _decode_pem_block(data: bytes) -> Optional[bytes]:
    """Return the bytes of the first well-formed PEM block of any type."""
    for match in _PEM_BLOCK.finditer(data):
        lines = match.group(2).splitlines()
        if lines and b":" in lines[0]:
            while lines and b":" in lines[0]:
                lines.pop(0)
            if lines and not lines[0].strip():
                lines.pop(0)
        try:
            return base64.b64decode(b"".join(line.strip() for line in lines), validate=True)
        except binascii.Error:
            continue
    return None


@dataclass(frozen=True)
class X509Certificate:
    """An optional X.509 certificate; the default value holds none."""

    certificate: Optional[x509.Certificate] = None

    def is_empty(self) -> bool:
        """Return True if no certificate is held."""
        return self.certificate is None

    def to_pem(self) -> str:
        """Return the PEM text of the certificate, or "" if there is none."""
        if self.certificate is None:
            return ""
        return self.certificate.public_bytes(Encoding.PEM).decode("ascii")

    def __str__(self) -> str:
        return self.to_pem()

    def fingerprint(self) -> str:
        """Return the SHA-256 fingerprint of the DER bytes as lowercase hex."""
        if self.certificate is None:
            raise ValueError("No certificate to fingerprint")
        return hashlib.sha256(self.certificate.public_bytes(Encoding.DER)).hexdigest()

    def to_json(self) -> str:
        """Return the JSON text for this certificate: a quoted PEM string."""
        return json.dumps(self.to_pem())

    @classmethod
    def from_json(cls, data: Union[str, bytes]) -> "X509Certificate":
        """Parse the JSON text of a PEM string."""
        value = json.loads(data)
        if value is None:
            value = ""
        if not isinstance(value, str):
            raise ValueError(f"Cannot decode {type(value).__name__} as a certificate")
        return parse_x509_certificate(value)


def parse_x509_certificate(text: str) -> X509Certificate:
    """Decode the first PEM block in text and parse it as a certificate."""
    der = _decode_pem_block(text.encode("utf-8"))
    if der is None:
        raise ValueError("Failed to decode certificate")
    return X509Certificate(x509.load_der_x509_certificate(der))