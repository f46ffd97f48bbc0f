"""Pytest configuration and fixtures: a throwaway PKI and request builders."""

import base64
import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from unittest.mock import Mock

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.x509.oid import NameOID

from alexa_verifier.verification.chain import TrustStore
from alexa_verifier.verification.clock import FixedClock
from alexa_verifier.verification.fetcher import Fetcher
from alexa_verifier.verification.pipeline import RequestVerifier
from alexa_verifier.verification.request import IncomingRequest

NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)
CERT_URL = "https://s3.amazonaws.com/echo.api/cert.pem"
SIGNING_SUBJECT = "echo-api.amazon.com"


def _name(common_name: str) -> x509.Name:
    return x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])


def issue_certificate(
    subject: str,
    public_key,
    issuer: str,
    issuer_key,
    not_before: datetime,
    not_after: datetime,
    ca: bool = False,
) -> x509.Certificate:
    """Issue a certificate signed by ``issuer_key``."""
    return (
        x509.CertificateBuilder()
        .subject_name(_name(subject))
        .issuer_name(_name(issuer))
        .public_key(public_key)
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before)
        .not_valid_after(not_after)
        .add_extension(x509.BasicConstraints(ca=ca, path_length=None), critical=True)
        .sign(issuer_key, hashes.SHA256())
    )


@dataclass
class SkillPKI:
    """Root, intermediate and leaf certificates plus the leaf's signing key."""

    root: x509.Certificate
    intermediate: x509.Certificate
    leaf: x509.Certificate
    leaf_key: rsa.RSAPrivateKey

    @property
    def chain(self) -> list[x509.Certificate]:
        """Leaf-first chain as served in the bundle (root excluded)."""
        return [self.leaf, self.intermediate]

    @property
    def trust_store(self) -> TrustStore:
        """Trust store holding only the test root."""
        return TrustStore([self.root])

    def bundle(self) -> bytes:
        """PEM bundle of the served chain."""
        return b"".join(
            cert.public_bytes(serialization.Encoding.PEM) for cert in self.chain
        )

    def sign(self, body: bytes) -> str:
        """Base64 RSA/SHA-1 signature over ``body`` with the leaf key."""
        signature = self.leaf_key.sign(body, padding.PKCS1v15(), hashes.SHA1())
        return base64.b64encode(signature).decode()


@pytest.fixture(scope="session")
def keys():
    """RSA keys for root, intermediate and leaf (generated once)."""
    return {
        name: rsa.generate_private_key(public_exponent=65537, key_size=2048)
        for name in ("root", "intermediate", "leaf")
    }


@pytest.fixture(scope="session")
def pki_factory(keys):
    """Build a PKI, optionally overriding the leaf subject and validity windows."""

    def build(
        leaf_subject: str = SIGNING_SUBJECT,
        leaf_not_before: Optional[datetime] = None,
        leaf_not_after: Optional[datetime] = None,
        intermediate_not_after: Optional[datetime] = None,
    ) -> SkillPKI:
        root = issue_certificate(
            "Test Root CA",
            keys["root"].public_key(),
            "Test Root CA",
            keys["root"],
            NOW - timedelta(days=3650),
            NOW + timedelta(days=3650),
            ca=True,
        )
        intermediate = issue_certificate(
            "Test Intermediate CA",
            keys["intermediate"].public_key(),
            "Test Root CA",
            keys["root"],
            NOW - timedelta(days=365),
            intermediate_not_after or NOW + timedelta(days=365),
            ca=True,
        )
        leaf = issue_certificate(
            leaf_subject,
            keys["leaf"].public_key(),
            "Test Intermediate CA",
            keys["intermediate"],
            leaf_not_before or NOW - timedelta(days=30),
            leaf_not_after or NOW + timedelta(days=30),
        )
        return SkillPKI(root=root, intermediate=intermediate, leaf=leaf, leaf_key=keys["leaf"])

    return build


@pytest.fixture(scope="session")
def pki(pki_factory) -> SkillPKI:
    """Default, fully valid PKI."""
    return pki_factory()


@pytest.fixture
def now() -> datetime:
    """Reference time used across tests."""
    return NOW


@pytest.fixture
def body() -> bytes:
    """Skill request body stamped with the reference time."""
    timestamp = NOW.strftime("%Y-%m-%dT%H:%M:%SZ")
    return json.dumps({"request": {"timestamp": timestamp}}).encode("utf-8")


@pytest.fixture
def fetcher(pki) -> Mock:
    """Fetcher spy serving the default PKI bundle."""
    stub = Mock(spec=Fetcher)
    stub.fetch.return_value = pki.bundle()
    return stub


@pytest.fixture
def verifier(fetcher, pki) -> RequestVerifier:
    """Verifier wired to the stub fetcher, frozen clock and test root."""
    return RequestVerifier(fetcher=fetcher, clock=FixedClock(NOW), trust_store=pki.trust_store)


@pytest.fixture
def signed_request(pki, body) -> IncomingRequest:
    """Correctly signed request for the default PKI."""
    return IncomingRequest.from_raw(
        cert_chain_url=CERT_URL,
        signature=pki.sign(body),
        raw_body=body,
    )


@pytest.fixture(scope="session")
def certificate_issuer():
    """The certificate issuing helper, for tests building their own certificates."""
    return issue_certificate
