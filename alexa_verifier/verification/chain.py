"""Certificate chain validation: temporal validity, subject identity, trust."""

import logging
import ssl
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from cryptography import x509
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm

from alexa_verifier.settings import get_settings
from alexa_verifier.verification.outcome import RejectionReason, StageResult

logger = logging.getLogger(__name__)

SIGNING_CERT_SUBJECT = "echo-api.amazon.com"


def _within_validity(cert: x509.Certificate, now: datetime) -> bool:
    """Check ``not_before <= now <= not_after``."""
    return cert.not_valid_before_utc <= now <= cert.not_valid_after_utc


def _is_ca(cert: x509.Certificate) -> bool:
    """Check the BasicConstraints CA flag; unparsable extensions count as not a CA."""
    try:
        constraints = cert.extensions.get_extension_for_class(x509.BasicConstraints)
    except (x509.ExtensionNotFound, x509.DuplicateExtension, ValueError):
        return False
    return constraints.value.ca


def _issued_by(cert: x509.Certificate, issuer: x509.Certificate) -> bool:
    """Check that ``issuer`` names and signed ``cert``."""
    try:
        cert.verify_directly_issued_by(issuer)
    except (ValueError, TypeError, InvalidSignature, UnsupportedAlgorithm):
        return False
    return True


class TrustStore:
    """Read-only set of trusted root certificates."""

    def __init__(self, anchors: Iterable[x509.Certificate]):
        """Initialize with the trust anchors."""
        self._anchors = tuple(anchors)

    @property
    def anchors(self) -> tuple[x509.Certificate, ...]:
        """Trusted root certificates."""
        return self._anchors

    def __len__(self) -> int:
        """Number of trust anchors."""
        return len(self._anchors)

    @classmethod
    def from_pem(cls, data: bytes) -> "TrustStore":
        """Load anchors from PEM bundle bytes."""
        return cls(x509.load_pem_x509_certificates(data))

    @classmethod
    def from_file(cls, path: str) -> "TrustStore":
        """Load anchors from a PEM bundle file."""
        return cls.from_pem(Path(path).read_bytes())

    @classmethod
    def from_system(cls) -> "TrustStore":
        """Load anchors from the platform's default CA bundle."""
        paths = ssl.get_default_verify_paths()
        for candidate in (paths.cafile, paths.openssl_cafile):
            if candidate and Path(candidate).is_file():
                logger.info(f"Loading trust anchors from {candidate}")
                return cls.from_file(candidate)
        raise FileNotFoundError("No default CA bundle found on this system")

    @classmethod
    def default(cls) -> "TrustStore":
        """Load anchors from the configured bundle, or the platform bundle."""
        bundle_path = get_settings().trust_anchor_bundle_path
        if bundle_path:
            return cls.from_file(bundle_path)
        return cls.from_system()

    def anchors_certificate(self, cert: x509.Certificate, now: datetime) -> bool:
        """Whether ``cert`` is an anchor or is directly issued by a valid CA anchor."""
        for anchor in self._anchors:
            if cert == anchor:
                return True
            if (
                anchor.subject == cert.issuer
                and _within_validity(anchor, now)
                and _is_ca(anchor)
                and _issued_by(cert, anchor)
            ):
                return True
        return False


class ChainValidator:
    """Validate a fetched chain against the reference time and trust anchors."""

    def __init__(self, trust_store: TrustStore):
        """Initialize with the trust anchors to verify against."""
        self.trust_store = trust_store

    def validate(
        self, chain: list[x509.Certificate], now: datetime
    ) -> StageResult[x509.Certificate]:
        """
        Validate the chain and return its leaf.

        Checks run in order: leaf validity window (both bounds inclusive),
        leaf subject, then the trust path from the leaf to an anchor.
        """
        if not chain:
            return StageResult.failure(
                RejectionReason.UNTRUSTED_CHAIN, "Certificate chain is empty"
            )
        leaf = chain[0]

        # 1. Temporal validity
        if now < leaf.not_valid_before_utc:
            return StageResult.failure(
                RejectionReason.CERT_NOT_YET_VALID,
                f"Certificate is not valid before {leaf.not_valid_before_utc.isoformat()}",
            )
        if now > leaf.not_valid_after_utc:
            return StageResult.failure(
                RejectionReason.CERT_EXPIRED,
                f"Certificate expired at {leaf.not_valid_after_utc.isoformat()}",
            )

        # 2. Subject identity (literal substring)
        subject = leaf.subject.rfc4514_string()
        if SIGNING_CERT_SUBJECT not in subject:
            return StageResult.failure(
                RejectionReason.INVALID_CERT_SUBJECT,
                f"Certificate subject {subject!r} is not for {SIGNING_CERT_SUBJECT}",
            )

        # 3. Chain of trust
        failure = self._verify_trust(chain, now)
        if failure:
            return StageResult.failure(RejectionReason.UNTRUSTED_CHAIN, failure)

        return StageResult.success(leaf)

    def _verify_trust(self, chain: list[x509.Certificate], now: datetime) -> Optional[str]:
        """Walk the chain leaf-first; return a failure message or None."""
        for position, cert in enumerate(chain):
            if position > 0 and not _within_validity(cert, now):
                return (
                    f"Intermediate certificate {cert.subject.rfc4514_string()!r} "
                    "is outside its validity period"
                )

            if self.trust_store.anchors_certificate(cert, now):
                return None

            if position + 1 == len(chain):
                return "Certificate chain does not lead to a trusted root"

            issuer = chain[position + 1]
            if not _is_ca(issuer):
                return f"Certificate {issuer.subject.rfc4514_string()!r} is not a CA"
            if not _issued_by(cert, issuer):
                return (
                    f"Certificate {cert.subject.rfc4514_string()!r} was not issued by "
                    f"{issuer.subject.rfc4514_string()!r}"
                )

        return "Certificate chain does not lead to a trusted root"
