"""Retrieval of the PEM certificate bundle named by the request."""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx
from cryptography import x509

from alexa_verifier.settings import get_settings
from alexa_verifier.utils.metrics import cert_fetch_duration, cert_fetch_failures
from alexa_verifier.verification.outcome import RejectionReason, StageResult
from alexa_verifier.verification.url import ParsedCertURL

logger = logging.getLogger(__name__)


class CertFetchError(Exception):
    """Raised by a fetcher when the bundle cannot be retrieved."""


class Fetcher(ABC):
    """Abstract fetch capability mapping a URL to raw bytes."""

    @abstractmethod
    def fetch(self, url: str) -> bytes:
        """Return the body at ``url`` or raise CertFetchError."""
        pass


class HttpxFetcher(Fetcher):
    """Fetch over HTTPS with httpx."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize fetcher with a timeout (defaults to settings) and optional transport."""
        self.timeout = timeout if timeout is not None else get_settings().cert_fetch_timeout_seconds
        self.transport = transport

    def fetch(self, url: str) -> bytes:
        """GET the URL; anything but a 2xx response is an error."""
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.get(url)
        except httpx.HTTPError as e:
            raise CertFetchError(f"Request for {url} failed: {e}") from e

        if not response.is_success:
            raise CertFetchError(f"Request for {url} returned HTTP {response.status_code}")
        return response.content


def parse_pem_bundle(data: bytes) -> list[x509.Certificate]:
    """Parse a PEM bundle into certificates, preserving order (leaf first)."""
    # Raises ValueError when no certificate can be read, so the result is never empty
    return x509.load_pem_x509_certificates(data)


class ChainFetcher:
    """Retrieve and parse the certificate chain for a validated URL."""

    def __init__(self, fetcher: Fetcher):
        """Initialize with the fetch capability to use."""
        self.fetcher = fetcher

    def fetch_chain(self, cert_url: ParsedCertURL) -> StageResult[list[x509.Certificate]]:
        """Fetch the bundle and parse it into a non-empty chain."""
        try:
            with cert_fetch_duration.time():
                data = self.fetcher.fetch(cert_url.url)
        except (CertFetchError, OSError) as e:
            cert_fetch_failures.inc()
            logger.warning(
                f"Certificate chain fetch failed: {e}",
                extra={"cert_url": cert_url.url},
            )
            return StageResult.failure(
                RejectionReason.CERT_FETCH_FAILED,
                f"Could not retrieve certificate chain: {e}",
            )

        try:
            chain = parse_pem_bundle(data)
        except ValueError as e:
            cert_fetch_failures.inc()
            logger.warning(
                f"Certificate chain could not be parsed: {e}",
                extra={"cert_url": cert_url.url},
            )
            return StageResult.failure(
                RejectionReason.CERT_FETCH_FAILED,
                "Certificate chain is not a valid PEM bundle",
            )

        logger.debug(f"Fetched certificate chain of {len(chain)} certificate(s)")
        return StageResult.success(chain)
