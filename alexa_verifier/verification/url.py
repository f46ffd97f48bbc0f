"""Structural checks on the signing certificate chain URL."""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

from alexa_verifier.verification.outcome import RejectionReason, StageResult

CERT_URL_SCHEME = "https"
CERT_URL_HOST = "s3.amazonaws.com"
CERT_URL_PATH_PREFIX = "echo.api/"
CERT_URL_PORT = 443


@dataclass(frozen=True)
class ParsedCertURL:
    """Components of a certificate chain URL. ``path`` has no leading slash."""

    url: str
    scheme: str
    host: str
    path: str
    port: Optional[int] = None


def validate_cert_url(url: str) -> StageResult[ParsedCertURL]:
    """
    Parse and constrain the certificate chain URL.

    Checks run in order: scheme, host, path, port. The path check is a
    case-sensitive literal prefix match; ``..`` segments are not normalized.
    """
    try:
        parts = urlsplit(url or "")
    except ValueError:
        # Malformed authority, e.g. an unclosed IPv6 bracket
        return StageResult.failure(
            RejectionReason.INVALID_HOST,
            "Certificate URL host could not be parsed",
        )

    scheme = (parts.scheme or "").lower()
    if scheme != CERT_URL_SCHEME:
        return StageResult.failure(
            RejectionReason.INVALID_SCHEME,
            f"Certificate URL scheme is not {CERT_URL_SCHEME}: {parts.scheme!r}",
        )

    host = (parts.hostname or "").lower()
    if host != CERT_URL_HOST:
        return StageResult.failure(
            RejectionReason.INVALID_HOST,
            f"Certificate URL host is not {CERT_URL_HOST}: {parts.hostname!r}",
        )

    # urlsplit keeps the separator between authority and path
    path = parts.path[1:] if parts.path.startswith("/") else parts.path
    if not path.startswith(CERT_URL_PATH_PREFIX):
        return StageResult.failure(
            RejectionReason.INVALID_PATH,
            f"Certificate URL path does not begin with {CERT_URL_PATH_PREFIX}: {path!r}",
        )

    try:
        port = parts.port
    except ValueError:
        return StageResult.failure(
            RejectionReason.INVALID_PORT,
            "Certificate URL port is not a valid port number",
        )
    if port is not None and port != CERT_URL_PORT:
        return StageResult.failure(
            RejectionReason.INVALID_PORT,
            f"Certificate URL port was not empty or {CERT_URL_PORT}: {port}",
        )

    return StageResult.success(
        ParsedCertURL(url=url, scheme=scheme, host=host, path=path, port=port)
    )
