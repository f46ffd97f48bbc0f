"""Request body signature verification."""

import base64
import binascii

from cryptography import x509
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from alexa_verifier.verification.outcome import RejectionReason, StageResult


def decode_signature(signature: str) -> StageResult[bytes]:
    """Base64-decode the signature header value."""
    if not signature:
        return StageResult.failure(
            RejectionReason.INVALID_SIGNATURE_ENCODING, "Signature header is empty"
        )
    try:
        return StageResult.success(base64.b64decode(signature, validate=True))
    except (binascii.Error, ValueError):
        return StageResult.failure(
            RejectionReason.INVALID_SIGNATURE_ENCODING, "Signature header is not valid base64"
        )


def verify_signature(
    signature: str, raw_body: bytes, leaf: x509.Certificate
) -> StageResult[None]:
    """
    Verify an RSA PKCS#1 v1.5 / SHA-1 signature over the exact body bytes.

    The body is never re-encoded; the digest is computed over ``raw_body``
    as received.
    """
    decoded = decode_signature(signature)
    if not decoded.ok:
        return StageResult(rejection=decoded.rejection)

    try:
        public_key = leaf.public_key()
    except (ValueError, UnsupportedAlgorithm):
        return StageResult.failure(
            RejectionReason.SIGNATURE_INVALID, "Signing certificate public key cannot be read"
        )

    if not isinstance(public_key, rsa.RSAPublicKey):
        return StageResult.failure(
            RejectionReason.SIGNATURE_INVALID, "Signing certificate does not hold an RSA key"
        )

    try:
        public_key.verify(decoded.value, raw_body, padding.PKCS1v15(), hashes.SHA1())
    except InvalidSignature:
        return StageResult.failure(
            RejectionReason.SIGNATURE_INVALID, "Request body signature does not match"
        )

    return StageResult.success()
