"""Incoming skill request as seen by the verifier."""

import json
from typing import Optional

from pydantic import BaseModel, ConfigDict

SIGNATURE_CERT_CHAIN_URL_HEADER = "SignatureCertChainUrl"
SIGNATURE_HEADER = "Signature"


class IncomingRequest(BaseModel):
    """
    The parts of a skill request the verifier needs.

    ``raw_body`` must be the exact bytes received on the wire; any
    re-serialization changes the signed digest.
    """

    model_config = ConfigDict(frozen=True)

    cert_chain_url: str
    signature: str
    raw_body: bytes
    timestamp: Optional[str] = None

    @classmethod
    def from_raw(cls, cert_chain_url: str, signature: str, raw_body: bytes) -> "IncomingRequest":
        """Build a request, taking the timestamp from the body's ``request.timestamp``."""
        return cls(
            cert_chain_url=cert_chain_url,
            signature=signature,
            raw_body=raw_body,
            timestamp=extract_timestamp(raw_body),
        )


def extract_timestamp(raw_body: bytes) -> Optional[str]:
    """Read ``request.timestamp`` from a JSON body, or None when absent or unparsable."""
    try:
        payload = json.loads(raw_body)
    except (ValueError, TypeError):
        return None

    if not isinstance(payload, dict):
        return None
    request = payload.get("request")
    if not isinstance(request, dict):
        return None

    timestamp = request.get("timestamp")
    return timestamp if isinstance(timestamp, str) else None
