"""Alexa skill request verification."""

__version__ = "0.1.0"

from alexa_verifier.verification import (
    IncomingRequest,
    RejectionReason,
    RequestVerifier,
    ValidationOutcome,
    validate_alexa_request,
)

__all__ = [
    "IncomingRequest",
    "RejectionReason",
    "RequestVerifier",
    "ValidationOutcome",
    "validate_alexa_request",
]
