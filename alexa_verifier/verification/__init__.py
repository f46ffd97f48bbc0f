"""Alexa request verification pipeline."""

from alexa_verifier.verification.chain import ChainValidator, TrustStore
from alexa_verifier.verification.clock import Clock, FixedClock, SystemClock
from alexa_verifier.verification.fetcher import (
    CertFetchError,
    ChainFetcher,
    Fetcher,
    HttpxFetcher,
)
from alexa_verifier.verification.outcome import (
    PipelineState,
    Rejection,
    RejectionReason,
    StageResult,
    ValidationOutcome,
)
from alexa_verifier.verification.pipeline import (
    RequestVerifier,
    get_default_verifier,
    validate_alexa_request,
)
from alexa_verifier.verification.request import IncomingRequest

__all__ = [
    "CertFetchError",
    "ChainFetcher",
    "ChainValidator",
    "Clock",
    "Fetcher",
    "FixedClock",
    "HttpxFetcher",
    "IncomingRequest",
    "PipelineState",
    "Rejection",
    "RejectionReason",
    "RequestVerifier",
    "StageResult",
    "SystemClock",
    "TrustStore",
    "ValidationOutcome",
    "get_default_verifier",
    "validate_alexa_request",
]
