"""Alexa request verification pipeline.

Runs the checks in a fixed order and stops at the first failure:

1. certificate chain URL structure
2. certificate chain retrieval
3. leaf validity window, leaf subject, chain of trust
4. body signature against the leaf's public key
5. request timestamp against the reference clock
"""

import logging
from functools import lru_cache
from typing import Optional

from alexa_verifier.utils.metrics import request_verifications
from alexa_verifier.verification.chain import ChainValidator, TrustStore
from alexa_verifier.verification.clock import Clock, SystemClock
from alexa_verifier.verification.fetcher import ChainFetcher, Fetcher, HttpxFetcher
from alexa_verifier.verification.outcome import (
    PipelineState,
    Rejection,
    ValidationOutcome,
)
from alexa_verifier.verification.request import IncomingRequest
from alexa_verifier.verification.signature import verify_signature
from alexa_verifier.verification.timestamp import validate_timestamp
from alexa_verifier.verification.url import validate_cert_url

logger = logging.getLogger(__name__)


class RequestVerifier:
    """Verify that skill requests were signed by the Alexa service."""

    def __init__(self, fetcher: Fetcher, clock: Clock, trust_store: TrustStore):
        """Initialize verifier with its fetch, clock and trust-anchor capabilities."""
        self.clock = clock
        self.chain_fetcher = ChainFetcher(fetcher)
        self.chain_validator = ChainValidator(trust_store)

    def verify(self, request: IncomingRequest) -> ValidationOutcome:
        """Run every check and return the verdict."""
        # One reference time for every temporal check in this call
        now = self.clock.now()
        state = PipelineState.START

        url_result = validate_cert_url(request.cert_chain_url)
        if not url_result.ok:
            return self._reject(url_result.rejection, state, request)
        state = PipelineState.URL_CHECKED

        chain_result = self.chain_fetcher.fetch_chain(url_result.value)
        if not chain_result.ok:
            return self._reject(chain_result.rejection, state, request)
        state = PipelineState.CHAIN_FETCHED

        leaf_result = self.chain_validator.validate(chain_result.value, now)
        if not leaf_result.ok:
            return self._reject(leaf_result.rejection, state, request)
        state = PipelineState.CHAIN_VALIDATED

        signature_result = verify_signature(request.signature, request.raw_body, leaf_result.value)
        if not signature_result.ok:
            return self._reject(signature_result.rejection, state, request)
        state = PipelineState.SIGNATURE_VALIDATED

        timestamp_result = validate_timestamp(request.timestamp, now)
        if not timestamp_result.ok:
            return self._reject(timestamp_result.rejection, state, request)
        state = PipelineState.TIMESTAMP_VALIDATED

        request_verifications.labels(outcome="accepted", reason="").inc()
        logger.debug(
            "Alexa request verified",
            extra={
                "cert_url": request.cert_chain_url,
                "skew_seconds": timestamp_result.value,
                "state": state.value,
            },
        )
        return ValidationOutcome.accept()

    def _reject(
        self, rejection: Rejection, state: PipelineState, request: IncomingRequest
    ) -> ValidationOutcome:
        """Record and build a rejection reached from ``state``."""
        request_verifications.labels(outcome="rejected", reason=rejection.reason.value).inc()
        logger.warning(
            f"Alexa request rejected: {rejection.reason.value}: {rejection.message}",
            extra={
                "reason": rejection.reason.value,
                "state": state.value,
                "cert_url": request.cert_chain_url,
            },
        )
        return ValidationOutcome.reject(rejection, state)


@lru_cache()
def get_default_verifier() -> RequestVerifier:
    """Get a cached verifier using the system clock, HTTPS fetch and default trust store."""
    return RequestVerifier(
        fetcher=HttpxFetcher(),
        clock=SystemClock(),
        trust_store=TrustStore.default(),
    )


def validate_alexa_request(
    request: IncomingRequest, verifier: Optional[RequestVerifier] = None
) -> ValidationOutcome:
    """Validate an incoming request with the given or the default verifier."""
    return (verifier or get_default_verifier()).verify(request)
