"""FastAPI guard that rejects skill requests failing Alexa verification."""

import logging
from typing import Optional

from fastapi import HTTPException, Request, status
from starlette.concurrency import run_in_threadpool

from alexa_verifier.settings import Settings, get_settings
from alexa_verifier.verification.pipeline import RequestVerifier, get_default_verifier
from alexa_verifier.verification.request import (
    SIGNATURE_CERT_CHAIN_URL_HEADER,
    SIGNATURE_HEADER,
    IncomingRequest,
)

logger = logging.getLogger(__name__)


async def build_incoming_request(request: Request) -> IncomingRequest:
    """Collect the verification inputs from an HTTP request without altering the body."""
    raw_body = await request.body()
    return IncomingRequest.from_raw(
        cert_chain_url=request.headers.get(SIGNATURE_CERT_CHAIN_URL_HEADER, ""),
        signature=request.headers.get(SIGNATURE_HEADER, ""),
        raw_body=raw_body,
    )


class AlexaRequestGuard:
    """
    Dependency verifying the current request came from Alexa.

    Usage::

        guard = AlexaRequestGuard()

        @app.post("/alexa")
        async def skill(alexa_request: IncomingRequest = Depends(guard)):
            ...
    """

    def __init__(
        self,
        verifier: Optional[RequestVerifier] = None,
        settings: Optional[Settings] = None,
    ):
        """Initialize guard; the default verifier is built on first use."""
        self._verifier = verifier
        self.settings = settings or get_settings()
        # Refuse to run with verification disabled outside development
        self.settings.validate_production_settings()

    @property
    def verifier(self) -> RequestVerifier:
        """Verifier in use."""
        if self._verifier is None:
            self._verifier = get_default_verifier()
        return self._verifier

    async def __call__(self, request: Request) -> IncomingRequest:
        """Verify the request or raise 400."""
        incoming = await build_incoming_request(request)

        if not self.settings.verify_requests:
            logger.warning(
                "Alexa request verification is disabled",
                extra={"path": request.url.path},
            )
            return incoming

        # Certificate retrieval blocks; keep it off the event loop
        outcome = await run_in_threadpool(self.verifier.verify, incoming)
        if not outcome.accepted:
            correlation_id = getattr(request.state, "correlation_id", None)
            logger.info(
                "Rejected unverified Alexa request",
                extra={
                    "reason": outcome.reason.value,
                    "correlation_id": correlation_id,
                    "path": request.url.path,
                },
            )
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Request verification failed.",
            )

        return incoming
