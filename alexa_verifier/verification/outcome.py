"""Verification results: rejection reasons, per-stage results, final outcome."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class RejectionReason(str, Enum):
    """Machine-matchable reasons a request can be rejected for."""

    INVALID_SCHEME = "InvalidScheme"
    INVALID_HOST = "InvalidHost"
    INVALID_PATH = "InvalidPath"
    INVALID_PORT = "InvalidPort"
    CERT_FETCH_FAILED = "CertFetchFailed"
    CERT_NOT_YET_VALID = "CertNotYetValid"
    CERT_EXPIRED = "CertExpired"
    INVALID_CERT_SUBJECT = "InvalidCertSubject"
    UNTRUSTED_CHAIN = "UntrustedChain"
    INVALID_SIGNATURE_ENCODING = "InvalidSignatureEncoding"
    SIGNATURE_INVALID = "SignatureInvalid"
    INVALID_TIMESTAMP_FORMAT = "InvalidTimestampFormat"
    TIMESTAMP_OUT_OF_RANGE = "TimestampOutOfRange"


class PipelineState(str, Enum):
    """States the verification pipeline moves through, in order."""

    START = "start"
    URL_CHECKED = "url_checked"
    CHAIN_FETCHED = "chain_fetched"
    CHAIN_VALIDATED = "chain_validated"
    SIGNATURE_VALIDATED = "signature_validated"
    TIMESTAMP_VALIDATED = "timestamp_validated"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Rejection:
    """A rejection reason plus a human-readable explanation."""

    reason: RejectionReason
    message: str


@dataclass(frozen=True)
class StageResult(Generic[T]):
    """Result of a single pipeline stage: a value or a rejection."""

    value: Optional[T] = None
    rejection: Optional[Rejection] = None

    @property
    def ok(self) -> bool:
        """Whether the stage passed."""
        return self.rejection is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "StageResult[T]":
        """Build a passing result."""
        return cls(value=value)

    @classmethod
    def failure(cls, reason: RejectionReason, message: str) -> "StageResult[T]":
        """Build a failing result."""
        return cls(rejection=Rejection(reason=reason, message=message))


@dataclass(frozen=True)
class ValidationOutcome:
    """
    Final verdict on a request.

    There is no partial state: either ``accepted`` is True and ``reason`` is
    None, or ``accepted`` is False and ``reason`` names the first failing check.
    ``state`` records the last pipeline state reached before the verdict.
    """

    accepted: bool
    reason: Optional[RejectionReason] = None
    message: str = ""
    state: PipelineState = PipelineState.ACCEPTED

    @classmethod
    def accept(cls) -> "ValidationOutcome":
        """Build an accepting outcome."""
        return cls(accepted=True, message="Request verified", state=PipelineState.ACCEPTED)

    @classmethod
    def reject(cls, rejection: Rejection, state: PipelineState) -> "ValidationOutcome":
        """Build a rejecting outcome from the failing stage's rejection."""
        return cls(
            accepted=False,
            reason=rejection.reason,
            message=rejection.message,
            state=state,
        )
