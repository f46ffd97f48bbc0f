"""Replay protection: bound the request timestamp against the reference clock."""

from datetime import datetime, timezone
from typing import Optional

from alexa_verifier.verification.outcome import RejectionReason, StageResult

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
MAX_TIMESTAMP_SKEW_SECONDS = 150


def parse_timestamp(timestamp: Optional[str]) -> Optional[datetime]:
    """Parse ``YYYY-MM-DDTHH:MM:SSZ`` as UTC; None when malformed."""
    if not timestamp:
        return None
    try:
        parsed = datetime.strptime(timestamp, TIMESTAMP_FORMAT)
    except (ValueError, TypeError):
        return None
    return parsed.replace(tzinfo=timezone.utc)


def validate_timestamp(
    timestamp: Optional[str],
    now: datetime,
    tolerance_seconds: int = MAX_TIMESTAMP_SKEW_SECONDS,
) -> StageResult[int]:
    """
    Check the claimed request time is within ``tolerance_seconds`` of ``now``.

    Returns the skew in whole seconds (claimed minus now, truncated toward
    zero). A skew of exactly ``tolerance_seconds`` either way is accepted.
    """
    claimed = parse_timestamp(timestamp)
    if claimed is None:
        return StageResult.failure(
            RejectionReason.INVALID_TIMESTAMP_FORMAT,
            f"Request timestamp is missing or malformed: {timestamp!r}",
        )

    delta = int((claimed - now).total_seconds())
    if abs(delta) > tolerance_seconds:
        return StageResult.failure(
            RejectionReason.TIMESTAMP_OUT_OF_RANGE,
            f"Timestamp on request differs by {delta} seconds. Must be within {tolerance_seconds}.",
        )

    return StageResult.success(delta)
