"""Prometheus metrics."""

from prometheus_client import Counter, Histogram

# Verification metrics
request_verifications = Counter(
    "alexa_request_verifications_total",
    "Total Alexa request verifications",
    ["outcome", "reason"],
)

# Certificate chain retrieval
cert_fetch_duration = Histogram(
    "alexa_cert_fetch_duration_seconds",
    "Certificate chain fetch duration",
)

cert_fetch_failures = Counter(
    "alexa_cert_fetch_failures_total",
    "Certificate chain fetch failures",
)
