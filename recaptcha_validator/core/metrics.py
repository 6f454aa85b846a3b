"""Prometheus metrics for the reCAPTCHA validation service."""

from prometheus_client import Counter, Histogram

# ---------------------------------------------------------------------------
# Validation endpoint
# ---------------------------------------------------------------------------

recaptcha_validations_total = Counter(
    "recaptcha_validations_total",
    "Total token validation requests by outcome",
    ["outcome"],  # accepted | rejected | low_score | invalid_request | error
)

# ---------------------------------------------------------------------------
# Provider (Google siteverify)
# ---------------------------------------------------------------------------

recaptcha_provider_requests_total = Counter(
    "recaptcha_provider_requests_total",
    "Total siteverify calls by result",
    ["result"],  # ok | transport_error | decode_error
)

recaptcha_provider_latency_seconds = Histogram(
    "recaptcha_provider_latency_seconds",
    "Latency of siteverify calls in seconds",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0],
)
