# File: secreq_api/core/metrics.py
from prometheus_client import Counter, Histogram

PROVIDER_CALL_DURATION_SECONDS = Histogram(
    "secreq_provider_call_duration_seconds",
    "Duration of calls to the generation provider.",
    ["operation", "model_name"],
    buckets=[0.1, 0.25, 0.5, 1, 2, 5, 10, 20, 30]
)

PROVIDER_ERRORS_TOTAL = Counter(
    "secreq_provider_errors_total",
    "Total number of errors returned by the generation provider.",
    ["operation", "error_type"]
)

EMBEDDING_TEXTS_TOTAL = Counter(
    "secreq_embedding_texts_total",
    "Total number of individual texts embedded."
)

SIGNUP_NOTIFICATIONS_TOTAL = Counter(
    "secreq_signup_notifications_total",
    "Signup notifications by outcome.",
    ["outcome"]
)

INVITE_ACCEPTANCES_TOTAL = Counter(
    "secreq_invite_acceptances_total",
    "Invitation acceptance attempts by outcome.",
    ["outcome"]
)

INVITE_EMAILS_TOTAL = Counter(
    "secreq_invite_emails_total",
    "Invitation emails by outcome.",
    ["outcome"]
)
