"""
Prometheus-based metrics for production monitoring.
Provides /metrics endpoint for scraping.
"""
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import APIRouter, Response


# Counters
payments_created_total = Counter(
    "payments_created_total",
    "Total number of submitted payments",
    ["method"],
)

payment_transitions_total = Counter(
    "payment_transitions_total",
    "Payment status transitions",
    ["status"],  # approved, rejected
)

payment_transition_conflicts_total = Counter(
    "payment_transition_conflicts_total",
    "Approve/reject attempts on payments that were no longer pending",
)

notifications_created_total = Counter(
    "notifications_created_total",
    "In-app notifications persisted",
    ["type"],
)

notification_emails_total = Counter(
    "notification_emails_total",
    "Notification email attempts by result",
    ["result"],  # sent, disabled, no_recipient, invalid_address, transport_error
)

email_requests_total = Counter(
    "email_requests_total",
    "Total SMTP deliveries",
    ["status"],
)

payment_reminders_total = Counter(
    "payment_reminders_total",
    "Payment reminder job results per payment",
    ["result"],  # notified, emailed, error
)

screenshot_cleanup_total = Counter(
    "screenshot_cleanup_total",
    "Screenshot cleanup results per payment",
    ["result"],  # deleted, error
)

storage_requests_total = Counter(
    "storage_requests_total",
    "Blob storage API requests",
    ["operation", "status"],
)

# Histograms
email_request_duration_seconds = Histogram(
    "email_request_duration_seconds",
    "SMTP delivery duration",
    buckets=[0.1, 0.5, 1, 2, 5, 10],
)

storage_request_duration_seconds = Histogram(
    "storage_request_duration_seconds",
    "Blob storage API request duration",
    ["operation"],
    buckets=[0.1, 0.5, 1, 2, 5, 10],
)


# Metrics endpoint router
router = APIRouter()


@router.get("/metrics")
def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint for scraping."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
