from prometheus_client import Counter

# Business Metrics
paywall_orders_created_total = Counter(
    "paywall_orders_created_total",
    "Total PENDING orders created",
)

paywall_payment_notifications_total = Counter(
    "paywall_payment_notifications_total",
    "Payment notifications received",
    ["outcome"]  # Labels: 'created_paid', 'transitioned', 'already_paid', 'rejected'
)

paywall_session_exchanges_total = Counter(
    "paywall_session_exchanges_total",
    "Session exchange attempts",
    ["result"]  # Labels: 'success', 'failed'
)

paywall_content_access_total = Counter(
    "paywall_content_access_total",
    "Content gate decisions",
    ["result"]  # Labels: 'granted', 'no_token', 'invalid_token', 'not_found'
)
