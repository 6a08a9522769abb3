from .setup import setup_observability
from .metrics import (
    paywall_orders_created_total,
    paywall_payment_notifications_total,
    paywall_session_exchanges_total,
    paywall_content_access_total,
)
