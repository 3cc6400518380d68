from .setup import setup_observability, configure_logging
from .metrics import (
    shop_orders_placed_total,
    shop_order_failures_total,
    shop_order_placement_duration_seconds,
    shop_stock_decrement_failures_total,
    shop_payment_verifications_total
)
