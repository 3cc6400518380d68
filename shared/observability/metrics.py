from prometheus_client import Counter, Histogram

# Business Metrics
shop_orders_placed_total = Counter(
    "shop_orders_placed_total",
    "Total orders persisted",
    ["payment_method"] # Labels: 'ONLINE', 'COD'
)

shop_order_failures_total = Counter(
    "shop_order_failures_total",
    "Order placements rejected or aborted",
    ["reason"] # Labels: error code, e.g. 'INSUFFICIENT_STOCK', 'PRICE_MISMATCH'
)

shop_order_placement_duration_seconds = Histogram(
    "shop_order_placement_duration_seconds",
    "Order placement duration in seconds"
)

shop_stock_decrement_failures_total = Counter(
    "shop_stock_decrement_failures_total",
    "Stock decrements that failed after the order was already persisted"
)

shop_payment_verifications_total = Counter(
    "shop_payment_verifications_total",
    "Gateway signature checks",
    ["result"] # Labels: 'valid', 'invalid'
)
