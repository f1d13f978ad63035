from .pricing import calculate_order_total, is_coupon_applicable, to_amount
from .stock_status import classify_stock_status

__all__ = [
    'calculate_order_total',
    'is_coupon_applicable',
    'to_amount',
    'classify_stock_status'
]
