# franchise_ops/core/pricing.py
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from franchise_ops.exceptions import ValidationError
from franchise_ops.models import Coupon

Amount = Union[Decimal, int, float, str]

def to_amount(value: Amount, field: str = 'amount') -> Decimal:
    """Convert a monetary value to Decimal.

    Floats go through ``str`` so 19.99 stays 19.99 rather than its binary
    approximation.

    Raises:
        ValidationError if the value is not numeric
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be a number", details={field: value})
    try:
        return value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number", details={field: value})

def is_coupon_applicable(coupon: Coupon, subtotal: Amount, as_of: Optional[date] = None) -> bool:
    """Check whether a coupon grants its discount on a subtotal.

    The coupon applies when the subtotal meets the minimum purchase amount
    and the coupon has not expired. The expiry date itself is still valid.

    Args:
        coupon: Coupon record
        subtotal: Order subtotal
        as_of: Date of the check, defaults to today

    Returns:
        True if the discount applies
    """
    as_of = as_of or date.today()
    subtotal = to_amount(subtotal, 'subtotal')
    min_purchase = to_amount(coupon.min_purchase_amt, 'min_purchase_amt')

    return subtotal >= min_purchase and as_of <= coupon.coup_expiry

def calculate_order_total(
    subtotal: Amount,
    coupon: Optional[Coupon] = None,
    as_of: Optional[date] = None,
    floor_at_zero: bool = True
) -> Decimal:
    """Calculate an order's total from its subtotal and optional coupon.

    There is no partial discount: either the full discount amount applies or
    the total equals the subtotal.

    Args:
        subtotal: Order subtotal
        coupon: Coupon referenced by the order, if any
        as_of: Pricing date, defaults to today
        floor_at_zero: Clamp a negative total to zero

    Returns:
        Order total
    """
    subtotal = to_amount(subtotal, 'subtotal')

    if coupon is None or not is_coupon_applicable(coupon, subtotal, as_of):
        return subtotal

    total = subtotal - to_amount(coupon.coup_discount_amt, 'coup_discount_amt')

    if floor_at_zero and total < 0:
        return Decimal('0')

    return total
