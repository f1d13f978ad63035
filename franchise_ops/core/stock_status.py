# franchise_ops/core/stock_status.py
from numbers import Number
import math

from franchise_ops.exceptions import ValidationError
from franchise_ops.models import StockStatus

def _check_quantity(value, field: str) -> None:
    if isinstance(value, (bool, complex)) or not isinstance(value, Number):
        raise ValidationError(f"{field} must be numeric", details={field: value})

    try:
        finite = math.isfinite(value)
    except (TypeError, ValueError):
        finite = False

    if not finite:
        raise ValidationError(f"{field} must be a finite number", details={field: value})

def classify_stock_status(quantity_on_hand, reorder_level) -> StockStatus:
    """Classify stock health from quantity on hand and reorder level.

    Args:
        quantity_on_hand: Units on hand
        reorder_level: Reorder level, must not be negative

    Returns:
        LOW at or below the reorder level, DECENT up to twice the reorder
        level, HIGH above that

    Raises:
        ValidationError for non-numeric input or a negative reorder level
    """
    _check_quantity(quantity_on_hand, 'inv_qoh')
    _check_quantity(reorder_level, 'inv_reorder_level')

    if reorder_level < 0:
        raise ValidationError(
            "Reorder level cannot be negative",
            details={'inv_reorder_level': reorder_level}
        )

    if quantity_on_hand <= reorder_level:
        return StockStatus.LOW
    elif quantity_on_hand <= 2 * reorder_level:
        return StockStatus.DECENT
    else:
        return StockStatus.HIGH
