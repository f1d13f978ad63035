from .date_utils import convert_to_date, add_months, days_between, years_between
from .validation import (
    validate_order, validate_order_values, validate_inventory_record, validate_shipment,
    validate_purchase_order_request
)

__all__ = [
    'convert_to_date',
    'add_months',
    'days_between',
    'years_between',
    'validate_order',
    'validate_order_values',
    'validate_inventory_record',
    'validate_shipment',
    'validate_purchase_order_request'
]
