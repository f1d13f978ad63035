from decimal import Decimal, InvalidOperation
from typing import Dict

from franchise_ops.models import CustomerOrder, InventoryDetail, ShipmentDetail

def _is_number(value) -> bool:
    if isinstance(value, bool) or value is None:
        return False
    try:
        return Decimal(str(value)).is_finite()
    except (InvalidOperation, ValueError):
        return False

def validate_order_values(franchise_id, subtotal) -> Dict[str, str]:
    """Validate the franchise and subtotal of an order.

    Returns:
        Dictionary with validation errors
    """
    errors = {}

    if not franchise_id:
        errors['franchise_id'] = 'Franchise ID is required'

    if not _is_number(subtotal):
        errors['subtotal'] = 'Subtotal must be a number'
    elif Decimal(str(subtotal)) < 0:
        errors['subtotal'] = 'Subtotal cannot be negative'

    return errors

def validate_order(order: CustomerOrder) -> Dict[str, str]:
    """Validate a customer order before pricing.

    Args:
        order: Order to validate

    Returns:
        Dictionary with validation errors
    """
    return validate_order_values(order.franchise_id, order.subtotal)

def validate_inventory_record(record: InventoryDetail) -> Dict[str, str]:
    """Validate an inventory record.

    Args:
        record: Inventory record to validate

    Returns:
        Dictionary with validation errors
    """
    errors = {}

    if not record.inv_id:
        errors['inv_id'] = 'Inventory ID is required'

    return errors

def validate_shipment(shipment: ShipmentDetail) -> Dict[str, str]:
    """Validate a shipment.

    Args:
        shipment: Shipment to validate

    Returns:
        Dictionary with validation errors
    """
    errors = {}

    if not shipment.tracking_id:
        errors['tracking_id'] = 'Tracking ID is required'

    if not shipment.material_id:
        errors['material_id'] = 'Material ID is required'

    return errors

def validate_purchase_order_request(po_no, material_id, purchase_qty) -> Dict[str, str]:
    """Validate the parameters of a purchase order request.

    Args:
        po_no: Purchase order number
        material_id: Raw material ID
        purchase_qty: Quantity purchased

    Returns:
        Dictionary with validation errors
    """
    errors = {}

    if not po_no:
        errors['po_no'] = 'PO number is required'

    if not material_id:
        errors['material_id'] = 'Material ID is required'

    if isinstance(purchase_qty, bool) or not isinstance(purchase_qty, int):
        errors['purchase_qty'] = 'Purchase quantity must be an integer'
    elif purchase_qty <= 0:
        errors['purchase_qty'] = 'Purchase quantity must be positive'

    return errors
