from .order_service import OrderService
from .inventory_service import InventoryService
from .shipment_service import ShipmentService
from .purchase_order_service import PurchaseOrderService, PurchaseOrderState
from .reporting_service import ReportingService

__all__ = [
    'OrderService',
    'InventoryService',
    'ShipmentService',
    'PurchaseOrderService',
    'PurchaseOrderState',
    'ReportingService'
]
