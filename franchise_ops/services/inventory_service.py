# franchise_ops/services/inventory_service.py
from typing import List, Optional, Union
import logging

from sqlalchemy.orm import Session

from franchise_ops.core.stock_status import classify_stock_status
from franchise_ops.exceptions import NotFoundError, ValidationError
from franchise_ops.models import FranchiseInventory, InventoryDetail, StockStatus
from franchise_ops.utils.validation import validate_inventory_record

logger = logging.getLogger(__name__)

class InventoryService:
    """Service for franchise inventory records."""

    def __init__(self, session: Session):
        """Initialize the inventory service.

        Args:
            session: Database session
        """
        self.session = session

    def get_inventory_record(self, inv_id: str) -> Optional[InventoryDetail]:
        """Get an inventory record by ID.

        Args:
            inv_id: Inventory ID

        Returns:
            Inventory record or None if not found
        """
        return self.session.get(InventoryDetail, inv_id)

    def get_records_by_status(self, status: Union[StockStatus, str]) -> List[InventoryDetail]:
        """Get all inventory records with the given stock status."""
        if not isinstance(status, StockStatus):
            status = StockStatus.from_string(status)

        return (
            self.session.query(InventoryDetail)
            .filter(InventoryDetail.inv_stock_status == status)
            .order_by(InventoryDetail.inv_id)
            .all()
        )

    def save_inventory_record(self, record: InventoryDetail) -> InventoryDetail:
        """Classify and write an inventory record.

        Args:
            record: New or modified inventory record

        Returns:
            The saved record
        """
        errors = validate_inventory_record(record)
        if errors:
            raise ValidationError(f"Invalid inventory record {record.inv_id}", details=errors)

        record.inv_stock_status = classify_stock_status(record.inv_qoh, record.inv_reorder_level)

        self.session.add(record)
        self.session.flush()

        logger.debug(f"Inventory {record.inv_id}: {record.inv_qoh} on hand, status {record.inv_stock_status}")
        return record

    def create_inventory_record(
        self,
        inv_id: str,
        quantity_on_hand: int,
        reorder_level: int,
        name: Optional[str] = None,
        franchise_id: Optional[str] = None
    ) -> InventoryDetail:
        """Create an inventory record, optionally linked to a franchise.

        Args:
            inv_id: Inventory ID
            quantity_on_hand: Units on hand
            reorder_level: Reorder level
            name: Optional description
            franchise_id: Franchise holding the inventory

        Returns:
            The created record
        """
        record = InventoryDetail(
            inv_id=inv_id,
            inv_name=name,
            inv_qoh=quantity_on_hand,
            inv_reorder_level=reorder_level
        )
        self.save_inventory_record(record)

        if franchise_id is not None:
            self.session.add(FranchiseInventory(franchise_id=franchise_id, inv_id=inv_id))
            self.session.flush()

        return record

    def update_inventory_record(
        self,
        inv_id: str,
        quantity_on_hand: Optional[int] = None,
        reorder_level: Optional[int] = None
    ) -> InventoryDetail:
        """Change quantity on hand and/or reorder level and reclassify.

        The new status is computed before the record is touched, so invalid
        values leave the record unchanged.
        """
        record = self.get_inventory_record(inv_id)
        if record is None:
            raise NotFoundError(f"Inventory record {inv_id} not found", details={'inv_id': inv_id})

        new_qoh = record.inv_qoh if quantity_on_hand is None else quantity_on_hand
        new_reorder = record.inv_reorder_level if reorder_level is None else reorder_level
        status = classify_stock_status(new_qoh, new_reorder)

        record.inv_qoh = new_qoh
        record.inv_reorder_level = new_reorder
        record.inv_stock_status = status
        self.session.flush()

        logger.debug(f"Inventory {inv_id} updated: {new_qoh} on hand, status {status}")
        return record

    def adjust_quantity(self, inv_id: str, delta: int) -> InventoryDetail:
        """Add (or remove, with a negative delta) units on hand."""
        record = self.get_inventory_record(inv_id)
        if record is None:
            raise NotFoundError(f"Inventory record {inv_id} not found", details={'inv_id': inv_id})

        return self.update_inventory_record(inv_id, quantity_on_hand=record.inv_qoh + delta)
