# franchise_ops/services/shipment_service.py
from datetime import date
from typing import Optional
import logging

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from franchise_ops.config import config
from franchise_ops.exceptions import (
    ConfigError, DatabaseError, InsufficientStockError, MaterialNotFoundError, ValidationError
)
from franchise_ops.models import RawMaterial, ShipmentDetail
from franchise_ops.utils.validation import validate_shipment

logger = logging.getLogger(__name__)

class ShipmentService:
    """Service for raw material shipments.

    Recording a shipment reserves stock: the material's quantity is
    decremented in the same transaction that inserts the shipment row, and
    the shipment is refused when nothing is left. Neither change is visible
    unless the caller's transaction commits.
    """

    def __init__(self, session: Session):
        """Initialize the shipment service.

        Args:
            session: Database session

        Raises:
            ConfigError: If the configured reservation is not a positive number of units
        """
        self.session = session
        self.reservation_units = config.business_rules['shipment_reservation_units']

        if not isinstance(self.reservation_units, int) or self.reservation_units < 1:
            raise ConfigError(
                f"BUSINESS_RULES.shipment_reservation_units must be at least 1, got {self.reservation_units}",
                details={'shipment_reservation_units': self.reservation_units}
            )

    def get_material(self, material_id: str, lock: bool = False) -> Optional[RawMaterial]:
        """Get a raw material by ID.

        Args:
            material_id: Material ID
            lock: Lock the row (SELECT ... FOR UPDATE) where the backend supports it

        Returns:
            RawMaterial object or None if not found
        """
        query = self.session.query(RawMaterial).filter(RawMaterial.material_id == material_id)

        if lock:
            query = query.with_for_update()

        return query.first()

    def reserve_stock(self, material_id: str) -> int:
        """Take the shipment reservation out of a material's stock.

        The availability check and the decrement are one conditional UPDATE,
        so two shipments can never both consume the last unit.

        Args:
            material_id: Material ID

        Returns:
            Remaining quantity

        Raises:
            MaterialNotFoundError: If the material does not exist
            InsufficientStockError: If the material has no stock left
        """
        material = self.get_material(material_id, lock=True)
        if material is None:
            raise MaterialNotFoundError(
                f"Material ID {material_id} not found in raw materials",
                details={'material_id': material_id}
            )

        result = self.session.execute(
            update(RawMaterial)
            .where(RawMaterial.material_id == material_id, RawMaterial.quantity > 0)
            .values(quantity=RawMaterial.quantity - self.reservation_units)
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            raise InsufficientStockError(
                "Insufficient stock for the material.",
                details={'material_id': material_id}
            )

        self.session.refresh(material)
        return material.quantity

    def record_shipment(
        self,
        tracking_id: str,
        material_id: str,
        ship_date: Optional[date] = None,
        quantity: Optional[int] = None
    ) -> ShipmentDetail:
        """Reserve stock and record a shipment.

        Args:
            tracking_id: Shipment tracking ID
            material_id: Material being shipped
            ship_date: Shipment date, defaults to today
            quantity: Shipped quantity, stored for reference only

        Returns:
            The recorded shipment

        Raises:
            ValidationError: If the shipment is missing its IDs
            MaterialNotFoundError: If the material does not exist
            InsufficientStockError: If the material has no stock left
            DatabaseError: If the shipment row cannot be written
        """
        shipment = ShipmentDetail(
            tracking_id=tracking_id,
            material_id=material_id,
            ship_date=ship_date or date.today(),
            quantity=quantity
        )

        errors = validate_shipment(shipment)
        if errors:
            raise ValidationError(f"Invalid shipment {tracking_id}", details=errors)

        remaining = self.reserve_stock(material_id)

        try:
            self.session.add(shipment)
            self.session.flush()
        except SQLAlchemyError as e:
            raise DatabaseError(
                f"Failed to record shipment {tracking_id}: {str(e)}",
                details={'tracking_id': tracking_id, 'material_id': material_id}
            ) from e

        logger.info(f"Shipment {tracking_id} recorded for material {material_id}, {remaining} units left")
        return shipment
