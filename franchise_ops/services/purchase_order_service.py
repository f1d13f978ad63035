# franchise_ops/services/purchase_order_service.py
from contextlib import nullcontext
from datetime import date
from typing import Dict, List, Optional
import enum
import logging

from sqlalchemy.orm import Session

from franchise_ops.db import Database, db
from franchise_ops.exceptions import (
    MaterialNotFoundError, PurchaseOrderError, ValidationError
)
from franchise_ops.models import PurchaseOrder, RawMaterial
from franchise_ops.utils.validation import validate_purchase_order_request

logger = logging.getLogger(__name__)

class PurchaseOrderState(enum.Enum):
    """Progress of a purchase order through its unit of work."""
    STARTED = 'STARTED'
    MATERIAL_VALIDATED = 'MATERIAL_VALIDATED'
    ORDER_INSERTED = 'ORDER_INSERTED'
    STOCK_UPDATED = 'STOCK_UPDATED'
    COMMITTED = 'COMMITTED'
    ROLLED_BACK = 'ROLLED_BACK'

    def __str__(self):
        return self.value

TERMINAL_STATES = (PurchaseOrderState.COMMITTED, PurchaseOrderState.ROLLED_BACK)

class PurchaseOrderTransaction:
    """Record of one purchase order run: its states and outcome."""

    def __init__(self, po_no: str, material_id: str, purchase_qty: int):
        self.po_no = po_no
        self.material_id = material_id
        self.purchase_qty = purchase_qty
        self.new_quantity = None
        self.error = None
        self.history: List[PurchaseOrderState] = [PurchaseOrderState.STARTED]

    @property
    def state(self) -> PurchaseOrderState:
        return self.history[-1]

    def advance(self, state: PurchaseOrderState) -> None:
        if self.state in TERMINAL_STATES:
            raise PurchaseOrderError(
                f"Purchase order {self.po_no} already finished in state {self.state}"
            )
        self.history.append(state)

    def fail(self, error: Exception) -> None:
        self.error = error
        self.advance(PurchaseOrderState.ROLLED_BACK)

    def to_dict(self) -> Dict:
        result = {
            'po_no': self.po_no,
            'material_id': self.material_id,
            'purchase_qty': self.purchase_qty,
            'new_quantity': self.new_quantity,
            'state': self.state.value,
            'history': [state.value for state in self.history]
        }

        if self.error is not None:
            result['error'] = str(self.error)

        return result

class PurchaseOrderService:
    """Service that processes raw material purchase orders.

    Each purchase order validates the material, inserts the purchase order
    and raises the material's quantity inside one transaction. By default
    that transaction comes from the database's ``session_scope``; a caller
    may hand in the session of a larger unit of work instead. Any failure
    rolls the whole unit back.
    """

    def __init__(self, database: Optional[Database] = None):
        """Initialize the purchase order service.

        Args:
            database: Database providing the transaction boundary, defaults to
                      the global instance
        """
        self.database = database or db
        self.last_transaction: Optional[PurchaseOrderTransaction] = None

    def process_purchase_order(
        self,
        po_no: str,
        material_id: str,
        purchase_qty: int,
        po_date: Optional[date] = None,
        session: Optional[Session] = None
    ) -> Dict:
        """Record a purchase order and add its quantity to the material's stock.

        Args:
            po_no: Purchase order number
            material_id: Material being purchased
            purchase_qty: Units purchased
            po_date: Purchase order date, defaults to today
            session: Session of an enclosing unit of work. The purchase order
                     then joins that transaction and ends in STOCK_UPDATED;
                     committing or rolling back is left to the caller, which
                     must not commit after an error is raised.

        Returns:
            Dictionary describing the transaction

        Raises:
            ValidationError: If the request parameters are invalid
            MaterialNotFoundError: If the material does not exist
            PurchaseOrderError: If anything else fails; the cause is chained
        """
        errors = validate_purchase_order_request(po_no, material_id, purchase_qty)
        if errors:
            raise ValidationError(f"Invalid purchase order {po_no}", details=errors)

        po_date = po_date or date.today()
        txn = PurchaseOrderTransaction(po_no, material_id, purchase_qty)
        self.last_transaction = txn

        owns_transaction = session is None
        scope = self.database.session_scope() if owns_transaction else nullcontext(session)

        try:
            with scope as session:
                material = (
                    session.query(RawMaterial)
                    .filter(RawMaterial.material_id == material_id)
                    .with_for_update()
                    .first()
                )
                if material is None:
                    raise MaterialNotFoundError(
                        f"Material ID {material_id} not found in raw materials",
                        details={'material_id': material_id, 'po_no': po_no}
                    )
                txn.advance(PurchaseOrderState.MATERIAL_VALIDATED)

                new_quantity = material.quantity + purchase_qty

                session.add(PurchaseOrder(
                    po_no=po_no,
                    po_date=po_date,
                    purchase_qty=purchase_qty,
                    material_id=material_id
                ))
                session.flush()
                txn.advance(PurchaseOrderState.ORDER_INSERTED)

                material.quantity = new_quantity
                session.flush()
                txn.advance(PurchaseOrderState.STOCK_UPDATED)

        except MaterialNotFoundError as e:
            txn.fail(e)
            logger.error(f"Purchase order {po_no} rejected: {e}")
            raise

        except Exception as e:
            txn.fail(e)
            logger.error(f"Purchase order {po_no} rolled back: {e}")
            raise PurchaseOrderError(
                f"An unexpected error occurred: {e}",
                details={'po_no': po_no, 'material_id': material_id}
            ) from e

        txn.new_quantity = new_quantity

        if not owns_transaction:
            logger.debug(f"Purchase order {po_no} staged, waiting for the enclosing transaction")
            return txn.to_dict()

        txn.advance(PurchaseOrderState.COMMITTED)

        logger.info(f"Purchase Order Processed Successfully: {po_no}")
        logger.info(f"Material ID: {material_id} Updated Quantity: {new_quantity}")

        return txn.to_dict()
