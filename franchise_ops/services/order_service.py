# franchise_ops/services/order_service.py
from datetime import date
from decimal import Decimal
from typing import List, Optional
import logging

from sqlalchemy.orm import Session

from franchise_ops.config import config
from franchise_ops.core.pricing import calculate_order_total
from franchise_ops.exceptions import CouponNotFoundError, NotFoundError, ValidationError
from franchise_ops.models import Coupon, CustomerOrder
from franchise_ops.utils.validation import validate_order, validate_order_values

logger = logging.getLogger(__name__)

_UNCHANGED = object()

class OrderService:
    """Service for customer orders.

    ``save_order`` is the write path for orders: the order is validated and
    priced before it is added to the session, so a stored total always
    reflects the stored subtotal and coupon.
    """

    def __init__(self, session: Session):
        """Initialize the order service.

        Args:
            session: Database session
        """
        self.session = session
        self.floor_order_total = config.business_rules['floor_order_total']

    def get_order(self, order_id: int) -> Optional[CustomerOrder]:
        """Get an order by ID.

        Args:
            order_id: Order ID

        Returns:
            Order object or None if not found
        """
        return self.session.get(CustomerOrder, order_id)

    def get_orders(self, franchise_id: Optional[str] = None) -> List[CustomerOrder]:
        """Get orders, optionally for one franchise, oldest first."""
        query = self.session.query(CustomerOrder)

        if franchise_id is not None:
            query = query.filter(CustomerOrder.franchise_id == franchise_id)

        return query.order_by(CustomerOrder.order_date, CustomerOrder.order_id).all()

    def get_coupon(self, coupon_code: str) -> Optional[Coupon]:
        """Get a coupon by code.

        Args:
            coupon_code: Coupon code

        Returns:
            Coupon object or None if not found
        """
        return self.session.get(Coupon, coupon_code)

    def price(self, subtotal, coupon_code: Optional[str] = None, as_of: Optional[date] = None) -> Decimal:
        """Price a subtotal with an optional coupon code.

        Raises:
            CouponNotFoundError: If the coupon code does not exist
        """
        coupon = None

        if coupon_code is not None:
            coupon = self.get_coupon(coupon_code)
            if coupon is None:
                raise CouponNotFoundError(
                    f"Coupon {coupon_code} not found",
                    details={'coupon_code': coupon_code}
                )

        return calculate_order_total(
            subtotal,
            coupon,
            as_of=as_of,
            floor_at_zero=self.floor_order_total
        )

    def save_order(self, order: CustomerOrder, as_of: Optional[date] = None) -> CustomerOrder:
        """Validate, price and write an order.

        Args:
            order: New or modified order
            as_of: Pricing date, defaults to today

        Returns:
            The saved order

        Raises:
            ValidationError: If the order is invalid
            CouponNotFoundError: If the order's coupon does not exist
        """
        errors = validate_order(order)
        if errors:
            raise ValidationError(f"Invalid order {order.order_id}", details=errors)

        order.total_amount = self.price(order.subtotal, order.coupon_code, as_of=as_of)

        self.session.add(order)
        self.session.flush()

        logger.debug(
            f"Order {order.order_id} saved: subtotal {order.subtotal}, "
            f"coupon {order.coupon_code}, total {order.total_amount}"
        )
        return order

    def create_order(
        self,
        franchise_id: str,
        subtotal,
        coupon_code: Optional[str] = None,
        order_date: Optional[date] = None,
        order_id: Optional[int] = None,
        as_of: Optional[date] = None
    ) -> CustomerOrder:
        """Create a new priced order.

        Args:
            franchise_id: Franchise ID
            subtotal: Order subtotal
            coupon_code: Optional coupon code
            order_date: Order date, defaults to today
            order_id: Optional explicit order ID
            as_of: Pricing date, defaults to today

        Returns:
            The created order
        """
        order = CustomerOrder(
            order_id=order_id,
            franchise_id=franchise_id,
            order_date=order_date or date.today(),
            subtotal=subtotal,
            coupon_code=coupon_code
        )
        return self.save_order(order, as_of=as_of)

    def update_order(
        self,
        order_id: int,
        subtotal=_UNCHANGED,
        coupon_code=_UNCHANGED,
        as_of: Optional[date] = None
    ) -> CustomerOrder:
        """Change an order's subtotal and/or coupon and reprice it.

        The new total is computed before the order is touched, so a failed
        coupon lookup leaves the order as it was.

        Args:
            order_id: Order ID
            subtotal: New subtotal, omitted to keep the current one
            coupon_code: New coupon code (None removes it), omitted to keep the current one
            as_of: Pricing date, defaults to today

        Returns:
            The updated order
        """
        order = self.get_order(order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found", details={'order_id': order_id})

        new_subtotal = order.subtotal if subtotal is _UNCHANGED else subtotal
        new_coupon = order.coupon_code if coupon_code is _UNCHANGED else coupon_code

        errors = validate_order_values(order.franchise_id, new_subtotal)
        if errors:
            raise ValidationError(f"Invalid order {order_id}", details=errors)

        total = self.price(new_subtotal, new_coupon, as_of=as_of)

        order.subtotal = new_subtotal
        order.coupon_code = new_coupon
        order.total_amount = total
        self.session.flush()

        logger.debug(f"Order {order_id} repriced: total {total}")
        return order
