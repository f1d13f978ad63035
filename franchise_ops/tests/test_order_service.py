import unittest
from datetime import date
from decimal import Decimal

from franchise_ops.db import db
from franchise_ops.exceptions import CouponNotFoundError, NotFoundError, ValidationError
from franchise_ops.models import CustomerOrder
from franchise_ops.services.order_service import OrderService
from franchise_ops.tests.base import DatabaseTestCase

AS_OF = date(2024, 6, 1)


class TestOrderService(DatabaseTestCase):
    """Test suite for OrderService."""

    def setUp(self):
        super().setUp()
        self.seed_franchise('F1')
        self.seed_coupon('SAVE20', min_purchase='150', discount='20')
        self.seed_coupon('BIG50', min_purchase='0', discount='50')
        self.service = OrderService(self.session)

    def test_create_order_with_coupon(self):
        order = self.service.create_order('F1', 200, coupon_code='SAVE20', order_id=1, as_of=AS_OF)

        self.assertEqual(order.total_amount, Decimal('180'))

    def test_create_order_below_coupon_minimum(self):
        order = self.service.create_order('F1', 100, coupon_code='SAVE20', order_id=1, as_of=AS_OF)

        self.assertEqual(order.total_amount, Decimal('100'))

    def test_create_order_without_coupon(self):
        order = self.service.create_order('F1', Decimal('42.50'), order_id=1, as_of=AS_OF)

        self.assertEqual(order.total_amount, Decimal('42.50'))
        self.assertEqual(order.order_date, date.today())

    def test_expired_coupon_not_applied(self):
        self.seed_coupon('OLD', min_purchase='0', discount='20', expiry=date(2024, 5, 31))

        order = self.service.create_order('F1', 200, coupon_code='OLD', order_id=1, as_of=AS_OF)

        self.assertEqual(order.total_amount, Decimal('200'))

    def test_discount_larger_than_subtotal_floored(self):
        order = self.service.create_order('F1', 30, coupon_code='BIG50', order_id=1, as_of=AS_OF)

        self.assertEqual(order.total_amount, Decimal('0'))

    def test_unknown_coupon_rejected(self):
        with self.assertRaises(CouponNotFoundError):
            self.service.create_order('F1', 200, coupon_code='NOPE', order_id=1, as_of=AS_OF)

        self.assertIsNone(self.service.get_order(1))

    def test_negative_subtotal_rejected(self):
        with self.assertRaises(ValidationError) as context:
            self.service.create_order('F1', -5, order_id=1, as_of=AS_OF)

        self.assertIn('subtotal', context.exception.details)

    def test_save_order_recomputes_total(self):
        order = CustomerOrder(order_id=7, franchise_id='F1', subtotal=Decimal('300'),
                              coupon_code='SAVE20', total_amount=Decimal('999'))

        self.service.save_order(order, as_of=AS_OF)

        self.assertEqual(order.total_amount, Decimal('280'))

    def test_update_order_reprices(self):
        self.service.create_order('F1', 200, coupon_code='SAVE20', order_id=1, as_of=AS_OF)

        order = self.service.update_order(1, subtotal=100, as_of=AS_OF)
        self.assertEqual(order.total_amount, Decimal('100'))

        order = self.service.update_order(1, subtotal=250, as_of=AS_OF)
        self.assertEqual(order.total_amount, Decimal('230'))

        order = self.service.update_order(1, coupon_code=None, as_of=AS_OF)
        self.assertEqual(order.total_amount, Decimal('250'))

    def test_update_order_with_unknown_coupon_leaves_order_unchanged(self):
        self.service.create_order('F1', 200, coupon_code='SAVE20', order_id=1, as_of=AS_OF)

        with self.assertRaises(CouponNotFoundError):
            self.service.update_order(1, coupon_code='NOPE', as_of=AS_OF)

        order = self.service.get_order(1)
        self.assertEqual(order.coupon_code, 'SAVE20')
        self.assertEqual(order.total_amount, Decimal('180'))

    def test_update_missing_order(self):
        with self.assertRaises(NotFoundError):
            self.service.update_order(99, subtotal=10)

    def test_totals_persist_after_commit(self):
        with db.session_scope() as session:
            OrderService(session).create_order('F1', 200, coupon_code='SAVE20', order_id=1, as_of=AS_OF)

        with db.session_scope() as session:
            self.assertEqual(session.get(CustomerOrder, 1).total_amount, Decimal('180.00'))

    def test_get_orders_by_franchise(self):
        self.seed_franchise('F2')
        self.service.create_order('F1', 10, order_id=1, order_date=date(2024, 1, 2))
        self.service.create_order('F2', 20, order_id=2, order_date=date(2024, 1, 1))
        self.service.create_order('F1', 30, order_id=3, order_date=date(2024, 1, 1))

        self.assertEqual([o.order_id for o in self.service.get_orders('F1')], [3, 1])
        self.assertEqual(len(self.service.get_orders()), 3)


if __name__ == '__main__':
    unittest.main()
