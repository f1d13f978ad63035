import os
import shutil
import tempfile
import unittest
from concurrent.futures import ThreadPoolExecutor

from franchise_ops.config import config
from franchise_ops.db import db
from franchise_ops.exceptions import (
    ConfigError, DatabaseError, InsufficientStockError, MaterialNotFoundError, ValidationError
)
from franchise_ops.models import ShipmentDetail
from franchise_ops.services.shipment_service import ShipmentService
from franchise_ops.tests.base import DatabaseTestCase


class TestShipmentService(DatabaseTestCase):
    """Test suite for the shipment stock guard."""

    def test_shipment_reserves_one_unit(self):
        self.seed_material('M1', quantity=5)

        with db.session_scope() as session:
            shipment = ShipmentService(session).record_shipment('T1', 'M1', quantity=40)
            self.assertEqual(shipment.material.quantity, 4)

        self.assertEqual(self.material_quantity('M1'), 4)
        self.assertEqual(self.count(ShipmentDetail), 1)

    def test_last_unit_can_ship(self):
        self.seed_material('M1', quantity=1)

        with db.session_scope() as session:
            ShipmentService(session).record_shipment('T1', 'M1')

        self.assertEqual(self.material_quantity('M1'), 0)

    def test_empty_stock_rejected(self):
        self.seed_material('M1', quantity=0)

        with self.assertRaises(InsufficientStockError) as context:
            with db.session_scope() as session:
                ShipmentService(session).record_shipment('T1', 'M1')

        self.assertEqual(context.exception.code, -20005)
        self.assertEqual(context.exception.message, 'Insufficient stock for the material.')
        self.assertEqual(self.material_quantity('M1'), 0)
        self.assertEqual(self.count(ShipmentDetail), 0)

    def test_unknown_material_rejected(self):
        with self.assertRaises(MaterialNotFoundError):
            with db.session_scope() as session:
                ShipmentService(session).record_shipment('T1', 'NOPE')

        self.assertEqual(self.count(ShipmentDetail), 0)

    def test_missing_tracking_id_rejected(self):
        self.seed_material('M1', quantity=5)

        with self.assertRaises(ValidationError):
            with db.session_scope() as session:
                ShipmentService(session).record_shipment('', 'M1')

        self.assertEqual(self.material_quantity('M1'), 5)

    def test_failed_insert_rolls_back_reservation(self):
        self.seed_material('M1', quantity=5)

        with db.session_scope() as session:
            ShipmentService(session).record_shipment('T1', 'M1')

        with self.assertRaises(DatabaseError) as context:
            with db.session_scope() as session:
                ShipmentService(session).record_shipment('T1', 'M1')

        self.assertIsNotNone(context.exception.__cause__)
        self.assertEqual(self.material_quantity('M1'), 4)
        self.assertEqual(self.count(ShipmentDetail), 1)

    def test_reservation_units_configurable(self):
        config.set('BUSINESS_RULES', 'shipment_reservation_units', 3, persist=False)
        self.seed_material('M1', quantity=5)

        with db.session_scope() as session:
            remaining = ShipmentService(session).reserve_stock('M1')

        self.assertEqual(remaining, 2)
        self.assertEqual(self.material_quantity('M1'), 2)

    def test_non_positive_reservation_units_rejected(self):
        self.seed_material('M1', quantity=5)

        for units in (0, -1):
            with self.subTest(units=units):
                config.set('BUSINESS_RULES', 'shipment_reservation_units', units, persist=False)

                with self.assertRaises(ConfigError):
                    with db.session_scope() as session:
                        ShipmentService(session).record_shipment('T1', 'M1')

        self.assertEqual(self.material_quantity('M1'), 5)
        self.assertEqual(self.count(ShipmentDetail), 0)


class TestConcurrentShipments(DatabaseTestCase):
    """Concurrent shipments against a file database never oversell."""

    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()
        self.database_url = f"sqlite:///{os.path.join(self.tmp_dir, 'shipments.db')}"
        db.initialize(self.database_url, connect_args={'check_same_thread': False, 'timeout': 30})
        db.create_all_tables()
        self.session = db.get_session()

    def tearDown(self):
        super().tearDown()
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def _ship(self, tracking_id):
        try:
            with db.session_scope() as session:
                ShipmentService(session).record_shipment(tracking_id, 'M1')
            return 'shipped'
        except InsufficientStockError:
            return 'refused'

    def test_concurrent_shipments_stop_at_zero(self):
        self.seed_material('M1', quantity=4)

        with ThreadPoolExecutor(max_workers=5) as executor:
            outcomes = list(executor.map(self._ship, [f"T{i}" for i in range(5)]))

        self.assertEqual(outcomes.count('shipped'), 4)
        self.assertEqual(outcomes.count('refused'), 1)
        self.assertEqual(self.material_quantity('M1'), 0)
        self.assertEqual(self.count(ShipmentDetail), 4)


if __name__ == '__main__':
    unittest.main()
