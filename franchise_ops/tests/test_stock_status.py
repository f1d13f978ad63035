import unittest
from decimal import Decimal

from franchise_ops.core.stock_status import classify_stock_status
from franchise_ops.exceptions import ValidationError
from franchise_ops.models import StockStatus


class TestStockStatus(unittest.TestCase):
    """Test suite for the stock status classifier."""

    def test_examples_with_reorder_level_ten(self):
        self.assertEqual(classify_stock_status(10, 10), StockStatus.LOW)
        self.assertEqual(classify_stock_status(15, 10), StockStatus.DECENT)
        self.assertEqual(classify_stock_status(25, 10), StockStatus.HIGH)

    def test_boundaries(self):
        self.assertEqual(classify_stock_status(0, 10), StockStatus.LOW)
        self.assertEqual(classify_stock_status(11, 10), StockStatus.DECENT)
        self.assertEqual(classify_stock_status(20, 10), StockStatus.DECENT)
        self.assertEqual(classify_stock_status(21, 10), StockStatus.HIGH)

    def test_zero_reorder_level(self):
        self.assertEqual(classify_stock_status(0, 0), StockStatus.LOW)
        self.assertEqual(classify_stock_status(1, 0), StockStatus.HIGH)

    def test_negative_on_hand_is_low(self):
        self.assertEqual(classify_stock_status(-3, 10), StockStatus.LOW)

    def test_negative_reorder_level_rejected(self):
        with self.assertRaises(ValidationError):
            classify_stock_status(5, -1)

    def test_non_numeric_rejected(self):
        with self.assertRaises(ValidationError):
            classify_stock_status('10', 10)

        with self.assertRaises(ValidationError):
            classify_stock_status(10, None)

    def test_decimal_quantities(self):
        self.assertEqual(classify_stock_status(Decimal('15'), Decimal('10')), StockStatus.DECENT)
        self.assertEqual(classify_stock_status(Decimal('10.0'), 10), StockStatus.LOW)
        self.assertEqual(classify_stock_status(25, Decimal('10')), StockStatus.HIGH)

    def test_non_finite_rejected(self):
        for qoh, reorder in ((float('nan'), 10), (10, float('nan')), (float('inf'), 10), (Decimal('NaN'), 10)):
            with self.subTest(qoh=qoh, reorder=reorder):
                with self.assertRaises(ValidationError):
                    classify_stock_status(qoh, reorder)

    def test_status_labels(self):
        self.assertEqual(str(StockStatus.DECENT), 'Decent')
        self.assertEqual(StockStatus.from_string('High'), StockStatus.HIGH)

        with self.assertRaises(ValueError):
            StockStatus.from_string('Medium')


if __name__ == '__main__':
    unittest.main()
