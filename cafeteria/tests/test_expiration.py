import unittest
from datetime import date, datetime
from cafeteria.domain.InventoryItem import InventoryItem
from cafeteria.domain.ReceivingEvent import ReceivingEvent, ReceivingLine
from cafeteria.logic.inventory.analysis import (
    classify_expiration, compute_expiration_report, compute_low_stock, days_until
)
from cafeteria.utilities.constants import EXPIRY_CRITICAL, EXPIRY_EXPIRED, EXPIRY_OK
from cafeteria.utilities.timeutils import months_ago

NOW = datetime(2024, 6, 1, 12, 0)


class TestExpiration(unittest.TestCase):

    def setUp(self):
        self.receiving = [
            ReceivingEvent("r2", datetime(2024, 5, 20, 9, 0), "Green Farm", "NF-2", [
                ReceivingLine("11", "Banana", 10, date(2024, 6, 11)),
                ReceivingLine("2", "Beans", 30, date(2024, 8, 30)),
                ReceivingLine("9", "Salt", 5, None),
            ]),
            ReceivingEvent("r1", datetime(2024, 1, 10, 9, 0), "Acme Foods", "NF-1", [
                ReceivingLine("5", "Chicken", 20, date(2024, 5, 29)),
            ]),
            ReceivingEvent("r0", datetime(2023, 11, 1, 9, 0), "Acme Foods", "NF-0", [
                ReceivingLine("1", "Rice", 50, date(2024, 5, 1)),
            ]),
        ]

    def test_days_until_rounds_up(self):
        self.assertEqual(days_until(date(2024, 6, 11), NOW), 10)
        self.assertEqual(days_until(date(2024, 5, 29), NOW), -3)
        self.assertEqual(days_until(date(2024, 6, 2), NOW), 1)
        self.assertEqual(days_until(date(2024, 6, 1), NOW), 0)

    def test_classification(self):
        self.assertEqual(classify_expiration(-1), EXPIRY_EXPIRED)
        self.assertEqual(classify_expiration(0), EXPIRY_CRITICAL)
        self.assertEqual(classify_expiration(30), EXPIRY_CRITICAL)
        self.assertEqual(classify_expiration(31), EXPIRY_OK)

    def test_report(self):
        rows = compute_expiration_report(self.receiving, now=NOW)
        self.assertEqual([(r.name, r.days_remaining, r.status) for r in rows], [
            ("Chicken", -3, EXPIRY_EXPIRED),
            ("Banana", 10, EXPIRY_CRITICAL),
            ("Beans", 90, EXPIRY_OK),
        ])
        self.assertEqual(rows[1].supplier, "Green Farm")

    def test_lookback_window(self):
        self.assertEqual(months_ago(NOW, 6), datetime(2023, 12, 1, 12, 0))
        self.assertEqual(months_ago(datetime(2024, 8, 31), 6), datetime(2024, 2, 29))
        rows = compute_expiration_report(self.receiving, now=NOW, lookback_months=12)
        self.assertIn("Rice", [r.name for r in rows])


class TestLowStock(unittest.TestCase):

    def test_low_stock_sorted_by_quantity(self):
        inventory = [
            InventoryItem("1", "Rice", quantity=15, unit="kg", min_stock=20),
            InventoryItem("2", "Beans", quantity=30, unit="kg", min_stock=15),
            InventoryItem("3", "Salt", quantity=2, unit="kg", min_stock=2),
        ]
        self.assertEqual([x["name"] for x in compute_low_stock(inventory)], ["Salt", "Rice"])


if __name__ == "__main__":
    unittest.main()
