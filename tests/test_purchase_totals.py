import unittest
from types import SimpleNamespace

from pharmadesk.services.purchase_totals import item_amount, line_amounts, purchase_total


class PurchaseTotalsTest(unittest.TestCase):
    def test_line_amounts_without_adjustments(self):
        self.assertEqual(line_amounts(100, 8.5), (850.0, 850.0))

    def test_line_amounts_apply_discount_then_tax(self):
        gross, net = line_amounts(10, 20, discount_percentage=10, tax_percentage=5)
        self.assertEqual(gross, 200.0)
        self.assertEqual(net, 190.0)

    def test_item_amount_falls_back_to_quantity_times_rate(self):
        item = SimpleNamespace(quantity=3, purchase_rate=2.5, net_amount=0)
        self.assertEqual(item_amount(item), 7.5)

    def test_purchase_total_sums_items(self):
        items = [
            SimpleNamespace(quantity=10, purchase_rate=5, net_amount=50),
            SimpleNamespace(quantity=4, purchase_rate=2.25, net_amount=None),
        ]
        self.assertEqual(purchase_total(items), 59.0)

    def test_empty_purchase_totals_zero(self):
        self.assertEqual(purchase_total([]), 0)


if __name__ == "__main__":
    unittest.main()
