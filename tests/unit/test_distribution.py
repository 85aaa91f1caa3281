"""
Unit Tests - Category Distribution
"""
from marketplace_reports.reporting.distribution import category_distribution


class TestCategoryDistribution:
    """Tests for category_distribution"""

    def test_shares_of_total_stock(self):
        products = [
            {"category": "A", "stock": 30},
            {"category": "B", "stock": 10},
            {"category": "C", "stock": 0},
        ]

        shares = category_distribution(products)

        assert [(s.name, s.percentage, s.stock_count) for s in shares] == [("A", 75, 30), ("B", 25, 10)]

    def test_sums_stock_per_category(self, sample_products):
        shares = category_distribution(sample_products)

        assert [(s.name, s.stock_count) for s in shares] == [("Dresses", 30), ("Shirts", 10)]

    def test_skips_incomplete_products(self):
        products = [
            {"category": None, "stock": 50},
            {"category": "", "stock": 50},
            {"category": "A", "stock": None},
            {"category": "A", "stock": -4},
            {"category": "B", "stock": 2},
        ]

        shares = category_distribution(products)

        assert [(s.name, s.percentage) for s in shares] == [("B", 100)]

    def test_no_stock(self):
        assert category_distribution([{"category": "A", "stock": 0}]) == []
        assert category_distribution([]) == []

    def test_ties_keep_first_seen_order(self):
        products = [
            {"category": "Shoes", "stock": 5},
            {"category": "Bags", "stock": 5},
            {"category": "Hats", "stock": 10},
        ]

        shares = category_distribution(products)

        assert [s.name for s in shares] == ["Hats", "Shoes", "Bags"]

    def test_percentages_rounded_independently(self):
        products = [{"category": name, "stock": 1} for name in ("A", "B", "C")]

        shares = category_distribution(products)

        assert [s.percentage for s in shares] == [33, 33, 33]
        assert all(0 <= s.percentage <= 100 for s in shares)
