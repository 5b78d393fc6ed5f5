from __future__ import annotations

import math
import unittest

from indices.classifier import (
    Category,
    categorize_ci,
    categorize_hei,
    categorize_hpi,
    categorize_overall,
    dominant_index,
)


class TestCategoryThresholds(unittest.TestCase):
    def test_hpi_upper_bounds_are_inclusive(self) -> None:
        self.assertIs(categorize_hpi(0.0), Category.GOOD)
        self.assertIs(categorize_hpi(25.0), Category.GOOD)
        self.assertIs(categorize_hpi(25.01), Category.ALERT)
        self.assertIs(categorize_hpi(50.0), Category.ALERT)
        self.assertIs(categorize_hpi(75.0), Category.POOR)
        self.assertIs(categorize_hpi(100.0), Category.CRITICAL)
        self.assertIs(categorize_hpi(100.01), Category.HAZARDOUS)

    def test_hei_upper_bounds_are_inclusive(self) -> None:
        self.assertIs(categorize_hei(8.0), Category.GOOD)
        self.assertIs(categorize_hei(10.0), Category.GOOD)
        self.assertIs(categorize_hei(20.0), Category.ALERT)
        self.assertIs(categorize_hei(30.0), Category.POOR)
        self.assertIs(categorize_hei(40.0), Category.CRITICAL)
        self.assertIs(categorize_hei(40.5), Category.HAZARDOUS)

    def test_ci_upper_bounds_are_inclusive(self) -> None:
        self.assertIs(categorize_ci(1.0), Category.GOOD)
        self.assertIs(categorize_ci(1.5), Category.ALERT)
        self.assertIs(categorize_ci(3.0), Category.POOR)
        self.assertIs(categorize_ci(5.0), Category.CRITICAL)
        self.assertIs(categorize_ci(5.01), Category.HAZARDOUS)

    def test_nan_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            categorize_hpi(math.nan)

    def test_labels_and_colors(self) -> None:
        self.assertEqual(Category.GOOD.label, "Good")
        self.assertEqual(Category.HAZARDOUS.color, "#991b1b")
        self.assertEqual([category.rank for category in Category], [0, 1, 2, 3, 4])

    def test_categories_are_ordered(self) -> None:
        self.assertLess(Category.GOOD, Category.ALERT)
        self.assertGreater(Category.HAZARDOUS, Category.CRITICAL)
        self.assertEqual(max(Category.POOR, Category.ALERT), Category.POOR)


class TestOverallCategory(unittest.TestCase):
    def test_most_severe_index_wins(self) -> None:
        self.assertIs(categorize_overall(100.0, 8.0, 1.0), Category.CRITICAL)
        self.assertEqual(dominant_index(100.0, 8.0, 1.0), "HPI")

    def test_hei_can_dominate(self) -> None:
        self.assertIs(categorize_overall(10.0, 15.0, 0.5), Category.ALERT)
        self.assertEqual(dominant_index(10.0, 15.0, 0.5), "HEI")

    def test_ci_can_dominate(self) -> None:
        self.assertIs(categorize_overall(10.0, 5.0, 6.0), Category.HAZARDOUS)
        self.assertEqual(dominant_index(10.0, 5.0, 6.0), "CI")

    def test_ties_prefer_hpi_then_hei(self) -> None:
        self.assertEqual(dominant_index(30.0, 15.0, 1.5), "HPI")
        self.assertEqual(dominant_index(10.0, 15.0, 1.5), "HEI")
        self.assertEqual(dominant_index(0.0, 0.0, 0.0), "HPI")


if __name__ == "__main__":
    unittest.main()
