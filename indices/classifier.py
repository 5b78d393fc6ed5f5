"""
indices/classifier.py

Maps HPI, HEI and CI values onto ordered severity categories.
No index math, no I/O, no side effects.

Thresholds are inclusive upper bounds:

    index | Good | Alert | Poor | Critical | Hazardous
    ------|------|-------|------|----------|----------
    HPI   | <=25 | <=50  | <=75 | <=100    | >100
    HEI   | <=10 | <=20  | <=30 | <=40     | >40
    CI    | <=1  | <=2   | <=3  | <=5      | >5
"""

from __future__ import annotations

import enum
import math


class Category(enum.Enum):
    """
    Severity level; members compare by ``rank``.
    """

    GOOD = ("Good", "#22c55e", 0)
    ALERT = ("Alert", "#eab308", 1)
    POOR = ("Poor", "#f97316", 2)
    CRITICAL = ("Critical", "#ef4444", 3)
    HAZARDOUS = ("Hazardous", "#991b1b", 4)

    def __init__(self, label: str, color: str, rank: int) -> None:
        self.label = label
        self.color = color
        self.rank = rank

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Category):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Category):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Category):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Category):
            return NotImplemented
        return self.rank >= other.rank


_HPI_THRESHOLDS: tuple[tuple[float, Category], ...] = (
    (25.0, Category.GOOD),
    (50.0, Category.ALERT),
    (75.0, Category.POOR),
    (100.0, Category.CRITICAL),
)

_HEI_THRESHOLDS: tuple[tuple[float, Category], ...] = (
    (10.0, Category.GOOD),
    (20.0, Category.ALERT),
    (30.0, Category.POOR),
    (40.0, Category.CRITICAL),
)

_CI_THRESHOLDS: tuple[tuple[float, Category], ...] = (
    (1.0, Category.GOOD),
    (2.0, Category.ALERT),
    (3.0, Category.POOR),
    (5.0, Category.CRITICAL),
)

# Precedence for ties in the overall category: first hit wins.
INDEX_ORDER: tuple[str, ...] = ("HPI", "HEI", "CI")


def _classify(value: float, thresholds: tuple[tuple[float, Category], ...], index: str) -> Category:
    if math.isnan(value):
        raise ValueError(f"{index} value must be a number, got NaN.")
    for threshold, category in thresholds:
        if value <= threshold:
            return category
    return Category.HAZARDOUS


def categorize_hpi(hpi: float) -> Category:
    return _classify(hpi, _HPI_THRESHOLDS, "HPI")


def categorize_hei(hei: float) -> Category:
    return _classify(hei, _HEI_THRESHOLDS, "HEI")


def categorize_ci(ci: float) -> Category:
    return _classify(ci, _CI_THRESHOLDS, "CI")


def _ranked(hpi: float, hei: float, ci: float) -> list[tuple[str, Category]]:
    return list(
        zip(
            INDEX_ORDER,
            (categorize_hpi(hpi), categorize_hei(hei), categorize_ci(ci)),
        )
    )


def dominant_index(hpi: float, hei: float, ci: float) -> str:
    """
    Name the index whose category sets the overall category.

    Ties resolve to the earliest of HPI, HEI, CI.
    """

    # max() keeps the first of equal keys.
    name, _ = max(_ranked(hpi, hei, ci), key=lambda pair: pair[1].rank)
    return name


def categorize_overall(hpi: float, hei: float, ci: float) -> Category:
    """Return the most severe of the three per-index categories."""
    _, category = max(_ranked(hpi, hei, ci), key=lambda pair: pair[1].rank)
    return category
