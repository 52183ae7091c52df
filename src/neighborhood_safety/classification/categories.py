"""
Neighborhood Safety - Crime Categories

The closed set of tracked categories. An incident that matches none of
them is "unclassified" and is represented by ``None``: it still counts
toward a neighborhood's totals but toward no named category.
"""

from __future__ import annotations

from enum import StrEnum


class CrimeCategory(StrEnum):
    """Tracked crime category."""

    VIOLENT = "violent"
    CAR_THEFT = "car_theft"
    BREAK_IN = "break_in"
    PETTY_THEFT = "petty_theft"


# Keyword matching order: an incident matching several keyword sets gets
# the first category listed here.
CATEGORY_PRIORITY: tuple[CrimeCategory, ...] = (
    CrimeCategory.VIOLENT,
    CrimeCategory.CAR_THEFT,
    CrimeCategory.BREAK_IN,
    CrimeCategory.PETTY_THEFT,
)
