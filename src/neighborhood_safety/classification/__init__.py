"""
Neighborhood Safety - Crime Classification

Components:
    - CrimeCategory: Closed set of tracked categories
    - ClassificationTable: Immutable code/keyword lookup for one scheme
    - CrimeClassifier: Code lookup with description keyword fallback

Usage:
    from neighborhood_safety.classification import CrimeClassifier, LEGACY_TABLE

    classifier = CrimeClassifier(LEGACY_TABLE)
    category = classifier.classify("0510", "VEHICLE - STOLEN")
"""

from neighborhood_safety.classification.categories import CATEGORY_PRIORITY, CrimeCategory
from neighborhood_safety.classification.classifier import (
    ClassificationTable,
    CrimeClassifier,
    normalize_code,
)
from neighborhood_safety.classification.tables import (
    LEGACY_TABLE,
    NIBRS_TABLE,
    legacy_table,
    nibrs_table,
)

__all__ = [
    "CATEGORY_PRIORITY",
    "CrimeCategory",
    "ClassificationTable",
    "CrimeClassifier",
    "normalize_code",
    "LEGACY_TABLE",
    "NIBRS_TABLE",
    "legacy_table",
    "nibrs_table",
]
