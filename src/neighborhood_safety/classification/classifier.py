"""
Neighborhood Safety - Crime Classifier

Maps a raw incident's crime code, and failing that its free-text
description, to a ``CrimeCategory``.

Lookup tables are immutable ``ClassificationTable`` instances owned by
the classifier, so alternate tables can be injected in tests or for a
different incident scheme.

Usage:
    from neighborhood_safety.classification import CrimeClassifier, LEGACY_TABLE

    classifier = CrimeClassifier(LEGACY_TABLE)
    classifier.classify("624", "BATTERY - SIMPLE ASSAULT")  # CrimeCategory.VIOLENT
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from neighborhood_safety.classification.categories import CATEGORY_PRIORITY, CrimeCategory

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"[^0-9]")


def normalize_code(code: Any, width: int = 3) -> str | None:
    """
    Normalize a crime code to a fixed-width, digits-only string.

    Non-digits are stripped and the result is re-padded with zeros to
    ``width``, so "0510", "510" and 510 all normalize to "510".
    Returns None when nothing numeric is left, so an empty code never
    collides with a real "000" entry.
    """
    if code is None or isinstance(code, bool):
        return None
    if isinstance(code, float):
        if not math.isfinite(code):
            return None
        if code.is_integer():
            code = int(code)
    digits = _NON_DIGITS.sub("", str(code))
    if not digits:
        return None
    return digits.lstrip("0").zfill(width)


@dataclass(frozen=True)
class ClassificationTable:
    """
    Immutable code and keyword lookup for one incident scheme.

    Attributes:
        name: Scheme name, used in logs
        codes: Normalized code -> category
        keywords: (category, lowercase keywords) pairs in match priority order
        code_width: Width codes are padded to before lookup
    """

    name: str
    codes: Mapping[str, CrimeCategory]
    keywords: tuple[tuple[CrimeCategory, tuple[str, ...]], ...]
    code_width: int = 3

    @classmethod
    def build(
        cls,
        name: str,
        codes: Mapping[CrimeCategory, Iterable[Any]] | None = None,
        keywords: Mapping[CrimeCategory, Iterable[str]] | None = None,
        code_width: int = 3,
    ) -> ClassificationTable:
        """
        Build a table from per-category code and keyword lists.

        Raises:
            ValueError: If a code is assigned to more than one category
        """
        code_map: dict[str, CrimeCategory] = {}
        for category, category_codes in (codes or {}).items():
            for raw in category_codes:
                normalized = normalize_code(raw, code_width)
                if normalized is None:
                    raise ValueError(f"Table '{name}': code {raw!r} has no digits")
                existing = code_map.get(normalized)
                if existing is not None and existing != category:
                    raise ValueError(
                        f"Table '{name}': code {normalized} mapped to both "
                        f"{existing} and {category}"
                    )
                code_map[normalized] = CrimeCategory(category)

        keyword_map = keywords or {}
        ordered = tuple(
            (category, tuple(k.lower() for k in keyword_map[category]))
            for category in CATEGORY_PRIORITY
            if keyword_map.get(category)
        )

        logger.debug(
            f"Built classification table '{name}' with {len(code_map)} codes",
            extra={"table": name, "codes": len(code_map)},
        )

        return cls(
            name=name,
            codes=MappingProxyType(code_map),
            keywords=ordered,
            code_width=code_width,
        )


class CrimeClassifier:
    """Classify incidents against a single ``ClassificationTable``."""

    def __init__(self, table: ClassificationTable):
        self.table = table

    def classify(self, code: Any, description: str | None = None) -> CrimeCategory | None:
        """
        Classify by code, falling back to description keywords.

        Never raises on malformed input; returns None when unclassified.
        """
        normalized = normalize_code(code, self.table.code_width)
        if normalized is not None:
            category = self.table.codes.get(normalized)
            if category is not None:
                return category

        return self.match_description(description)

    def match_description(self, description: str | None) -> CrimeCategory | None:
        """Case-insensitive substring match in category priority order."""
        if not description or not isinstance(description, str):
            return None

        text = description.lower()
        for category, keywords in self.table.keywords:
            if any(keyword in text for keyword in keywords):
                return category
        return None
