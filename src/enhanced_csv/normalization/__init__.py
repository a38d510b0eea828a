"""
Normalization of header text into forms downstream libraries accept.
"""

from enhanced_csv.normalization.units import (
    UNIT_RULES,
    NormalizedUnit,
    UnitRule,
    normalize_unit_text,
    parse_unit,
)

__all__ = [
    "UNIT_RULES",
    "NormalizedUnit",
    "UnitRule",
    "normalize_unit_text",
    "parse_unit",
]
