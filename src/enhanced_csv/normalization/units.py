"""
Unit string normalization and parsing.

ECSV writers emit unit strings in several dialects (FITS, CDS, astropy's own
generic format). The rewrite rules below are a pure function of the text, so
they can be tested without astropy; parse_unit then hands the cleaned text to
astropy.units and degrades to "no unit" on failure.
"""

import importlib
import re
import warnings
from dataclasses import dataclass

import astropy.units as u

from enhanced_csv.errors import UnitWarning
from enhanced_csv.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class UnitRule:
    """One regex rewrite applied to a unit string."""

    pattern: re.Pattern[str]
    replacement: str
    warn: bool = False


@dataclass(frozen=True)
class NormalizedUnit:
    """Result of applying the rewrite rules."""

    text: str
    dropped: tuple[str, ...] = ()


UNIT_RULES: tuple[UnitRule, ...] = (
    # Detector-specific units: per beam, per pixel, electron counts
    UnitRule(re.compile(r"'?\b(/beam|/pix|electron)\b'?"), "", warn=True),
    UnitRule(re.compile(r"^\."), ""),
    UnitRule(re.compile(r"\.$"), ""),
    # Only a lone ** between non-asterisks is a power operator
    UnitRule(re.compile(r"([^*])\*\*([^*])"), r"\1^\2"),
)

NOT_FOUND_MESSAGE = "is not a valid unit"


def normalize_unit_text(
    raw: str, rules: tuple[UnitRule, ...] = UNIT_RULES
) -> NormalizedUnit:
    """
    Rewrite a unit string into the grammar accepted by astropy's generic format.

    Args:
        raw: Unit string as written in the header.
        rules: Ordered rewrite rules.

    Returns:
        NormalizedUnit with the cleaned text and any tokens that were dropped
        by warning rules.
    """
    text = raw
    dropped: list[str] = []
    for rule in rules:
        if rule.warn:
            dropped.extend(m.group(0) for m in rule.pattern.finditer(text))
        text = rule.pattern.sub(rule.replacement, text)
    return NormalizedUnit(text=text.strip(), dropped=tuple(dropped))


def _warn(message: str, **context: object) -> None:
    log.warning(message, **context)
    warnings.warn(message, UnitWarning, stacklevel=4)


def _enabled_unit_modules(names: list[str]) -> list[object]:
    return [importlib.import_module(f"astropy.units.{name}") for name in names]


def parse_unit(raw: str, modules: list[str] | None = None) -> u.UnitBase | None:
    """
    Parse a header unit string.

    Unsupported tokens are stripped with a UnitWarning. If the cleaned text is
    still not a unit astropy understands, a UnitWarning is emitted and None is
    returned; this function never raises for bad unit text.

    Args:
        raw: Unit string as written in the header.
        modules: Extra astropy.units submodules to enable while parsing.

    Returns:
        The parsed unit, or None.
    """
    normalized = normalize_unit_text(raw)
    for token in normalized.dropped:
        _warn(f"ignoring the unsupported '{token}' unit in '{raw}'", token=token, unit=raw)

    if not normalized.text:
        _warn(f"cannot parse unit '{raw}', ignoring it", unit=raw)
        return None

    unit_modules = _enabled_unit_modules(modules if modules is not None else ["imperial"])
    try:
        with u.add_enabled_units(unit_modules):
            unit = u.Unit(normalized.text, format="generic", parse_strict="raise")
    except (ValueError, TypeError) as e:
        if NOT_FOUND_MESSAGE in str(e):
            _warn(f"cannot parse unit '{raw}', ignoring it", unit=raw)
        else:
            _warn(f"cannot parse unit '{raw}', ignoring it: {e}", unit=raw, error=str(e))
        return None

    log.debug("Parsed unit", unit=raw, parsed=unit.to_string())
    return unit
