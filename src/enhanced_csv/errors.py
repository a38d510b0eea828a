"""
Error taxonomy for ECSV reading.

Structural and value errors abort a read; unit problems only warn.
"""


class EnhancedCSVError(Exception):
    """Base class for all fatal read errors."""


class SchemaError(EnhancedCSVError):
    """Malformed or unsupported header schema, or a schema/data mismatch."""


class ConversionError(EnhancedCSVError):
    """A text token could not be converted to its declared type."""

    def __init__(self, column: str, value: object, reason: str) -> None:
        self.column = column
        self.value = value
        self.reason = reason
        super().__init__(f"Column '{column}': cannot convert {value!r} ({reason})")


class UnitWarning(UserWarning):
    """A unit string was unsupported or unparseable; the column stays unitless."""
