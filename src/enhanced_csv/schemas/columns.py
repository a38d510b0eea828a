"""
Column spec resolution.

Turns raw header column specs into descriptors with a primitive type, a
column kind (scalar or variable-length array) and an optional unit.
"""

import re
from dataclasses import dataclass
from enum import Enum

import astropy.units as u
import numpy as np

from enhanced_csv.config.settings import ReaderConfig
from enhanced_csv.errors import SchemaError
from enhanced_csv.normalization.units import parse_unit
from enhanced_csv.schemas.header import ColumnSpecRaw, HeaderSchema
from enhanced_csv.utils.logging import get_logger

log = get_logger(__name__)

SUBTYPE_PATTERN = re.compile(r"^(\w+)(\[(.+)\])?$")
VARIABLE_LENGTH_MARKER = "null"


class PrimitiveType(str, Enum):
    """ECSV datatype keywords."""

    BOOL = "bool"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT16 = "float16"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    STRING = "string"

    @property
    def dtype(self) -> np.dtype:
        """numpy dtype holding values of this type."""
        if self is PrimitiveType.STRING:
            return np.dtype(object)
        return np.dtype(self.value)

    @property
    def is_integer(self) -> bool:
        return self.dtype.kind in "iu"

    @property
    def is_float(self) -> bool:
        return self.dtype.kind == "f"

    @classmethod
    def from_keyword(cls, keyword: str, column: str) -> "PrimitiveType":
        """
        Look up a datatype keyword.

        Raises:
            SchemaError: If the keyword is not an ECSV primitive type.
        """
        try:
            return cls(keyword)
        except ValueError:
            available = ", ".join(t.value for t in cls)
            msg = f"Column '{column}': unknown datatype {keyword!r}. Available: {available}"
            raise SchemaError(msg) from None


@dataclass(frozen=True)
class ScalarKind:
    """One value of the primitive type per row."""

    primitive: PrimitiveType


@dataclass(frozen=True)
class ArrayKind:
    """A JSON-encoded variable-length array of the primitive type per row."""

    primitive: PrimitiveType
    marker: str | None = VARIABLE_LENGTH_MARKER


ColumnKind = ScalarKind | ArrayKind


@dataclass(frozen=True)
class ColumnDescriptor:
    """Resolved column spec."""

    name: str
    datatype: PrimitiveType
    kind: ColumnKind
    unit: u.UnitBase | None = None

    @property
    def is_array(self) -> bool:
        return isinstance(self.kind, ArrayKind)

    @property
    def element_type(self) -> PrimitiveType:
        """Type of the individual values (subtype for array columns)."""
        return self.kind.primitive


def parse_subtype(subtype: str, column: str) -> ArrayKind:
    """
    Parse a subtype declaration like ``float64[null]``.

    Raises:
        SchemaError: For unknown element types or fixed/multi-dimensional shapes.
    """
    match = SUBTYPE_PATTERN.match(subtype)
    if match is None:
        msg = f"Column '{column}': malformed subtype {subtype!r}"
        raise SchemaError(msg)

    element = PrimitiveType.from_keyword(match.group(1), column)
    dims = match.group(3)
    if dims is not None and dims != VARIABLE_LENGTH_MARKER:
        msg = (
            f"Column '{column}': subtype {subtype!r} declares shape [{dims}]; "
            "only 1-D variable-length arrays ([null]) are supported"
        )
        raise SchemaError(msg)
    return ArrayKind(primitive=element, marker=dims)


def resolve_column_spec(
    spec: ColumnSpecRaw, config: ReaderConfig | None = None
) -> ColumnDescriptor:
    """
    Resolve a raw column spec.

    Args:
        spec: Column spec from the header.
        config: Reader config (unit modules); defaults apply when None.

    Returns:
        ColumnDescriptor for the column.

    Raises:
        SchemaError: On unknown types or unsupported subtypes. Unit problems
            never raise; the column just has no unit.
    """
    config = config or ReaderConfig()
    datatype = PrimitiveType.from_keyword(spec.datatype, spec.name)

    kind: ColumnKind
    if spec.subtype is not None:
        if datatype is not PrimitiveType.STRING:
            msg = (
                f"Column '{spec.name}': subtype {spec.subtype!r} requires datatype "
                f"'string', got {datatype.value!r}"
            )
            raise SchemaError(msg)
        kind = parse_subtype(spec.subtype, spec.name)
    else:
        kind = ScalarKind(primitive=datatype)

    unit = None
    if spec.unit is not None:
        unit = parse_unit(spec.unit, modules=config.unit_modules)

    return ColumnDescriptor(name=spec.name, datatype=datatype, kind=kind, unit=unit)


def resolve_columns(
    header: HeaderSchema, config: ReaderConfig | None = None
) -> list[ColumnDescriptor]:
    """Resolve every column of a header, in declared order."""
    descriptors = [resolve_column_spec(spec, config) for spec in header.columns]
    log.debug("Resolved columns", n_columns=len(descriptors))
    return descriptors
