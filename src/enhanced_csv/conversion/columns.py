"""
Type-directed column conversion.

Turns raw text columns into typed numpy arrays using resolved descriptors.
Columns are independent of each other, so conversion can run on a thread pool.
"""

import json
import math
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any

import astropy.units as u
import numpy as np
from astropy.utils.masked import Masked

from enhanced_csv.errors import ConversionError
from enhanced_csv.ingestion.rows import RawColumn
from enhanced_csv.schemas.columns import (
    ArrayKind,
    ColumnDescriptor,
    PrimitiveType,
    ScalarKind,
)
from enhanced_csv.utils.logging import get_logger

log = get_logger(__name__)

TRUE_TOKENS = frozenset({"t", "true", "1"})
FALSE_TOKENS = frozenset({"f", "false", "0"})

TypedColumn = np.ndarray


class _InvalidValue(ValueError):
    """Internal: a single value is not representable; caught per column."""


def parse_bool_token(token: str) -> bool:
    """Parse a textual boolean (case-insensitive t/true/1, f/false/0)."""
    lowered = token.strip().lower()
    if lowered in TRUE_TOKENS:
        return True
    if lowered in FALSE_TOKENS:
        return False
    msg = "not a boolean literal"
    raise _InvalidValue(msg)


def _check_int_range(value: int, primitive: PrimitiveType) -> int:
    info = np.iinfo(primitive.dtype)
    if not info.min <= value <= info.max:
        msg = f"out of range for {primitive.value} [{info.min}, {info.max}]"
        raise _InvalidValue(msg)
    return value


def _check_no_separators(token: str, primitive: PrimitiveType) -> None:
    # int() and float() accept "1_000"; numeric cells carry no digit grouping
    if "_" in token:
        msg = f"not a valid {primitive.value}"
        raise _InvalidValue(msg)


def parse_int_token(token: str, primitive: PrimitiveType) -> int:
    """Parse integer text; integral float text such as ``3.0`` is accepted."""
    _check_no_separators(token, primitive)
    try:
        value = int(token)
    except ValueError:
        try:
            as_float = float(token)
        except ValueError:
            msg = f"not a valid {primitive.value}"
            raise _InvalidValue(msg) from None
        if not math.isfinite(as_float) or not as_float.is_integer():
            msg = f"not an integral value for {primitive.value}"
            raise _InvalidValue(msg) from None
        value = int(as_float)
    return _check_int_range(value, primitive)


def parse_float_token(token: str, primitive: PrimitiveType) -> float:
    """Parse float text, including nan/inf literals."""
    _check_no_separators(token, primitive)
    try:
        return float(token)
    except ValueError:
        msg = f"not a valid {primitive.value}"
        raise _InvalidValue(msg) from None


def _parse_scalar_token(token: str, primitive: PrimitiveType) -> Any:
    if primitive is PrimitiveType.BOOL:
        return parse_bool_token(token)
    if primitive.is_integer:
        return parse_int_token(token, primitive)
    return parse_float_token(token, primitive)


def _build_array(values: list[Any], mask: list[bool], primitive: PrimitiveType) -> np.ndarray:
    """Strict array when nothing is missing, masked array otherwise."""
    data = np.array(values, dtype=primitive.dtype)
    if any(mask):
        return np.ma.MaskedArray(data, mask=np.array(mask, dtype=bool))
    return data


def _placeholder(primitive: PrimitiveType) -> Any:
    if primitive is PrimitiveType.STRING:
        return ""
    if primitive is PrimitiveType.BOOL:
        return False
    return 0


def convert_scalar(raw: RawColumn, primitive: PrimitiveType, column: str) -> np.ndarray:
    """
    Convert a column holding one value per row.

    Args:
        raw: Raw text tokens, None for missing.
        primitive: Declared datatype.
        column: Column name for error messages.

    Returns:
        The raw array for strings; otherwise a numpy array of the primitive
        dtype, masked if any row is missing.

    Raises:
        ConversionError: If a token is not representable.
    """
    if primitive is PrimitiveType.STRING:
        return raw

    values: list[Any] = []
    mask: list[bool] = []
    for token in raw:
        if token is None:
            values.append(_placeholder(primitive))
            mask.append(True)
            continue
        try:
            values.append(_parse_scalar_token(token, primitive))
        except _InvalidValue as e:
            raise ConversionError(column, token, str(e)) from e
        mask.append(False)

    return _build_array(values, mask, primitive)


def _decode_json_list(token: str) -> list[Any]:
    try:
        decoded = json.loads(token)
    except json.JSONDecodeError as e:
        msg = f"invalid JSON array: {e.msg}"
        raise _InvalidValue(msg) from e
    if not isinstance(decoded, list):
        msg = "not a JSON array"
        raise _InvalidValue(msg)
    return decoded


def _convert_element(element: Any, primitive: PrimitiveType) -> Any:
    if primitive is PrimitiveType.STRING:
        if not isinstance(element, str):
            msg = "array element is not a string"
            raise _InvalidValue(msg)
        return element
    # bool is an int subclass in Python; JSON true/false is never numeric here
    if isinstance(element, bool) or not isinstance(element, int | float):
        msg = f"array element {element!r} is not numeric"
        raise _InvalidValue(msg)
    if primitive.is_integer:
        if isinstance(element, float):
            if not math.isfinite(element) or not element.is_integer():
                msg = f"array element {element!r} is not integral"
                raise _InvalidValue(msg)
            element = int(element)
        return _check_int_range(element, primitive)
    return float(element)


def _decode_bool_array(elements: list[Any]) -> list[Any]:
    """Strict JSON booleans first, then textual booleans."""
    if all(e is None or isinstance(e, bool) for e in elements):
        return elements
    if not all(e is None or isinstance(e, str) for e in elements):
        msg = "array elements are neither booleans nor strings"
        raise _InvalidValue(msg)
    return [None if e is None else parse_bool_token(e) for e in elements]


def decode_array_token(token: str, primitive: PrimitiveType) -> np.ndarray:
    """
    Decode one JSON array cell.

    ``null`` elements are masked; NaN and Infinity literals are accepted for
    float subtypes.

    Raises:
        ValueError: If the token is not a JSON array of the subtype.
    """
    elements = _decode_json_list(token)
    if primitive is PrimitiveType.BOOL:
        elements = _decode_bool_array(elements)

    values: list[Any] = []
    mask: list[bool] = []
    for element in elements:
        if element is None:
            values.append(_placeholder(primitive))
            mask.append(True)
        elif primitive is PrimitiveType.BOOL:
            values.append(element)
            mask.append(False)
        else:
            values.append(_convert_element(element, primitive))
            mask.append(False)
    return _build_array(values, mask, primitive)


def convert_array(raw: RawColumn, primitive: PrimitiveType, column: str) -> np.ndarray:
    """
    Convert a column whose cells are JSON-encoded variable-length arrays.

    Returns:
        Object array with one entry per row: None for a missing row, else a
        (possibly masked) array of the subtype.

    Raises:
        ConversionError: If any cell cannot be decoded.
    """
    rows = np.empty(len(raw), dtype=object)
    for i, token in enumerate(raw):
        if token is None:
            rows[i] = None
            continue
        try:
            rows[i] = decode_array_token(token, primitive)
        except _InvalidValue as e:
            raise ConversionError(column, token, str(e)) from e
    return rows


def _with_unit(values: np.ndarray, unit: u.UnitBase) -> u.Quantity:
    if isinstance(values, np.ma.MaskedArray):
        return Masked(u.Quantity(values.data, unit), mask=values.mask)
    return values * unit


def apply_unit(values: np.ndarray, descriptor: ColumnDescriptor) -> TypedColumn:
    """
    Attach the descriptor's unit as the outermost step.

    Array columns get the unit on every present row.

    Raises:
        ConversionError: If the values cannot carry a unit (e.g. strings).
    """
    unit = descriptor.unit
    if unit is None:
        return values

    try:
        if descriptor.is_array:
            result = np.empty(len(values), dtype=object)
            for i, row in enumerate(values):
                result[i] = None if row is None else _with_unit(row, unit)
            return result
        return _with_unit(values, unit)
    except (TypeError, ValueError) as e:
        raise ConversionError(
            descriptor.name, unit.to_string(), f"values cannot carry a unit: {e}"
        ) from e


def convert_column(raw: RawColumn, descriptor: ColumnDescriptor) -> TypedColumn:
    """
    Convert one raw column according to its descriptor.

    Args:
        raw: Raw text tokens, None for missing.
        descriptor: Resolved column descriptor.

    Returns:
        Typed column.

    Raises:
        ConversionError: If any value cannot be converted.
    """
    kind = descriptor.kind
    if isinstance(kind, ArrayKind):
        values = convert_array(raw, kind.primitive, descriptor.name)
    elif isinstance(kind, ScalarKind):
        values = convert_scalar(raw, kind.primitive, descriptor.name)
    else:
        msg = f"Unhandled column kind: {kind!r}"
        raise TypeError(msg)

    return apply_unit(values, descriptor)


def convert_columns(
    raw_columns: dict[str, RawColumn],
    descriptors: list[ColumnDescriptor],
    max_workers: int = 1,
) -> dict[str, TypedColumn]:
    """
    Convert all columns, optionally in parallel.

    Args:
        raw_columns: Raw columns keyed by name.
        descriptors: Descriptors in declared order.
        max_workers: Thread count; 1 converts sequentially.

    Returns:
        Typed columns keyed by name, in declared order.
    """
    if max_workers <= 1 or len(descriptors) <= 1:
        return {d.name: convert_column(raw_columns[d.name], d) for d in descriptors}

    log.debug("Converting columns in parallel", workers=max_workers)
    results: dict[str, TypedColumn] = {}

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(convert_column, raw_columns[d.name], d): d.name
            for d in descriptors
        }

        for future in as_completed(futures):
            name = futures[future]
            try:
                results[name] = future.result()
            except Exception as e:
                log.error("Failed to convert column", column=name, error=str(e))
                raise

    return {d.name: results[d.name] for d in descriptors}
