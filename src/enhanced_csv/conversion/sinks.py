"""
Sinks: build a caller-facing table from typed columns.

Any callable accepting ``dict[str, TypedColumn]`` works as a sink (``dict``
itself, ``astropy.table.QTable``, ...). dataframe_sink is the pandas one.
"""

import astropy.units as u
import numpy as np
import pandas as pd
from astropy.utils.masked import Masked

from enhanced_csv.conversion.columns import TypedColumn
from enhanced_csv.utils.logging import get_logger

log = get_logger(__name__)

UNITS_ATTR = "units"


def _split_unit(values: TypedColumn) -> tuple[np.ndarray, str | None]:
    """Separate quantity values from their unit."""
    if isinstance(values, Masked) and isinstance(values, u.Quantity):
        data = np.ma.MaskedArray(values.unmasked.value, mask=values.mask)
        return data, values.unit.to_string()
    if isinstance(values, u.Quantity):
        return values.value, values.unit.to_string()
    return values, None


def _array_unit(values: np.ndarray) -> str | None:
    for row in values:
        if isinstance(row, u.Quantity):
            return row.unit.to_string()
    return None


def to_pandas_array(values: np.ndarray) -> pd.api.extensions.ExtensionArray | np.ndarray:
    """
    Wrap a numeric or boolean array in the matching pandas nullable array.

    float16 has no pandas nullable counterpart and widens to Float32.
    Object arrays (strings, array columns) are returned unchanged.
    """
    if isinstance(values, np.ma.MaskedArray):
        data = np.asarray(values.data)
        mask = np.ma.getmaskarray(values)
    else:
        data = np.asarray(values)
        mask = np.zeros(len(data), dtype=bool)

    kind = data.dtype.kind
    if kind in "iu":
        return pd.arrays.IntegerArray(data, mask)
    if kind == "f":
        if data.dtype == np.float16:
            data = data.astype(np.float32)
        return pd.arrays.FloatingArray(data, mask)
    if kind == "b":
        return pd.arrays.BooleanArray(data, mask)
    return values


def dataframe_sink(columns: dict[str, TypedColumn]) -> pd.DataFrame:
    """
    Assemble typed columns into a DataFrame.

    Units are stripped from quantity columns and recorded in
    ``df.attrs["units"]``; array columns stay object columns of per-row arrays.

    Args:
        columns: Typed columns keyed by name, in declared order.

    Returns:
        DataFrame with pandas nullable dtypes for numeric and boolean columns.
    """
    data: dict[str, object] = {}
    units: dict[str, str] = {}

    for name, values in columns.items():
        if values.dtype == object:
            unit = _array_unit(values)
            data[name] = values
        else:
            plain, unit = _split_unit(values)
            data[name] = to_pandas_array(plain)
        if unit is not None:
            units[name] = unit

    df = pd.DataFrame(data)
    df.attrs[UNITS_ATTR] = units
    log.debug("Built DataFrame", rows=len(df), columns=len(df.columns), units=units)
    return df
