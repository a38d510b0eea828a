"""
Conversion layer: raw text columns to typed arrays, and typed arrays to tables.
"""

from enhanced_csv.conversion.columns import (
    TypedColumn,
    convert_column,
    convert_columns,
)
from enhanced_csv.conversion.sinks import dataframe_sink, to_pandas_array

__all__ = [
    "TypedColumn",
    "convert_column",
    "convert_columns",
    "dataframe_sink",
    "to_pandas_array",
]
