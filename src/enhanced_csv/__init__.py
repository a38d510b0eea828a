"""
Enhanced CSV: a reader for ECSV tables.

ECSV files carry a YAML schema in comment lines ahead of delimited rows. This
package parses that schema and materializes each column as a typed,
missing-aware and optionally unit-annotated array.
"""

from importlib.metadata import version

from enhanced_csv.conversion.sinks import dataframe_sink
from enhanced_csv.errors import ConversionError, EnhancedCSVError, SchemaError, UnitWarning
from enhanced_csv.reader import read, read_schema
from enhanced_csv.schemas.header import parse_header

__version__ = version("enhanced-csv")

__all__ = [
    "ConversionError",
    "EnhancedCSVError",
    "SchemaError",
    "UnitWarning",
    "__version__",
    "dataframe_sink",
    "parse_header",
    "read",
    "read_schema",
]
