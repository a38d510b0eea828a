"""
Schema layer: ECSV header parsing, column resolution and frame contracts.
"""

from enhanced_csv.schemas.columns import (
    ArrayKind,
    ColumnDescriptor,
    ColumnKind,
    PrimitiveType,
    ScalarKind,
    resolve_column_spec,
    resolve_columns,
)
from enhanced_csv.schemas.frame import build_frame_schema
from enhanced_csv.schemas.header import (
    ColumnSpecRaw,
    HeaderLoader,
    HeaderSchema,
    load_header_text,
    parse_header,
    parse_schema,
)

__all__ = [
    "ArrayKind",
    "ColumnDescriptor",
    "ColumnKind",
    "ColumnSpecRaw",
    "HeaderLoader",
    "HeaderSchema",
    "PrimitiveType",
    "ScalarKind",
    "build_frame_schema",
    "load_header_text",
    "parse_header",
    "parse_schema",
    "resolve_column_spec",
    "resolve_columns",
]
