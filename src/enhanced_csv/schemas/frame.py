"""
Pandera data contracts derived from ECSV headers.

build_frame_schema describes exactly what dataframe_sink produces for a given
header, so a DataFrame can be checked against the file it came from.
"""

import pandera.pandas as pa

from enhanced_csv.schemas.columns import ColumnDescriptor, PrimitiveType

# pandas nullable dtype per ECSV primitive
PANDAS_DTYPES: dict[PrimitiveType, str] = {
    PrimitiveType.BOOL: "boolean",
    PrimitiveType.INT8: "Int8",
    PrimitiveType.INT16: "Int16",
    PrimitiveType.INT32: "Int32",
    PrimitiveType.INT64: "Int64",
    PrimitiveType.UINT8: "UInt8",
    PrimitiveType.UINT16: "UInt16",
    PrimitiveType.UINT32: "UInt32",
    PrimitiveType.UINT64: "UInt64",
    PrimitiveType.FLOAT16: "Float32",  # no nullable float16 in pandas
    PrimitiveType.FLOAT32: "Float32",
    PrimitiveType.FLOAT64: "Float64",
    PrimitiveType.STRING: "object",
}


def _describe(descriptor: ColumnDescriptor) -> str:
    parts = [descriptor.datatype.value]
    if descriptor.is_array:
        parts.append(f"array of {descriptor.element_type.value}")
    if descriptor.unit is not None:
        parts.append(f"unit: {descriptor.unit.to_string()}")
    return ", ".join(parts)


def build_frame_schema(
    descriptors: list[ColumnDescriptor], name: str = "ECSVTable"
) -> pa.DataFrameSchema:
    """
    Build the Pandera schema of a DataFrame produced by dataframe_sink.

    Args:
        descriptors: Resolved column descriptors in declared order.
        name: Schema name used in validation error messages.

    Returns:
        Ordered, strict DataFrameSchema with nullable columns.
    """
    columns = {}
    for descriptor in descriptors:
        dtype = "object" if descriptor.is_array else PANDAS_DTYPES[descriptor.datatype]
        columns[descriptor.name] = pa.Column(
            dtype,
            nullable=True,
            description=_describe(descriptor),
        )
    return pa.DataFrameSchema(columns, name=name, strict=True, ordered=True)
